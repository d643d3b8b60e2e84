"""Program purchase and Stripe webhook use cases."""

from app.application.use_cases.billing.billing_operations import BillingService

__all__ = ["BillingService"]
