"""Payment provider gateways (Stripe Connect)."""

from app.infrastructure.external.payments.stripe_gateway import StripeGateway

__all__ = ["StripeGateway"]
