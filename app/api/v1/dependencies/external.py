"""External service dependencies: Stripe gateway and email sender."""

from __future__ import annotations

from app.application.interfaces.services import IEmailSender, IPaymentGateway
from app.core.config import get_settings
from app.infrastructure.external.email.factory import EmailSenderFactory
from app.infrastructure.external.payments import StripeGateway


def get_payment_gateway() -> IPaymentGateway:
    """Stripe Connect gateway; calls answer 503 when STRIPE_SECRET_KEY is unset."""
    settings = get_settings()
    return StripeGateway(
        settings.stripe_secret_key.get_secret_value() if settings.stripe_secret_key else None,
        settings.stripe_webhook_secret.get_secret_value()
        if settings.stripe_webhook_secret
        else None,
    )


def get_email_sender() -> IEmailSender:
    """Resend sender when RESEND_API_KEY is set, else a logging sender."""
    return EmailSenderFactory.create_sender()
