"""Service interfaces (ports) for the application layer.

Protocols define contracts for cache, payment and email backends (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.billing import PaymentIntentResult, SavedPaymentMethod
    from app.application.dtos.email import OutgoingEmail


# Cache service interface
class ICacheService(Protocol):
    """Minimal cache protocol for branding and org settings (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""


# Payment gateway interface
class IPaymentGateway(Protocol):
    """Card payments on an org's Stripe connected account."""

    async def create_customer(
        self,
        connected_account_id: str,
        email: str | None,
        name: str | None,
        metadata: dict[str, str],
    ) -> str:
        """Create a customer and return its id."""

    async def list_card_payment_methods(
        self, connected_account_id: str, customer_id: str
    ) -> list[SavedPaymentMethod]: ...

    async def retrieve_payment_method(
        self, connected_account_id: str, payment_method_id: str
    ) -> SavedPaymentMethod: ...

    async def attach_payment_method(
        self, connected_account_id: str, customer_id: str, payment_method_id: str
    ) -> SavedPaymentMethod: ...

    async def detach_payment_method(
        self, connected_account_id: str, payment_method_id: str
    ) -> None: ...

    async def charge_saved_method(
        self,
        connected_account_id: str,
        customer_id: str,
        payment_method_id: str,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        description: str | None = None,
    ) -> PaymentIntentResult:
        """Confirm an off-session charge; raises on decline or required authentication."""

    def construct_webhook_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Verify and parse a webhook delivery."""


# Email sender interface
class IEmailSender(Protocol):
    async def send(self, message: OutgoingEmail) -> str | None:
        """Deliver message; return provider message id when available."""
