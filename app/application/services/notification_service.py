"""Tenant-branded transactional email.

Mail goes out from the org's verified domain when it has one. If the
provider refuses a whitelabel sender, the message is retried once from the
platform sender. Delivery failures are logged and reported as False;
callers never fail because an email could not be sent.
"""

from __future__ import annotations

import logging
from datetime import datetime

from app.application.dtos.email import OutgoingEmail
from app.application.dtos.scheduling import BookingResult
from app.application.interfaces.repositories import IUserRepository
from app.application.interfaces.services import IEmailSender
from app.application.services import email_templates
from app.application.use_cases.organizations.organization_operations import (
    OrganizationService,
)
from app.domain.enums import EmailKind

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        email_sender: IEmailSender,
        org_service: OrganizationService,
        user_repo: IUserRepository,
    ) -> None:
        self.email_sender = email_sender
        self.org_service = org_service
        self.user_repo = user_repo

    async def send_tenant_email(
        self,
        organization_id: str | None,
        to: list[str],
        subject: str,
        html: str,
        text: str | None = None,
        kind: EmailKind = EmailKind.NOTIFICATIONS,
        tags: dict[str, str] | None = None,
    ) -> bool:
        """Send from the org's sender; True when the provider accepted the message."""
        sender, is_whitelabel = await self.org_service.resolve_sender(organization_id, kind)
        message = OutgoingEmail(
            from_address=sender,
            to=to,
            subject=subject,
            html=html,
            text=text,
            reply_to=await self.org_service.reply_to(organization_id),
            tags=tags or {},
        )
        try:
            await self.email_sender.send(message)
            return True
        except Exception:
            if not is_whitelabel:
                logger.exception("Email %r to %s failed", subject, to)
                return False
            logger.warning(
                "Whitelabel sender %s failed for org %s; retrying from platform sender",
                sender,
                organization_id,
            )
        platform, _ = await self.org_service.resolve_sender(None, kind)
        message.from_address = platform
        try:
            await self.email_sender.send(message)
            return True
        except Exception:
            logger.exception("Email %r to %s failed from platform sender", subject, to)
            return False

    async def _app_title(self, organization_id: str) -> str:
        return (await self.org_service.get_branding(organization_id)).app_title

    async def _coach_email(self, booking: BookingResult) -> str | None:
        host_id = booking.event.host_user_id or booking.event.created_by
        if not host_id:
            return None
        host = await self.user_repo.get_by_id(host_id)
        return host.email if host and not host.deleted else None

    async def _send_pair(
        self,
        booking: BookingResult,
        prospect_mail: tuple[str, str, str],
        coach_mail: tuple[str, str, str],
        tag: str,
    ) -> None:
        org_id = booking.event.organization_id
        if booking.event.prospect_email:
            subject, html, text = prospect_mail
            await self.send_tenant_email(
                org_id, [booking.event.prospect_email], subject, html, text, tags={"type": tag}
            )
        coach_email = await self._coach_email(booking)
        if coach_email:
            subject, html, text = coach_mail
            await self.send_tenant_email(
                org_id, [coach_email], subject, html, text, tags={"type": f"{tag}_coach"}
            )

    async def send_booking_confirmation(self, booking: BookingResult) -> None:
        title = await self._app_title(booking.event.organization_id)
        await self._send_pair(
            booking,
            email_templates.intake_confirmation(booking, title),
            email_templates.coach_notification(booking, title),
            "intake_confirmation",
        )

    async def send_booking_rescheduled(
        self, booking: BookingResult, previous_start: datetime
    ) -> None:
        title = await self._app_title(booking.event.organization_id)
        notice = email_templates.reschedule_notice(booking, previous_start, title)
        await self._send_pair(booking, notice, notice, "intake_rescheduled")

    async def send_booking_cancelled(self, booking: BookingResult) -> None:
        title = await self._app_title(booking.event.organization_id)
        notice = email_templates.cancellation_notice(booking, title)
        await self._send_pair(booking, notice, notice, "intake_cancelled")
