"""Transactional email bodies for intake bookings.

Each builder returns (subject, html, text). Values interpolated into HTML
are escaped.
"""

from __future__ import annotations

from datetime import datetime
from html import escape

from app.application.dtos.scheduling import BookingResult
from app.domain.availability import resolve_timezone

_LAYOUT = """<!doctype html>
<html><body style="font-family: -apple-system, Segoe UI, Helvetica, Arial, sans-serif; color: #1a1a1a;">
<div style="max-width: 560px; margin: 0 auto; padding: 24px;">
<h2 style="margin-top: 0;">{heading}</h2>
{body}
<p style="color: #777; font-size: 12px; margin-top: 32px;">{footer}</p>
</div></body></html>"""


def format_when(moment: datetime, tz_name: str | None) -> str:
    """e.g. 'Tuesday, March 4, 2025 at 10:30 AM EST' in the event's timezone."""
    try:
        tz = resolve_timezone(tz_name)
    except ValueError:
        tz = resolve_timezone("UTC")
    local = moment.astimezone(tz)
    hour = local.strftime("%I").lstrip("0")
    return f"{local:%A, %B} {local.day}, {local.year} at {hour}:{local:%M %p %Z}"


def _page(heading: str, paragraphs: list[str], footer: str) -> str:
    body = "\n".join(f"<p>{p}</p>" for p in paragraphs)
    return _LAYOUT.format(heading=escape(heading), body=body, footer=escape(footer))


def intake_confirmation(booking: BookingResult, app_title: str) -> tuple[str, str, str]:
    event, config = booking.event, booking.config
    when = format_when(event.start_date_time, event.timezone)
    subject = f"Confirmed: {config.name} on {when}"
    paragraphs = [
        f"Hi {escape(event.prospect_name or '')},",
        f"Your <strong>{escape(config.name)}</strong> is booked for {escape(when)}.",
    ]
    lines = [f"Hi {event.prospect_name or ''},", f"Your {config.name} is booked for {when}."]
    if event.meeting_link:
        paragraphs.append(
            f'Join here: <a href="{escape(event.meeting_link)}">{escape(event.meeting_link)}</a>'
        )
        lines.append(f"Join here: {event.meeting_link}")
    if config.confirmation_message:
        paragraphs.append(escape(config.confirmation_message))
        lines.append(config.confirmation_message)
    if config.allow_reschedule or config.allow_cancellation:
        paragraphs.append(
            f'Need to change it? <a href="{escape(booking.manage_url)}">Manage your booking</a>.'
        )
        lines.append(f"Need to change it? Manage your booking: {booking.manage_url}")
    html = _page("You're booked", paragraphs, f"Sent on behalf of {app_title}")
    return subject, html, "\n\n".join(lines)


def coach_notification(booking: BookingResult, app_title: str) -> tuple[str, str, str]:
    event, config = booking.event, booking.config
    when = format_when(event.start_date_time, event.timezone)
    who = event.prospect_name or event.prospect_email or "A prospect"
    subject = f"New booking: {who} for {config.name}"
    paragraphs = [
        f"<strong>{escape(who)}</strong> ({escape(event.prospect_email or '')}) booked "
        f"{escape(config.name)} for {escape(when)}.",
    ]
    lines = [f"{who} ({event.prospect_email or ''}) booked {config.name} for {when}."]
    if event.prospect_phone:
        paragraphs.append(f"Phone: {escape(event.prospect_phone)}")
        lines.append(f"Phone: {event.prospect_phone}")
    if event.description:
        paragraphs.append(f"Notes: {escape(event.description)}")
        lines.append(f"Notes: {event.description}")
    html = _page("New intake call", paragraphs, app_title)
    return subject, html, "\n\n".join(lines)


def reschedule_notice(
    booking: BookingResult, previous_start: datetime, app_title: str
) -> tuple[str, str, str]:
    event, config = booking.event, booking.config
    when = format_when(event.start_date_time, event.timezone)
    before = format_when(previous_start, event.timezone)
    subject = f"Rescheduled: {config.name} is now {when}"
    paragraphs = [
        f"{escape(config.name)} with {escape(event.prospect_name or '')} has moved.",
        f"Was: <s>{escape(before)}</s>",
        f"Now: <strong>{escape(when)}</strong>",
        f'<a href="{escape(booking.manage_url)}">Manage this booking</a>',
    ]
    text = (
        f"{config.name} with {event.prospect_name or ''} has moved.\n\n"
        f"Was: {before}\nNow: {when}\n\nManage this booking: {booking.manage_url}"
    )
    return subject, _page("Booking rescheduled", paragraphs, app_title), text


def cancellation_notice(booking: BookingResult, app_title: str) -> tuple[str, str, str]:
    event, config = booking.event, booking.config
    when = format_when(event.start_date_time, event.timezone)
    subject = f"Cancelled: {config.name} on {when}"
    paragraphs = [
        f"{escape(config.name)} with {escape(event.prospect_name or '')} on "
        f"{escape(when)} was cancelled."
    ]
    lines = [f"{config.name} with {event.prospect_name or ''} on {when} was cancelled."]
    if event.cancellation_reason:
        paragraphs.append(f"Reason: {escape(event.cancellation_reason)}")
        lines.append(f"Reason: {event.cancellation_reason}")
    return subject, _page("Booking cancelled", paragraphs, app_title), "\n\n".join(lines)
