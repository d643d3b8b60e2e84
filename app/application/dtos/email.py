"""Transactional email message passed to the email sender port."""

from dataclasses import dataclass, field


@dataclass
class OutgoingEmail:
    """A single transactional email."""

    from_address: str
    to: list[str]
    subject: str
    html: str
    text: str | None = None
    reply_to: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
