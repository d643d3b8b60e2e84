"""Domain enumerations for the CoachHub application.

Enums represent fixed sets of domain values stored on Firestore documents.
Values are the exact strings persisted, so changing one is a data migration.
"""

from enum import Enum


class _ValuesMixin:
    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for validation or serialization)."""
        return [member.value for member in cls]  # type: ignore[attr-defined]


class OrgRole(_ValuesMixin, str, Enum):
    """Clerk organization role carried in the session token."""

    ADMIN = "org:admin"
    COACH = "org:coach"
    MEMBER = "org:member"


class ProgramType(_ValuesMixin, str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"


class TaskDistribution(_ValuesMixin, str, Enum):
    """How a program template spreads weekly tasks across its days."""

    SPREAD = "spread"
    REPEAT_DAILY = "repeat-daily"


class WeekDistribution(_ValuesMixin, str, Enum):
    """Per-week fallback used by instance weeks for tasks tagged 'auto'."""

    SPREAD = "spread"
    ALL_DAYS = "all_days"
    FIRST_DAY = "first_day"


class CalendarWeekType(_ValuesMixin, str, Enum):
    ONBOARDING = "onboarding"
    REGULAR = "regular"
    CLOSING = "closing"


class CohortStatus(_ValuesMixin, str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class EnrollmentStatus(_ValuesMixin, str, Enum):
    """Enrollment lifecycle. Upcoming until the start date, active until the program ends."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    STOPPED = "stopped"


class InstanceType(_ValuesMixin, str, Enum):
    COHORT = "cohort"
    INDIVIDUAL = "individual"


class TaskStatus(_ValuesMixin, str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"


class TaskListType(_ValuesMixin, str, Enum):
    FOCUS = "focus"
    BACKLOG = "backlog"


class TaskSourceType(_ValuesMixin, str, Enum):
    """Where a user task came from. Anything but USER is coach-owned content."""

    USER = "user"
    PROGRAM = "program"
    PROGRAM_DAY = "program_day"
    PROGRAM_WEEK = "program_week"
    COACH_MANUAL = "coach_manual"

    @property
    def is_program(self) -> bool:
        return self is not TaskSourceType.USER


class HabitFrequency(_ValuesMixin, str, Enum):
    DAILY = "daily"
    WEEKLY_SPECIFIC_DAYS = "weekly_specific_days"
    WEEKLY_NUMBER = "weekly_number"
    MONTHLY_SPECIFIC_DAYS = "monthly_specific_days"
    MONTHLY_NUMBER = "monthly_number"


class HabitStatus(_ValuesMixin, str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class HabitSource(_ValuesMixin, str, Enum):
    TRACK_DEFAULT = "track_default"
    PROGRAM_DEFAULT = "program_default"
    USER = "user"


class PostVisibility(_ValuesMixin, str, Enum):
    ORG = "org"
    SQUAD = "squad"


class EventType(_ValuesMixin, str, Enum):
    INTAKE_CALL = "intake_call"
    COACHING_1ON1 = "coaching_1on1"
    SQUAD_CALL = "squad_call"
    COMMUNITY_EVENT = "community_event"
    COHORT_CALL = "cohort_call"


class EventStatus(_ValuesMixin, str, Enum):
    CONFIRMED = "confirmed"
    PENDING_RESPONSE = "pending_response"
    PROPOSED = "proposed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    LIVE = "live"


# Statuses that hold a coach's time when computing availability.
BUSY_EVENT_STATUSES: tuple[str, ...] = (
    EventStatus.CONFIRMED.value,
    EventStatus.PENDING_RESPONSE.value,
    EventStatus.PROPOSED.value,
)


class MeetingProvider(_ValuesMixin, str, Enum):
    MANUAL = "manual"
    IN_APP = "in_app"


class DiscountType(_ValuesMixin, str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountApplicability(_ValuesMixin, str, Enum):
    ALL = "all"
    PROGRAMS = "programs"
    SQUADS = "squads"
    CONTENT = "content"
    CUSTOM = "custom"


class InvoiceStatus(_ValuesMixin, str, Enum):
    PAID = "paid"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class SubscriptionStatus(_ValuesMixin, str, Enum):
    NONE = "none"
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"

    @classmethod
    def from_stripe(cls, status: str | None) -> "SubscriptionStatus":
        """Map a Stripe subscription status onto the org's billing status."""
        if status in ("active", "trialing", "past_due"):
            return cls(status)
        if status in ("canceled", "unpaid", "incomplete_expired"):
            return cls.CANCELED
        return cls.NONE


class EmailDomainStatus(_ValuesMixin, str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class EmailKind(_ValuesMixin, str, Enum):
    """Transactional mail goes from notifications@, sign-in mail from auth@."""

    NOTIFICATIONS = "notifications"
    AUTH = "auth"
