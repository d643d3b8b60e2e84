"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Write methods take plain field dicts (snake_case, as stored).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.billing import (
        DiscountCodeResult,
        InvoiceResult,
        StripeCustomerResult,
    )
    from app.application.dtos.enrollment import EnrollmentResult, ProgramInstanceResult
    from app.application.dtos.feed import FeedCommentResult, FeedPostResult
    from app.application.dtos.habit import HabitResult
    from app.application.dtos.organization import OrgSettingsResult
    from app.application.dtos.program import (
        CohortResult,
        ProgramDayResult,
        ProgramModuleResult,
        ProgramResult,
        ProgramWeekResult,
    )
    from app.application.dtos.scheduling import (
        AvailabilityResult,
        BookingTokenResult,
        EventResult,
        IntakeCallConfigResult,
    )
    from app.application.dtos.squad import SquadResult
    from app.application.dtos.task import TaskResult
    from app.application.dtos.user import UserResult


class IUserRepository(Protocol):
    """Users mirrored from Clerk webhooks."""

    async def get_by_id(self, user_id: str) -> UserResult | None: ...

    async def upsert(self, user_id: str, data: dict[str, Any]) -> UserResult:
        """Create or merge the user document."""

    async def mark_deleted(self, user_id: str) -> None: ...

    async def add_organization(self, user_id: str, organization_id: str) -> None: ...

    async def remove_organization(self, user_id: str, organization_id: str) -> None: ...


class IOrganizationRepository(Protocol):
    """org_settings and org_branding documents (id = Clerk org id)."""

    async def get_settings(self, organization_id: str) -> OrgSettingsResult | None: ...

    async def get_by_slug(self, slug: str) -> OrgSettingsResult | None: ...

    async def save_settings(
        self, organization_id: str, updates: dict[str, Any]
    ) -> OrgSettingsResult:
        """Merge updates into the settings document (created when missing)."""

    async def get_branding(self, organization_id: str) -> dict[str, Any] | None:
        """Stored branding fields (no defaults applied)."""

    async def save_branding(
        self, organization_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]: ...


class IProgramRepository(Protocol):
    """Program templates with their modules, weeks and days."""

    async def create_program(self, organization_id: str, data: dict[str, Any]) -> ProgramResult: ...

    async def get_program(self, program_id: str) -> ProgramResult | None: ...

    async def get_program_by_slug(self, organization_id: str, slug: str) -> ProgramResult | None: ...

    async def list_programs(
        self, organization_id: str, published_only: bool = False
    ) -> list[ProgramResult]: ...

    async def update_program(self, program_id: str, updates: dict[str, Any]) -> ProgramResult: ...

    async def delete_program(self, program_id: str) -> None:
        """Delete the program and its modules, weeks, days and cohorts."""

    async def create_module(self, program: ProgramResult, data: dict[str, Any]) -> ProgramModuleResult: ...

    async def list_modules(self, program_id: str) -> list[ProgramModuleResult]:
        """Modules ordered by their order field."""

    async def list_weeks(self, program_id: str) -> list[ProgramWeekResult]:
        """Weeks ordered by week_number."""

    async def get_week(self, week_id: str) -> ProgramWeekResult | None: ...

    async def create_weeks(self, program: ProgramResult, weeks: list[dict[str, Any]]) -> int: ...

    async def update_week(self, week_id: str, updates: dict[str, Any]) -> ProgramWeekResult: ...

    async def save_day_ranges(
        self,
        week_ranges: dict[str, tuple[int, int]],
        module_ranges: dict[str, tuple[int, int]],
    ) -> None:
        """Write start/end day indices for many weeks and modules in one batch."""

    async def list_days(
        self, program_id: str, start: int | None = None, end: int | None = None
    ) -> list[ProgramDayResult]:
        """Days ordered by day_index, optionally limited to [start, end]."""

    async def save_days(
        self, program: ProgramResult, days: dict[int, dict[str, Any]]
    ) -> None:
        """Upsert template days keyed by day_index in one batch."""


class ICohortRepository(Protocol):
    async def create(self, program: ProgramResult, data: dict[str, Any]) -> CohortResult: ...

    async def get(self, cohort_id: str) -> CohortResult | None: ...

    async def list_for_program(self, program_id: str) -> list[CohortResult]: ...


class IEnrollmentRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> EnrollmentResult: ...

    async def get(self, enrollment_id: str) -> EnrollmentResult | None: ...

    async def get_by_payment_intent(self, payment_intent_id: str) -> EnrollmentResult | None: ...

    async def list_for_program(self, program_id: str) -> list[EnrollmentResult]: ...

    async def list_for_user(
        self, user_id: str, organization_id: str | None = None
    ) -> list[EnrollmentResult]: ...

    async def list_for_cohort(self, cohort_id: str) -> list[EnrollmentResult]: ...

    async def list_by_status(self, status: str) -> list[EnrollmentResult]: ...

    async def list_for_instance(self, instance_id: str) -> list[EnrollmentResult]: ...

    async def update(self, enrollment_id: str, updates: dict[str, Any]) -> EnrollmentResult: ...


class IInstanceRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> ProgramInstanceResult: ...

    async def get(self, instance_id: str) -> ProgramInstanceResult | None: ...

    async def get_for_cohort(self, cohort_id: str) -> ProgramInstanceResult | None: ...

    async def get_for_enrollment(self, enrollment_id: str) -> ProgramInstanceResult | None: ...

    async def update(self, instance_id: str, updates: dict[str, Any]) -> ProgramInstanceResult: ...


class ITaskRepository(Protocol):
    async def get(self, task_id: str) -> TaskResult | None: ...

    async def list_for_date(
        self, user_id: str, organization_id: str, date: str
    ) -> list[TaskResult]: ...

    async def list_before_date(
        self, user_id: str, organization_id: str, date: str
    ) -> list[TaskResult]:
        """Tasks dated strictly before date."""

    async def list_for_instance(self, instance_id: str, user_id: str) -> list[TaskResult]: ...

    async def create(self, data: dict[str, Any]) -> TaskResult: ...

    async def update(self, task_id: str, updates: dict[str, Any]) -> TaskResult: ...

    async def delete(self, task_id: str) -> None: ...

    async def apply_batch(
        self,
        creates: list[dict[str, Any]] | None = None,
        updates: dict[str, dict[str, Any]] | None = None,
        deletes: list[str] | None = None,
    ) -> None:
        """Commit creates, updates and deletes atomically."""


class IHabitRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> HabitResult: ...

    async def get(self, habit_id: str) -> HabitResult | None: ...

    async def list_for_user(
        self, user_id: str, organization_id: str
    ) -> list[HabitResult]: ...

    async def update(self, habit_id: str, updates: dict[str, Any]) -> HabitResult: ...


class ISquadRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> SquadResult: ...

    async def get(self, squad_id: str) -> SquadResult | None: ...

    async def list_for_org(
        self, organization_id: str, program_id: str | None = None
    ) -> list[SquadResult]: ...

    async def list_for_member(
        self, user_id: str, organization_id: str
    ) -> list[SquadResult]: ...

    async def update(self, squad_id: str, updates: dict[str, Any]) -> SquadResult: ...


class IFeedRepository(Protocol):
    async def create_post(self, data: dict[str, Any]) -> FeedPostResult: ...

    async def get_post(self, post_id: str) -> FeedPostResult | None: ...

    async def list_posts(
        self, organization_id: str, limit: int, before: datetime | None = None
    ) -> list[FeedPostResult]:
        """Newest first."""

    async def delete_post(self, post_id: str) -> None:
        """Delete the post with its comments and reactions."""

    async def has_reaction(self, post_id: str, user_id: str) -> bool: ...

    async def add_reaction(self, post: FeedPostResult, user_id: str, reaction: str) -> None: ...

    async def remove_reaction(self, post: FeedPostResult, user_id: str) -> None: ...

    async def add_comment(self, post: FeedPostResult, data: dict[str, Any]) -> FeedCommentResult: ...

    async def list_comments(self, post_id: str) -> list[FeedCommentResult]:
        """Oldest first."""


class IEventRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> EventResult: ...

    async def get(self, event_id: str) -> EventResult | None: ...

    async def update(self, event_id: str, updates: dict[str, Any]) -> EventResult: ...

    async def list_for_org(
        self,
        organization_id: str,
        statuses: list[str],
        event_type: str | None = None,
        starts_after: datetime | None = None,
        limit: int = 50,
    ) -> list[EventResult]:
        """Events ordered by start time."""

    async def list_starting_between(
        self, organization_id: str, start: datetime, end: datetime
    ) -> list[EventResult]: ...

    async def delete_scheduled_jobs(self, event_id: str) -> int:
        """Remove pending reminder jobs of an event; returns how many."""


class IAvailabilityRepository(Protocol):
    async def get(self, organization_id: str) -> AvailabilityResult | None: ...

    async def save(self, organization_id: str, data: dict[str, Any]) -> AvailabilityResult: ...


class IIntakeRepository(Protocol):
    async def create_config(self, data: dict[str, Any]) -> IntakeCallConfigResult: ...

    async def get_config(self, config_id: str) -> IntakeCallConfigResult | None: ...

    async def get_config_by_slug(
        self, organization_id: str, slug: str
    ) -> IntakeCallConfigResult | None: ...

    async def list_configs(self, organization_id: str) -> list[IntakeCallConfigResult]: ...

    async def create_token(self, data: dict[str, Any]) -> BookingTokenResult: ...

    async def get_token(self, token_id: str) -> BookingTokenResult | None: ...

    async def update_token(self, token_id: str, updates: dict[str, Any]) -> None: ...


class IBillingRepository(Protocol):
    async def get_customer(
        self, user_id: str, connected_account_id: str
    ) -> StripeCustomerResult | None: ...

    async def save_customer(self, customer: StripeCustomerResult) -> None: ...

    async def get_discount_by_code(
        self, organization_id: str, code: str
    ) -> DiscountCodeResult | None: ...

    async def count_discount_usages(self, discount_code_id: str, user_id: str) -> int: ...

    async def record_discount_usage(
        self, discount: DiscountCodeResult, user_id: str, data: dict[str, Any]
    ) -> None:
        """Store a usage and bump use_count."""

    async def create_invoice(self, data: dict[str, Any]) -> InvoiceResult: ...

    async def get_invoice_by_payment_intent(self, payment_intent_id: str) -> InvoiceResult | None: ...

    async def update_invoice(self, invoice_id: str, updates: dict[str, Any]) -> None: ...

    async def list_invoices_for_user(self, user_id: str) -> list[InvoiceResult]: ...

    async def list_invoices_for_org(self, organization_id: str) -> list[InvoiceResult]: ...
