"""Task, habit and feed service dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import (
    get_feed_repo,
    get_habit_repo,
    get_org_repo,
    get_squad_repo,
    get_task_repo,
)
from app.application.interfaces.repositories import (
    IFeedRepository,
    IHabitRepository,
    IOrganizationRepository,
    ISquadRepository,
    ITaskRepository,
)
from app.application.use_cases.feed import FeedService
from app.application.use_cases.habits import HabitService
from app.application.use_cases.tasks import TaskService
from app.core.constants import (
    DEFAULT_DAILY_FOCUS_SLOTS,
    FEED_COMMENT_MAX_LENGTH,
    FEED_PAGE_MAX,
    FEED_POST_MAX_LENGTH,
)


def get_task_service(
    task_repo: Annotated[ITaskRepository, Depends(get_task_repo)],
    org_repo: Annotated[IOrganizationRepository, Depends(get_org_repo)],
) -> TaskService:
    return TaskService(task_repo, org_repo, default_focus_slots=DEFAULT_DAILY_FOCUS_SLOTS)


def get_habit_service(
    habit_repo: Annotated[IHabitRepository, Depends(get_habit_repo)],
) -> HabitService:
    return HabitService(habit_repo)


def get_feed_service(
    feed_repo: Annotated[IFeedRepository, Depends(get_feed_repo)],
    org_repo: Annotated[IOrganizationRepository, Depends(get_org_repo)],
    squad_repo: Annotated[ISquadRepository, Depends(get_squad_repo)],
) -> FeedService:
    return FeedService(
        feed_repo,
        org_repo,
        squad_repo,
        max_post_length=FEED_POST_MAX_LENGTH,
        max_comment_length=FEED_COMMENT_MAX_LENGTH,
        page_max=FEED_PAGE_MAX,
    )
