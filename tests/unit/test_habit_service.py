"""HabitService unit tests with a mocked repo."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.habit import HabitResult
from app.application.use_cases.habits import HabitService
from app.domain.enums import HabitFrequency, HabitStatus
from app.domain.exceptions import AuthorizationException, ValidationException


def _habit(**overrides) -> HabitResult:
    data = {
        "id": "h1",
        "user_id": "u1",
        "organization_id": "org1",
        "text": "Meditate",
        "frequency_type": HabitFrequency.DAILY,
        "frequency_value": None,
        **overrides,
    }
    return HabitResult(**data)


@pytest.fixture
def habit_repo():
    repo = AsyncMock()
    repo.get = AsyncMock(return_value=_habit())
    return repo


async def test_create_defaults_to_daily_with_empty_progress(habit_repo):
    await HabitService(habit_repo).create_habit("u1", "org1", {"text": "  Walk ", "status": "completed"})
    data = habit_repo.create.await_args.args[0]
    assert data["text"] == "Walk"
    assert data["frequency_type"] == "daily"
    assert data["status"] == "active"
    assert data["source"] == "user"
    assert data["progress"]["completion_dates"] == []


@pytest.mark.parametrize(
    "data",
    [
        {"text": " "},
        {"text": "Run", "frequency_type": "weekly_specific_days", "frequency_value": [9]},
        {"text": "Run", "reminder": {"time": "25:00"}},
        {"text": "Run", "target_repetitions": 0},
    ],
)
async def test_create_validation(habit_repo, data):
    with pytest.raises(ValidationException):
        await HabitService(habit_repo).create_habit("u1", "org1", data)


async def test_frequency_value_is_checked_against_stored_type(habit_repo):
    habit_repo.get.return_value = _habit(
        frequency_type=HabitFrequency.WEEKLY_NUMBER, frequency_value=3
    )
    with pytest.raises(ValidationException):
        await HabitService(habit_repo).update_habit("u1", "org1", "h1", {"frequency_value": 9})


async def test_complete_records_the_date(habit_repo):
    await HabitService(habit_repo).complete_habit("u1", "org1", "h1", "2026-10-19")
    fields = habit_repo.update.await_args.args[1]
    assert fields["progress"]["completion_dates"] == ["2026-10-19"]
    assert fields["progress"]["current_count"] == 1


async def test_archived_habit_cannot_be_completed(habit_repo):
    habit_repo.get.return_value = _habit(status=HabitStatus.ARCHIVED)
    with pytest.raises(ValidationException):
        await HabitService(habit_repo).complete_habit("u1", "org1", "h1", date(2026, 10, 19))


async def test_other_users_habit(habit_repo):
    habit_repo.get.return_value = _habit(user_id="u2")
    with pytest.raises(AuthorizationException):
        await HabitService(habit_repo).skip_habit("u1", "org1", "h1", "2026-10-19")


async def test_list_hides_archived(habit_repo):
    habit_repo.list_for_user = AsyncMock(
        return_value=[_habit(), _habit(id="h2", status=HabitStatus.ARCHIVED)]
    )
    service = HabitService(habit_repo)
    assert [h.id for h in await service.list_habits("u1", "org1")] == ["h1"]
    assert len(await service.list_habits("u1", "org1", include_archived=True)) == 2
