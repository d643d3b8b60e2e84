"""SquadService membership and automatic assignment."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.program import ProgramResult
from app.application.dtos.squad import SquadResult
from app.application.use_cases.squads import SquadService
from app.domain.enums import ProgramType
from app.domain.exceptions import ConflictException, ResourceNotFoundException

PROGRAM = ProgramResult(
    id="prog1",
    organization_id="org1",
    name="Accelerator",
    slug="accelerator",
    type=ProgramType.GROUP,
    squad_capacity=2,
)


def _squad(squad_id: str, members: list[str], **kwargs) -> SquadResult:
    return SquadResult(
        id=squad_id,
        organization_id="org1",
        name=f"Squad {squad_id}",
        member_ids=members,
        program_id="prog1",
        **kwargs,
    )


@pytest.fixture
def squad_repo():
    repo = AsyncMock()
    repo.list_for_org = AsyncMock(return_value=[])
    repo.create = AsyncMock(return_value=MagicMock(id="sq-new"))
    return repo


async def test_assign_fills_first_open_squad(squad_repo):
    squad_repo.list_for_org.return_value = [
        _squad("full", ["a", "b"]),
        _squad("closed", [], is_closed=True),
        _squad("open", ["c"]),
    ]
    assignment = await SquadService(squad_repo).assign_user_to_squad("u1", PROGRAM, None, "org1")
    assert (assignment.squad_id, assignment.is_new) == ("open", False)
    squad_repo.update.assert_awaited_once_with("open", {"member_ids": ["c", "u1"]})


async def test_assign_is_idempotent_for_existing_member(squad_repo):
    squad_repo.list_for_org.return_value = [_squad("s1", ["u1", "x"])]
    assignment = await SquadService(squad_repo).assign_user_to_squad("u1", PROGRAM, None, "org1")
    assert assignment.squad_id == "s1"
    squad_repo.update.assert_not_awaited()


async def test_assign_creates_a_squad_when_all_are_full(squad_repo):
    squad_repo.list_for_org.return_value = [_squad("full", ["a", "b"])]
    assignment = await SquadService(squad_repo).assign_user_to_squad("u1", PROGRAM, None, "org1")
    assert assignment.is_new is True
    assert assignment.squad_name == "Accelerator Squad 2"
    data = squad_repo.create.await_args.args[0]
    assert data["member_ids"] == ["u1"]
    assert data["capacity"] == 2


async def test_assign_only_considers_the_cohort(squad_repo):
    squad_repo.list_for_org.return_value = [_squad("other-cohort", [], cohort_id="c2")]
    assignment = await SquadService(squad_repo).assign_user_to_squad("u1", PROGRAM, "c1", "org1")
    assert assignment.is_new is True
    assert squad_repo.create.await_args.args[0]["cohort_id"] == "c1"


async def test_add_member_to_full_squad(squad_repo):
    squad_repo.get = AsyncMock(return_value=_squad("s1", ["a"], capacity=1))
    with pytest.raises(ConflictException) as exc_info:
        await SquadService(squad_repo).add_member("org1", "s1", "u1")
    assert exc_info.value.error_code == "SQUAD_FULL"


async def test_squad_of_another_org_is_not_found(squad_repo):
    squad_repo.get = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundException):
        await SquadService(squad_repo).remove_member("org1", "s1", "u1")
