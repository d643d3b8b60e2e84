"""Squad operations: coach management, membership and automatic assignment."""

from __future__ import annotations

from typing import Any

from app.application.dtos.program import ProgramResult
from app.application.dtos.squad import SquadAssignment, SquadResult
from app.application.interfaces.repositories import ISquadRepository
from app.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced

logger = get_logger(__name__)


class SquadService:
    def __init__(self, squad_repo: ISquadRepository, default_capacity: int = 10) -> None:
        self.squad_repo = squad_repo
        self.default_capacity = default_capacity

    def _capacity(self, squad: SquadResult, program: ProgramResult | None = None) -> int:
        if squad.capacity:
            return squad.capacity
        if program and program.squad_capacity:
            return program.squad_capacity
        return self.default_capacity

    async def _get(self, organization_id: str, squad_id: str) -> SquadResult:
        squad = await self.squad_repo.get(squad_id)
        if not squad or squad.organization_id != organization_id:
            raise ResourceNotFoundException("squad", squad_id)
        return squad

    async def create_squad(self, organization_id: str, data: dict[str, Any]) -> SquadResult:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationException("Squad name is required", field="name")
        capacity = data.get("capacity")
        if capacity is not None and capacity < 1:
            raise ValidationException("capacity must be positive", field="capacity")
        return await self.squad_repo.create(
            {**data, "name": name, "organization_id": organization_id}
        )

    async def list_squads(
        self, organization_id: str, program_id: str | None = None
    ) -> list[SquadResult]:
        return await self.squad_repo.list_for_org(organization_id, program_id)

    async def get_my_squads(self, user_id: str, organization_id: str) -> list[SquadResult]:
        return await self.squad_repo.list_for_member(user_id, organization_id)

    @traced("squad.add_member")
    async def add_member(
        self, organization_id: str, squad_id: str, user_id: str
    ) -> SquadResult:
        """Add user_id; a no-op when already a member. 409 when full."""
        squad = await self._get(organization_id, squad_id)
        if user_id in squad.member_ids:
            return squad
        if squad.member_count >= self._capacity(squad):
            raise ConflictException(
                "Squad is full", "SQUAD_FULL", {"squad_id": squad_id}
            )
        return await self.squad_repo.update(
            squad_id, {"member_ids": [*squad.member_ids, user_id]}
        )

    async def remove_member(
        self, organization_id: str, squad_id: str, user_id: str
    ) -> SquadResult:
        squad = await self._get(organization_id, squad_id)
        if user_id not in squad.member_ids:
            return squad
        return await self.squad_repo.update(
            squad_id, {"member_ids": [m for m in squad.member_ids if m != user_id]}
        )

    @traced("squad.assign_user")
    async def assign_user_to_squad(
        self,
        user_id: str,
        program: ProgramResult,
        cohort_id: str | None,
        organization_id: str,
        target_squad_id: str | None = None,
    ) -> SquadAssignment:
        """Place a new enrollee in a squad of the program.

        Order of preference: the requested squad, the first open squad of
        the program (and cohort) with room, then a newly created squad.
        """
        if target_squad_id:
            target = await self.squad_repo.get(target_squad_id)
            if target and target.organization_id == organization_id:
                if user_id in target.member_ids:
                    return SquadAssignment(target.id, False, target.name)
                if not target.is_closed and target.member_count < self._capacity(target, program):
                    await self.squad_repo.update(
                        target.id, {"member_ids": [*target.member_ids, user_id]}
                    )
                    return SquadAssignment(target.id, False, target.name)

        squads = [
            s
            for s in await self.squad_repo.list_for_org(organization_id, program.id)
            if cohort_id is None or s.cohort_id == cohort_id
        ]
        for squad in squads:
            if user_id in squad.member_ids:
                return SquadAssignment(squad.id, False, squad.name)
        for squad in squads:
            if not squad.is_closed and squad.member_count < self._capacity(squad, program):
                await self.squad_repo.update(
                    squad.id, {"member_ids": [*squad.member_ids, user_id]}
                )
                return SquadAssignment(squad.id, False, squad.name)

        name = f"{program.name} Squad {len(squads) + 1}"
        created = await self.squad_repo.create({
            "organization_id": organization_id,
            "name": name,
            "program_id": program.id,
            "cohort_id": cohort_id,
            "capacity": program.squad_capacity or self.default_capacity,
            "member_ids": [user_id],
        })
        logger.info("Created squad %s for program %s", created.id, program.id)
        return SquadAssignment(created.id, True, name)
