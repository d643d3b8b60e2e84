"""Firestore-backed squads (implements ISquadRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.squad import SquadResult
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.firebase.collections import COLLECTION_SQUADS
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import utc_now


class FirestoreSquadRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_SQUADS)

    def _to_result(self, doc_id: str, data: dict) -> SquadResult:
        return SquadResult(
            id=doc_id,
            organization_id=data.get("organization_id", ""),
            name=data.get("name", ""),
            member_ids=list(data.get("member_ids") or []),
            program_id=data.get("program_id"),
            cohort_id=data.get("cohort_id"),
            coach_id=data.get("coach_id"),
            capacity=data.get("capacity"),
            is_closed=data.get("is_closed", False),
            created_at=data.get("created_at"),
        )

    async def create(self, data: dict[str, Any]) -> SquadResult:
        doc = {"member_ids": [], "is_closed": False, **data, "created_at": utc_now()}
        ref = await self._coll.add(doc)
        return self._to_result(ref.id, doc)

    async def get(self, squad_id: str) -> SquadResult | None:
        doc = await self._coll.document(squad_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def list_for_org(
        self, organization_id: str, program_id: str | None = None
    ) -> list[SquadResult]:
        """Squads of an org, oldest first."""
        q = self._coll.where("organization_id", "==", organization_id)
        if program_id:
            q = q.where("program_id", "==", program_id)
        results = [self._to_result(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(results, key=lambda s: s.created_at or utc_now())

    async def list_for_member(
        self, user_id: str, organization_id: str
    ) -> list[SquadResult]:
        q = self._coll.where("member_ids", "array-contains", user_id).where(
            "organization_id", "==", organization_id
        )
        return [self._to_result(s.id, s.to_dict()) async for s in q.stream()]

    async def update(self, squad_id: str, updates: dict[str, Any]) -> SquadResult:
        doc_ref = self._coll.document(squad_id)
        try:
            await doc_ref.update(updates)
        except DocumentNotFoundError:
            raise ResourceNotFoundException("squad", squad_id) from None
        doc = await doc_ref.get()
        return self._to_result(squad_id, doc.to_dict())
