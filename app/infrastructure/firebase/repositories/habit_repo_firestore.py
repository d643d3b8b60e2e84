"""Firestore-backed habits (implements IHabitRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.habit import HabitResult
from app.domain.enums import HabitFrequency, HabitSource, HabitStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.firebase.collections import COLLECTION_HABITS
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import utc_now


class FirestoreHabitRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_HABITS)

    def _to_result(self, doc_id: str, data: dict) -> HabitResult:
        return HabitResult(
            id=doc_id,
            user_id=data.get("user_id", ""),
            organization_id=data.get("organization_id", ""),
            text=data.get("text", ""),
            frequency_type=HabitFrequency(data.get("frequency_type", HabitFrequency.DAILY.value)),
            frequency_value=data.get("frequency_value"),
            status=HabitStatus(data.get("status", HabitStatus.ACTIVE.value)),
            source=HabitSource(data.get("source", HabitSource.USER.value)),
            linked_routine=data.get("linked_routine"),
            reminder=data.get("reminder"),
            target_repetitions=data.get("target_repetitions"),
            progress=dict(data.get("progress") or {}),
            program_id=data.get("program_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    async def create(self, data: dict[str, Any]) -> HabitResult:
        now = utc_now()
        doc = {**data, "created_at": now, "updated_at": now}
        ref = await self._coll.add(doc)
        return self._to_result(ref.id, doc)

    async def get(self, habit_id: str) -> HabitResult | None:
        doc = await self._coll.document(habit_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def list_for_user(self, user_id: str, organization_id: str) -> list[HabitResult]:
        q = self._coll.where("user_id", "==", user_id).where(
            "organization_id", "==", organization_id
        )
        results = [self._to_result(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(results, key=lambda h: h.created_at or utc_now())

    async def update(self, habit_id: str, updates: dict[str, Any]) -> HabitResult:
        doc_ref = self._coll.document(habit_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("habit", habit_id) from None
        doc = await doc_ref.get()
        return self._to_result(habit_id, doc.to_dict())
