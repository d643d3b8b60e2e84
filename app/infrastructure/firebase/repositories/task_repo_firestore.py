"""Firestore-backed user tasks (implements ITaskRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.task import TaskResult
from app.domain.enums import TaskListType, TaskSourceType, TaskStatus
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.firebase.collections import COLLECTION_TASKS
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import utc_now


def task_from_doc(doc_id: str, data: dict) -> TaskResult:
    return TaskResult(
        id=doc_id,
        user_id=data.get("user_id", ""),
        organization_id=data.get("organization_id", ""),
        title=data.get("title", ""),
        status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
        list_type=TaskListType(data.get("list_type", TaskListType.BACKLOG.value)),
        order=data.get("order", 0),
        date=data.get("date", ""),
        is_private=data.get("is_private", False),
        source_type=TaskSourceType(data.get("source_type", TaskSourceType.USER.value)),
        program_enrollment_id=data.get("program_enrollment_id"),
        instance_id=data.get("instance_id"),
        instance_task_id=data.get("instance_task_id"),
        program_day_index=data.get("program_day_index"),
        client_locked=data.get("client_locked", False),
        completed_at=data.get("completed_at"),
        moved_to_backlog_at=data.get("moved_to_backlog_at"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


class FirestoreTaskRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_TASKS)

    async def get(self, task_id: str) -> TaskResult | None:
        doc = await self._coll.document(task_id).get()
        if not doc:
            return None
        return task_from_doc(doc.id, doc.to_dict())

    def _user_query(self, user_id: str, organization_id: str):
        return self._coll.where("user_id", "==", user_id).where(
            "organization_id", "==", organization_id
        )

    async def list_for_date(
        self, user_id: str, organization_id: str, date: str
    ) -> list[TaskResult]:
        q = self._user_query(user_id, organization_id).where("date", "==", date)
        return [task_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def list_before_date(
        self, user_id: str, organization_id: str, date: str
    ) -> list[TaskResult]:
        q = self._user_query(user_id, organization_id).where("date", "<", date)
        return [task_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def list_for_instance(self, instance_id: str, user_id: str) -> list[TaskResult]:
        q = self._coll.where("instance_id", "==", instance_id).where("user_id", "==", user_id)
        return [task_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def create(self, data: dict[str, Any]) -> TaskResult:
        now = utc_now()
        doc = {**data, "created_at": now, "updated_at": now}
        ref = await self._coll.add(doc)
        return task_from_doc(ref.id, doc)

    async def update(self, task_id: str, updates: dict[str, Any]) -> TaskResult:
        doc_ref = self._coll.document(task_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("task", task_id) from None
        doc = await doc_ref.get()
        return task_from_doc(task_id, doc.to_dict())

    async def delete(self, task_id: str) -> None:
        await self._coll.document(task_id).delete()

    async def apply_batch(
        self,
        creates: list[dict[str, Any]] | None = None,
        updates: dict[str, dict[str, Any]] | None = None,
        deletes: list[str] | None = None,
    ) -> None:
        batch = self._client.batch()
        now = utc_now()
        for data in creates or []:
            batch.set(self._coll.document(), {**data, "created_at": now, "updated_at": now})
        for task_id, fields in (updates or {}).items():
            batch.update(self._coll.document(task_id), {**fields, "updated_at": now})
        for task_id in deletes or []:
            batch.delete(self._coll.document(task_id))
        if len(batch):
            await batch.commit()
