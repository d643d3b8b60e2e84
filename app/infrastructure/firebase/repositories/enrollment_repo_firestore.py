"""Firestore-backed enrollments and program instances."""

from __future__ import annotations

from typing import Any

from app.application.dtos.enrollment import EnrollmentResult, ProgramInstanceResult
from app.domain.enums import EnrollmentStatus, InstanceType
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.firebase.collections import (
    COLLECTION_PROGRAM_ENROLLMENTS,
    COLLECTION_PROGRAM_INSTANCES,
)
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.utils.datetime import utc_now


def _enrollment_from_doc(doc_id: str, data: dict) -> EnrollmentResult:
    return EnrollmentResult(
        id=doc_id,
        user_id=data.get("user_id", ""),
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        status=EnrollmentStatus(data.get("status", EnrollmentStatus.ACTIVE.value)),
        start_date=data.get("start_date", ""),
        cohort_id=data.get("cohort_id"),
        instance_id=data.get("instance_id"),
        squad_id=data.get("squad_id"),
        amount_paid=data.get("amount_paid") or 0,
        payment_intent_id=data.get("payment_intent_id"),
        discount_code=data.get("discount_code"),
        created_at=data.get("created_at"),
        stopped_at=data.get("stopped_at"),
        completed_at=data.get("completed_at"),
    )


class FirestoreEnrollmentRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_PROGRAM_ENROLLMENTS)

    async def _list(self, q) -> list[EnrollmentResult]:
        return [_enrollment_from_doc(s.id, s.to_dict()) async for s in q.stream()]

    async def create(self, data: dict[str, Any]) -> EnrollmentResult:
        now = utc_now()
        doc = {**data, "created_at": now, "updated_at": now}
        ref = await self._coll.add(doc)
        return _enrollment_from_doc(ref.id, doc)

    async def get(self, enrollment_id: str) -> EnrollmentResult | None:
        doc = await self._coll.document(enrollment_id).get()
        if not doc:
            return None
        return _enrollment_from_doc(doc.id, doc.to_dict())

    async def get_by_payment_intent(self, payment_intent_id: str) -> EnrollmentResult | None:
        q = self._coll.where("payment_intent_id", "==", payment_intent_id).limit(1)
        async for snapshot in q.stream():
            return _enrollment_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def list_for_program(self, program_id: str) -> list[EnrollmentResult]:
        return await self._list(self._coll.where("program_id", "==", program_id))

    async def list_for_user(
        self, user_id: str, organization_id: str | None = None
    ) -> list[EnrollmentResult]:
        q = self._coll.where("user_id", "==", user_id)
        if organization_id:
            q = q.where("organization_id", "==", organization_id)
        return await self._list(q)

    async def list_for_cohort(self, cohort_id: str) -> list[EnrollmentResult]:
        return await self._list(self._coll.where("cohort_id", "==", cohort_id))

    async def list_by_status(self, status: str) -> list[EnrollmentResult]:
        return await self._list(self._coll.where("status", "==", status))

    async def list_for_instance(self, instance_id: str) -> list[EnrollmentResult]:
        return await self._list(self._coll.where("instance_id", "==", instance_id))

    async def update(self, enrollment_id: str, updates: dict[str, Any]) -> EnrollmentResult:
        doc_ref = self._coll.document(enrollment_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("enrollment", enrollment_id) from None
        doc = await doc_ref.get()
        return _enrollment_from_doc(enrollment_id, doc.to_dict())


def _instance_from_doc(doc_id: str, data: dict) -> ProgramInstanceResult:
    return ProgramInstanceResult(
        id=doc_id,
        program_id=data.get("program_id", ""),
        organization_id=data.get("organization_id", ""),
        type=InstanceType(data.get("type", InstanceType.INDIVIDUAL.value)),
        start_date=data.get("start_date", ""),
        length_days=data.get("length_days") or 0,
        include_weekends=data.get("include_weekends", True),
        daily_focus_slots=data.get("daily_focus_slots") or 0,
        weeks=list(data.get("weeks") or []),
        cohort_id=data.get("cohort_id"),
        enrollment_id=data.get("enrollment_id"),
        user_id=data.get("user_id"),
        template_synced_at=data.get("template_synced_at"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


class FirestoreInstanceRepository:
    """Program instances; weeks and days are nested in the instance document."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_PROGRAM_INSTANCES)

    async def create(self, data: dict[str, Any]) -> ProgramInstanceResult:
        now = utc_now()
        doc = {**data, "created_at": now, "updated_at": now}
        ref = await self._coll.add(doc)
        return _instance_from_doc(ref.id, doc)

    async def get(self, instance_id: str) -> ProgramInstanceResult | None:
        doc = await self._coll.document(instance_id).get()
        if not doc:
            return None
        return _instance_from_doc(doc.id, doc.to_dict())

    async def _first(self, field: str, value: str) -> ProgramInstanceResult | None:
        async for snapshot in self._coll.where(field, "==", value).limit(1).stream():
            return _instance_from_doc(snapshot.id, snapshot.to_dict())
        return None

    async def get_for_cohort(self, cohort_id: str) -> ProgramInstanceResult | None:
        return await self._first("cohort_id", cohort_id)

    async def get_for_enrollment(self, enrollment_id: str) -> ProgramInstanceResult | None:
        return await self._first("enrollment_id", enrollment_id)

    async def update(self, instance_id: str, updates: dict[str, Any]) -> ProgramInstanceResult:
        doc_ref = self._coll.document(instance_id)
        try:
            await doc_ref.update({**updates, "updated_at": utc_now()})
        except DocumentNotFoundError:
            raise ResourceNotFoundException("program_instance", instance_id) from None
        doc = await doc_ref.get()
        return _instance_from_doc(instance_id, doc.to_dict())
