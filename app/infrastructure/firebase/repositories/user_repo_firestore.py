"""Firestore-backed user repository (implements IUserRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.user import UserResult
from app.infrastructure.firebase.collections import COLLECTION_USERS
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.shared.utils.datetime import utc_now


class FirestoreUserRepository:
    """Users keyed by Clerk user id. Written only by the Clerk webhook."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_USERS)

    def _to_result(self, doc_id: str, data: dict) -> UserResult:
        return UserResult(
            id=doc_id,
            email=data.get("email", ""),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            image_url=data.get("image_url"),
            role=data.get("role"),
            organization_ids=list(data.get("organization_ids") or []),
            primary_organization_id=data.get("primary_organization_id"),
            deleted=data.get("deleted", False),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by ID."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def upsert(self, user_id: str, data: dict[str, Any]) -> UserResult:
        """Merge data into users/{user_id}, creating it on first sight."""
        doc_ref = self._coll.document(user_id)
        doc = await doc_ref.get()
        now = utc_now()
        merged = doc.to_dict() if doc else {"created_at": now, "organization_ids": []}
        merged.update(data)
        merged["updated_at"] = now
        await doc_ref.set(merged)
        return self._to_result(user_id, merged)

    async def mark_deleted(self, user_id: str) -> None:
        doc_ref = self._coll.document(user_id)
        if await doc_ref.get():
            await doc_ref.update({"deleted": True, "updated_at": utc_now()})

    async def _change_orgs(self, user_id: str, organization_id: str, add: bool) -> None:
        doc_ref = self._coll.document(user_id)
        doc = await doc_ref.get()
        if not doc:
            if add:
                await doc_ref.set({
                    "email": "",
                    "organization_ids": [organization_id],
                    "primary_organization_id": organization_id,
                    "created_at": utc_now(),
                    "updated_at": utc_now(),
                })
            return
        data = doc.to_dict()
        org_ids = [o for o in data.get("organization_ids") or [] if o != organization_id]
        if add:
            org_ids.append(organization_id)
        updates: dict[str, Any] = {"organization_ids": org_ids, "updated_at": utc_now()}
        if add and not data.get("primary_organization_id"):
            updates["primary_organization_id"] = organization_id
        if not add and data.get("primary_organization_id") == organization_id:
            updates["primary_organization_id"] = org_ids[0] if org_ids else None
        await doc_ref.update(updates)

    async def add_organization(self, user_id: str, organization_id: str) -> None:
        await self._change_orgs(user_id, organization_id, add=True)

    async def remove_organization(self, user_id: str, organization_id: str) -> None:
        await self._change_orgs(user_id, organization_id, add=False)
