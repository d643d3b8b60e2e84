"""Firestore-backed organization settings and branding (implements IOrganizationRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.organization import OrgSettingsResult
from app.core.constants import DEFAULT_DAILY_FOCUS_SLOTS
from app.infrastructure.firebase.collections import (
    COLLECTION_ORG_BRANDING,
    COLLECTION_ORG_SETTINGS,
)
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.shared.utils.datetime import utc_now


class FirestoreOrganizationRepository:
    """Both documents use the Clerk organization id as document id."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._settings = client.collection(COLLECTION_ORG_SETTINGS)
        self._branding = client.collection(COLLECTION_ORG_BRANDING)

    def _to_result(self, doc_id: str, data: dict) -> OrgSettingsResult:
        return OrgSettingsResult(
            organization_id=doc_id,
            slug=data.get("slug"),
            name=data.get("name"),
            daily_focus_slots=data.get("daily_focus_slots") or DEFAULT_DAILY_FOCUS_SLOTS,
            feed_enabled=data.get("feed_enabled", True),
            stripe_connect_account_id=data.get("stripe_connect_account_id"),
            subscription=dict(data.get("subscription") or {}),
            updated_at=data.get("updated_at"),
        )

    async def get_settings(self, organization_id: str) -> OrgSettingsResult | None:
        doc = await self._settings.document(organization_id).get()
        if not doc:
            return None
        return self._to_result(doc.id, doc.to_dict())

    async def get_by_slug(self, slug: str) -> OrgSettingsResult | None:
        """Return the org owning slug (server-side where query, at most one doc)."""
        q = self._settings.where("slug", "==", slug).limit(1)
        async for snapshot in q.stream():
            return self._to_result(snapshot.id, snapshot.to_dict())
        return None

    async def save_settings(
        self, organization_id: str, updates: dict[str, Any]
    ) -> OrgSettingsResult:
        doc_ref = self._settings.document(organization_id)
        doc = await doc_ref.get()
        data = doc.to_dict() if doc else {}
        data.update(updates)
        data["updated_at"] = utc_now()
        await doc_ref.set(data)
        return self._to_result(organization_id, data)

    async def get_branding(self, organization_id: str) -> dict[str, Any] | None:
        doc = await self._branding.document(organization_id).get()
        return doc.to_dict() if doc else None

    async def save_branding(
        self, organization_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge updates; nested colors/menu_titles/email_settings merge key by key."""
        doc_ref = self._branding.document(organization_id)
        doc = await doc_ref.get()
        data = doc.to_dict() if doc else {"organization_id": organization_id}
        for key, value in updates.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        data["updated_at"] = utc_now()
        await doc_ref.set(data)
        return data
