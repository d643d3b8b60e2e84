"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the deployment bundle small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Supported surface (all async):

- collection(name).document(id).get() / set() / update() / delete()
- collection(name).create(id, data) and add(data)
- collection(name).where(...).where(...).order_by(...).offset(n).limit(n).stream()
- batch().set() / update() / delete() then commit() (atomic)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote

import httpx

from app.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
    encode_fields,
)
from app.shared.utils.generators import generate_cuid

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class DocumentExistsError(Exception):
    """Raised when createDocument returns 409 (document ID already exists)."""


class DocumentNotFoundError(Exception):
    """Raised when update() targets a document that does not exist."""


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method not in ("GET", "PATCH", "POST", "DELETE"):
        raise ValueError(f"Unsupported method: {method!r}")
    resp = await client.request(method, url, headers=headers, json=body, params=params)
    if resp.status_code == 404:
        return None
    if resp.status_code == 409:
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


def _doc_id(name: str) -> str:
    return name.rsplit("/", 1)[-1] if name else ""


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    @property
    def exists(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return dict(self._data)


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return _doc_id(self._path)

    @property
    def path(self) -> str:
        return self._path

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (PATCH with full replace)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def update(self, data: dict[str, Any]) -> None:
        """Patch the given top-level fields only; the document must exist."""
        params = [("updateMask.fieldPaths", key) for key in data]
        params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=params,
        )
        if out is None:
            raise DocumentNotFoundError(self._path)

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class _Query:
    """Fluent query builder for a collection; runs via runQuery (filters AND-ed on the server)."""

    def __init__(self, client: "FirestoreRESTClient", parent: str, collection_id: str):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[tuple[str, str, Any]] = []
        self._orders: list[tuple[str, str]] = []
        self._offset: int = 0
        self._limit: int | None = None

    def _copy(self) -> "_Query":
        q = _Query(self._client, self._parent, self._collection_id)
        q._filters = list(self._filters)
        q._orders = list(self._orders)
        q._offset = self._offset
        q._limit = self._limit
        return q

    def where(self, field: str, op: str, value: Any) -> "_Query":
        q = self._copy()
        q._filters.append((field, _OP_MAP.get(op, op), value))
        return q

    def order_by(self, field: str, direction: str = "ASCENDING") -> "_Query":
        q = self._copy()
        q._orders.append((field, direction))
        return q

    def offset(self, n: int) -> "_Query":
        q = self._copy()
        q._offset = n
        return q

    def limit(self, n: int) -> "_Query":
        q = self._copy()
        q._limit = n
        return q

    def _structured_query(self) -> dict[str, Any]:
        structured: dict[str, Any] = {"from": [{"collectionId": self._collection_id}]}
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": _encode_value(value),
                }
            }
            for field, op, value in self._filters
        ]
        if len(field_filters) == 1:
            structured["where"] = field_filters[0]
        elif field_filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }
        if self._orders:
            structured["orderBy"] = [
                {"field": {"fieldPath": field}, "direction": direction}
                for field, direction in self._orders
            ]
        if self._offset:
            structured["offset"] = self._offset
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._parent}:runQuery",
            method="POST",
            body={"structuredQuery": self._structured_query()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            yield DocumentSnapshot(_doc_id(doc.get("name", "")), decode_document(doc.get("fields")))


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    @property
    def id(self) -> str:
        return _doc_id(self._path)

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference to a document; a new cuid is used when no id is given."""
        return DocumentReference(self._client, f"{self._path}/{document_id or generate_cuid()}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        url = f"{_BASE}/{self._path}?documentId={quote(document_id, safe='')}"
        await _request_async(
            self._client._http,
            url,
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def add(self, data: dict[str, Any]) -> DocumentReference:
        """Create a document with a generated ID and return its reference."""
        ref = self.document()
        await self.create(ref.id, data)
        return ref

    def _query(self) -> _Query:
        parent = self._path.rsplit("/", 1)[0]
        return _Query(self._client, parent, self.id)

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Chain .where(), .order_by(), .offset(), .limit(), then .stream()."""
        return self._query().where(field, op, value)

    def order_by(self, field: str, direction: str = "ASCENDING") -> _Query:
        return self._query().order_by(field, direction)

    def limit(self, n: int) -> _Query:
        return self._query().limit(n)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List documents in the collection (shallow)."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return
        for doc in out.get("documents", []):
            yield DocumentSnapshot(_doc_id(doc.get("name", "")), decode_document(doc.get("fields")))


class WriteBatch:
    """Atomic group of writes committed with documents:commit."""

    def __init__(self, client: "FirestoreRESTClient") -> None:
        self._client = client
        self._writes: list[dict[str, Any]] = []

    def set(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        self._writes.append({"update": {"name": ref.path, "fields": encode_fields(data)}})

    def update(self, ref: DocumentReference, data: dict[str, Any]) -> None:
        self._writes.append({
            "update": {"name": ref.path, "fields": encode_fields(data)},
            "updateMask": {"fieldPaths": list(data)},
            "currentDocument": {"exists": True},
        })

    def increment(self, ref: DocumentReference, field_path: str, amount: int = 1) -> None:
        """Server-side numeric increment of one field of an existing document."""
        self._writes.append({
            "transform": {
                "document": ref.path,
                "fieldTransforms": [
                    {"fieldPath": field_path, "increment": _encode_value(amount)}
                ],
            },
            "currentDocument": {"exists": True},
        })

    def delete(self, ref: DocumentReference) -> None:
        self._writes.append({"delete": ref.path})

    def __len__(self) -> int:
        return len(self._writes)

    async def commit(self) -> None:
        if not self._writes:
            return
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._client.database_path}/documents:commit",
            method="POST",
            body={"writes": self._writes},
            access_token=await self._client.get_token(),
        )
        self._writes = []


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.database_path = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self.database_path}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    def batch(self) -> WriteBatch:
        return WriteBatch(self)
