"""
ListBoard Backend: Document Store Access
===========================================

What:  MongoDB client lifecycle and the accessor for the List collection.
How:   One AsyncMongoClient per process, created in the application lifespan
       and held on `app.state`. Route handlers receive a ListRepository
       through the `get_list_repository` dependency.
Who:   Used by ListService for every document-store operation.

List records are schema-less: apart from `_id` (assigned by MongoDB) and
`text` (checked by the service on create), whatever the client sends is
stored as-is.

Operations map onto PyMongo's async API:
    find                    → collection.find(filter).skip(n).limit(m)
    count                   → collection.count_documents(filter)
    find_by_id              → collection.find_one({"_id": oid})
    save                    → insert_one (new) / replace_one (existing)
    find_by_id_and_remove   → collection.find_one_and_delete({"_id": oid})
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from listboard.config import settings
from listboard.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def to_object_id(value: str, field: str = "id") -> ObjectId:
    """
    Converts a client-supplied identifier into an ObjectId.

    Raises:
        ValidationError: value is not a 24-char hex string / 12-byte id (→ 400)
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"'{value}' is not a valid list id",
            field=field,
            context={"value": str(value)},
        )


def serialize_record(document: Mapping[str, Any]) -> Record:
    """Returns a JSON-ready copy of a stored record (`_id` as hex string)."""
    record = dict(document)
    if isinstance(record.get("_id"), ObjectId):
        record["_id"] = str(record["_id"])
    return record


class ListRepository:
    """
    Thin accessor over the List collection.

    Holds a reference to the process-wide collection handle; it is cheap to
    construct and carries no per-request state.
    """

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def find(
        self,
        query: Optional[Mapping[str, Any]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Record]:
        """Returns matching records in storage-native (natural) order."""
        cursor = self.collection.find(dict(query or {}))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def count(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self.collection.count_documents(dict(query or {}))

    async def find_by_id(self, record_id: ObjectId) -> Optional[Record]:
        return await self.collection.find_one({"_id": record_id})

    async def save(self, document: Record) -> ObjectId:
        """
        Persists a record.

        A document without `_id` is inserted and gets a fresh ObjectId.
        A document with `_id` replaces the stored version in full.

        Raises:
            NotFoundError: a document with `_id` no longer exists (removed
                after it was read); it is not recreated
        """
        if "_id" in document:
            result = await self.collection.replace_one({"_id": document["_id"]}, document)
            if result.matched_count == 0:
                raise NotFoundError(resource="list", resource_id=str(document["_id"]))
            return document["_id"]
        result = await self.collection.insert_one(dict(document))
        return result.inserted_id

    async def find_by_id_and_remove(self, record_id: ObjectId) -> Optional[Record]:
        """Deletes a record and returns it, or None if nothing matched."""
        return await self.collection.find_one_and_delete({"_id": record_id})


# ── Client Lifecycle ──────────────────────────────────────────────────────

def create_client() -> AsyncMongoClient:
    """
    Creates the process-wide MongoDB client.

    The client connects lazily; the first operation (or the health check
    ping) establishes the connection pool.
    """
    logger.info(
        "Creating MongoDB client for database '%s' (collection '%s')",
        settings.mongodb_database,
        settings.mongodb_collection,
    )
    return AsyncMongoClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
    )


def build_repository(client: AsyncMongoClient) -> ListRepository:
    """Binds a ListRepository to the configured database and collection."""
    collection = client[settings.mongodb_database][settings.mongodb_collection]
    return ListRepository(collection)


async def close_client(client: AsyncMongoClient) -> None:
    """Closes all pooled MongoDB connections. Called during shutdown."""
    await client.close()


# ── Dependencies ──────────────────────────────────────────────────────────

async def get_list_repository(request: Request) -> ListRepository:
    """
    FastAPI dependency returning the ListRepository created at startup.

    Raises:
        RuntimeError: lifespan has not run (no repository on app.state)
    """
    repository = getattr(request.app.state, "list_repository", None)
    if repository is None:
        raise RuntimeError("ListRepository not available on app.state (lifespan not initialized).")
    return repository
