"""
ListBoard Backend: List Service (Business Logic)
===================================================

What:  Turns list API requests into document-store and relational-store calls.
How:   Builds Mongo filters, computes pagination windows, applies shallow
       patches, and wraps driver failures in DatabaseError.
Who:   Called by the route handlers in routes/lists.py.

ListService is stateless: the storage handles (ListRepository, AsyncSession)
are passed into every call by the route, which receives them through FastAPI
dependencies. Both handles live for the whole process (the session factory's
engine and the Mongo client), never per service instance.

Operation summary:
    list_records     GET    /                       find(filter)
    paginate         GET    /pagination/{page}/{row} count + skip/limit
    create           POST   /                       save (insert)
    update           PUT    /{id}                   find_by_id + patch + save
    delete           DELETE /{id}                   find_by_id_and_remove
    list_relational  GET    /relational             SELECT * FROM list
"""

import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional

from pymongo.errors import PyMongoError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listboard.document import ListRepository, Record, serialize_record, to_object_id
from listboard.exceptions import DatabaseError, NotFoundError
from listboard.models.list_row import ListRow
from listboard.schemas.list import ListRowResponse, MessageResponse, RelationalListResponse

logger = logging.getLogger(__name__)

# ── Response Messages ─────────────────────────────────────────────────────
MISSING_TEXT_MESSAGE = "Please pass text."
SAVED_MESSAGE = "List saved"
UPDATED_MESSAGE = "List updated"
DELETED_MESSAGE = "List deleted"


def build_filter(record_id: Optional[str] = None, text: Optional[str] = None) -> Dict[str, Any]:
    """
    Builds the Mongo filter for GET /.

    - record_id: exact identifier match on `_id`
    - text: case-insensitive substring match on `text`; the value is escaped,
      so regex metacharacters in it match literally

    Empty values are ignored; no criteria yields `{}` (match everything).

    Raises:
        ValidationError: record_id is not a valid ObjectId
    """
    query: Dict[str, Any] = {}
    if record_id:
        query["_id"] = to_object_id(record_id, field="_id")
    if text:
        query["text"] = {"$regex": re.escape(text), "$options": "i"}
    return query


def page_window(page: int, row: int, total: int) -> Optional[tuple]:
    """
    Returns (skip, limit) for a 1-indexed page, or None if the page is empty.

    A page exists when row > 0 and 1 <= page <= ceil(total / row).
    """
    if row <= 0:
        return None
    total_pages = math.ceil(total / row)
    if page < 1 or page > total_pages:
        return None
    return (page - 1) * row, row


def apply_patch(record: Record, patch: Mapping[str, Any]) -> Record:
    """
    Overwrites every field of `record` named in `patch`.

    Shallow merge: nested values are replaced, not merged; fields missing
    from the patch are kept. `_id` is immutable and skipped.
    """
    for key, value in patch.items():
        if key == "_id":
            continue
        record[key] = value
    return record


class ListService:
    """
    Business logic layer for the list resource.

    Error Handling Strategy:
        ValidationError (bad id) and NotFoundError (missing record on update)
        propagate as-is. Driver errors (PyMongoError, SQLAlchemyError) are
        logged with the failing operation and re-raised as DatabaseError.
        Nothing is retried.
    """

    async def list_records(
        self,
        repository: ListRepository,
        record_id: Optional[str] = None,
        text: Optional[str] = None,
    ) -> List[Record]:
        """Returns records matching the optional `_id` and `text` criteria."""
        query = build_filter(record_id=record_id, text=text)
        try:
            documents = await repository.find(query)
        except PyMongoError as e:
            raise self._storage_error("find", e) from e
        return [serialize_record(doc) for doc in documents]

    async def paginate(
        self,
        repository: ListRepository,
        page: int,
        row: int,
    ) -> List[List[Record]]:
        """
        Returns one page of the full list.

        Response shape is `[[record, ...]]` for an existing page and `[]`
        otherwise (row <= 0, page before the first or after the last).
        """
        if row <= 0:
            return []
        try:
            total = await repository.count()
            window = page_window(page, row, total)
            if window is None:
                return []
            skip, limit = window
            documents = await repository.find(skip=skip, limit=limit)
        except PyMongoError as e:
            raise self._storage_error("paginate", e) from e

        logger.debug("Page %d/%d (row=%d) of %d records", page, math.ceil(total / row), row, total)
        return [[serialize_record(doc) for doc in documents]]

    async def create(
        self,
        repository: ListRepository,
        payload: Mapping[str, Any],
    ) -> MessageResponse:
        """
        Stores a new record built from the request body.

        A body without a non-empty `text` is answered with a message and
        nothing is stored. Any client-supplied `_id` is dropped; the store
        assigns a new one.
        """
        if not payload.get("text"):
            return MessageResponse(message=MISSING_TEXT_MESSAGE)

        document = {key: value for key, value in payload.items() if key != "_id"}
        try:
            new_id = await repository.save(document)
        except PyMongoError as e:
            raise self._storage_error("save", e) from e

        logger.info("List record created: %s", new_id)
        return MessageResponse(message=SAVED_MESSAGE)

    async def update(
        self,
        repository: ListRepository,
        record_id: str,
        patch: Mapping[str, Any],
    ) -> MessageResponse:
        """
        Applies a shallow patch to an existing record.

        Raises:
            ValidationError: record_id is not a valid ObjectId
            NotFoundError: no record with that id
        """
        object_id = to_object_id(record_id)
        try:
            document = await repository.find_by_id(object_id)
            if document is None:
                raise NotFoundError(resource="list", resource_id=record_id)
            await repository.save(apply_patch(document, patch))
        except PyMongoError as e:
            raise self._storage_error("update", e, record_id=record_id) from e

        logger.info("List record updated: %s (fields: %s)", record_id, ", ".join(patch) or "-")
        return MessageResponse(message=UPDATED_MESSAGE)

    async def delete(self, repository: ListRepository, record_id: str) -> MessageResponse:
        """
        Removes a record. Succeeds whether or not the record existed.

        Raises:
            ValidationError: record_id is not a valid ObjectId
        """
        object_id = to_object_id(record_id)
        try:
            removed = await repository.find_by_id_and_remove(object_id)
        except PyMongoError as e:
            raise self._storage_error("delete", e, record_id=record_id) from e

        if removed is None:
            logger.info("Delete of %s matched no record", record_id)
        else:
            logger.info("List record deleted: %s", record_id)
        return MessageResponse(message=DELETED_MESSAGE)

    async def list_relational(self, db: AsyncSession) -> RelationalListResponse:
        """Returns every row of the relational `list` table, by primary key."""
        try:
            result = await db.execute(select(ListRow).order_by(ListRow.id))
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Relational query on 'list' failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the relational list. Please try again.",
                context={"operation": "find_all", "error_type": type(e).__name__},
            ) from e

        return RelationalListResponse(data=[ListRowResponse.model_validate(row) for row in rows])

    @staticmethod
    def _storage_error(operation: str, error: Exception, **context: Any) -> DatabaseError:
        logger.error("Document store %s failed: %s", operation, str(error), exc_info=True)
        return DatabaseError(
            message="Could not access the list store. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__, **context},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
list_service = ListService()
