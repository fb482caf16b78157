"""
ListBoard Backend: List Service Unit Tests
=============================================

What:  Tests for ListService and its helpers (filter, pagination, patch).
How:   Uses the in-memory FakeListRepository and AsyncMock repositories that
       raise driver errors. No real MongoDB.

What we test:
    ✅ Filter shapes for `_id` and `text`
    ✅ Pagination windows, including row = 0 and out-of-range pages
    ✅ Create rejects missing text with a message, not an error
    ✅ Update is a shallow merge and fails on a missing record
    ✅ Delete succeeds whether or not the record existed
    ✅ Driver errors become DatabaseError
"""

import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError
from sqlalchemy.exc import OperationalError

from listboard.exceptions import DatabaseError, NotFoundError, ValidationError
from listboard.models.list_row import ListRow
from listboard.services.list_service import (
    ListService,
    apply_patch,
    build_filter,
    page_window,
)


class TestBuildFilter:
    """Tests for the GET / filter builder."""

    def test_no_criteria_matches_everything(self):
        assert build_filter() == {}
        assert build_filter(record_id="", text="") == {}

    def test_id_filters_on_object_id(self):
        oid = ObjectId()
        assert build_filter(record_id=str(oid)) == {"_id": oid}

    def test_malformed_id_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            build_filter(record_id="not-an-object-id")
        assert exc_info.value.field == "_id"

    def test_text_is_case_insensitive_regex(self):
        assert build_filter(text="milk") == {"text": {"$regex": "milk", "$options": "i"}}

    def test_text_metacharacters_are_escaped(self):
        query = build_filter(text="2+2 (ok)")
        pattern = query["text"]["$regex"]
        assert re.search(pattern, "is 2+2 (ok)?")
        assert not re.search(pattern, "22 ok")

    def test_both_criteria_combine(self):
        oid = ObjectId()
        query = build_filter(record_id=str(oid), text="milk")
        assert set(query) == {"_id", "text"}


class TestPageWindow:
    """Tests for the (skip, limit) computation."""

    def test_first_page(self):
        assert page_window(page=1, row=2, total=5) == (0, 2)

    def test_last_partial_page(self):
        assert page_window(page=3, row=2, total=5) == (4, 2)

    def test_page_beyond_last(self):
        assert page_window(page=4, row=2, total=5) is None

    def test_page_zero_and_negative(self):
        assert page_window(page=0, row=2, total=5) is None
        assert page_window(page=-1, row=2, total=5) is None

    def test_row_zero_is_empty_not_an_error(self):
        assert page_window(page=1, row=0, total=5) is None

    def test_empty_collection_has_no_pages(self):
        assert page_window(page=1, row=10, total=0) is None


class TestApplyPatch:
    """Tests for the shallow merge used by PUT."""

    def test_overwrites_only_patched_fields(self):
        record = {"_id": 1, "text": "a", "done": False}
        assert apply_patch(record, {"text": "b"}) == {"_id": 1, "text": "b", "done": False}

    def test_adds_new_fields(self):
        record = {"_id": 1, "text": "a"}
        assert apply_patch(record, {"tags": ["x"]})["tags"] == ["x"]

    def test_nested_values_are_replaced_not_merged(self):
        record = {"_id": 1, "meta": {"a": 1, "b": 2}}
        assert apply_patch(record, {"meta": {"a": 3}})["meta"] == {"a": 3}

    def test_id_is_immutable(self):
        record = {"_id": 1, "text": "a"}
        assert apply_patch(record, {"_id": 2})["_id"] == 1


class TestListServiceDocumentStore:
    """Tests against the in-memory repository."""

    def setup_method(self):
        self.service = ListService()

    @pytest.mark.asyncio
    async def test_create_requires_text(self, fake_repository):
        for payload in ({}, {"text": ""}, {"text": None}, {"done": True}):
            result = await self.service.create(fake_repository, payload)
            assert result.message == "Please pass text."
        assert fake_repository.documents == {}

    @pytest.mark.asyncio
    async def test_create_stores_body_verbatim(self, fake_repository):
        result = await self.service.create(
            fake_repository, {"text": "buy milk", "qty": 2, "tags": ["food"]}
        )

        assert result.message == "List saved"
        [stored] = fake_repository.documents.values()
        assert stored["text"] == "buy milk"
        assert stored["qty"] == 2
        assert stored["tags"] == ["food"]
        assert isinstance(stored["_id"], ObjectId)

    @pytest.mark.asyncio
    async def test_create_ignores_client_id(self, fake_repository):
        client_id = str(ObjectId())
        await self.service.create(fake_repository, {"_id": client_id, "text": "x"})

        [stored] = fake_repository.documents.values()
        assert str(stored["_id"]) != client_id

    @pytest.mark.asyncio
    async def test_list_records_serializes_ids(self, fake_repository):
        oid = await fake_repository.save({"text": "Buy MILK"})

        records = await self.service.list_records(fake_repository, text="milk")

        assert records == [{"_id": str(oid), "text": "Buy MILK"}]

    @pytest.mark.asyncio
    async def test_list_records_by_id(self, fake_repository):
        await fake_repository.save({"text": "a"})
        oid = await fake_repository.save({"text": "b"})

        records = await self.service.list_records(fake_repository, record_id=str(oid))

        assert [r["text"] for r in records] == ["b"]

    @pytest.mark.asyncio
    async def test_paginate_returns_nested_page(self, fake_repository):
        for i in range(5):
            await fake_repository.save({"text": f"item {i}"})

        pages = await self.service.paginate(fake_repository, page=2, row=2)

        assert len(pages) == 1
        assert [r["text"] for r in pages[0]] == ["item 2", "item 3"]

    @pytest.mark.asyncio
    async def test_paginate_out_of_range(self, fake_repository):
        for i in range(3):
            await fake_repository.save({"text": f"item {i}"})

        assert await self.service.paginate(fake_repository, page=3, row=2) == []
        assert await self.service.paginate(fake_repository, page=0, row=2) == []
        assert await self.service.paginate(fake_repository, page=1, row=0) == []

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, fake_repository):
        oid = await fake_repository.save({"text": "a", "done": False})

        result = await self.service.update(fake_repository, str(oid), {"text": "b"})

        assert result.message == "List updated"
        assert fake_repository.documents[oid] == {"_id": oid, "text": "b", "done": False}

    @pytest.mark.asyncio
    async def test_update_missing_record(self, fake_repository):
        with pytest.raises(NotFoundError):
            await self.service.update(fake_repository, str(ObjectId()), {"text": "b"})

    @pytest.mark.asyncio
    async def test_update_after_concurrent_delete_does_not_resurrect(self, fake_repository):
        oid = await fake_repository.save({"text": "a"})
        stale = await fake_repository.find_by_id(oid)
        await fake_repository.find_by_id_and_remove(oid)
        fake_repository.find_by_id = AsyncMock(return_value=stale)

        with pytest.raises(NotFoundError):
            await self.service.update(fake_repository, str(oid), {"text": "b"})

        assert fake_repository.documents == {}

    @pytest.mark.asyncio
    async def test_update_malformed_id(self, fake_repository):
        with pytest.raises(ValidationError):
            await self.service.update(fake_repository, "nope", {"text": "b"})

    @pytest.mark.asyncio
    async def test_delete_existing_and_missing(self, fake_repository):
        oid = await fake_repository.save({"text": "a"})

        first = await self.service.delete(fake_repository, str(oid))
        second = await self.service.delete(fake_repository, str(oid))

        assert first.message == "List deleted"
        assert second.message == "List deleted"
        assert fake_repository.documents == {}


class TestListServiceStorageErrors:
    """Driver failures are wrapped, never retried."""

    def setup_method(self):
        self.service = ListService()
        self.repository = MagicMock()
        error = ServerSelectionTimeoutError("no servers available")
        self.repository.find = AsyncMock(side_effect=error)
        self.repository.count = AsyncMock(side_effect=error)
        self.repository.find_by_id = AsyncMock(side_effect=error)
        self.repository.save = AsyncMock(side_effect=error)
        self.repository.find_by_id_and_remove = AsyncMock(side_effect=error)

    @pytest.mark.asyncio
    async def test_find_failure(self):
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.list_records(self.repository)
        assert exc_info.value.context["operation"] == "find"
        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)
        self.repository.find.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_paginate_failure(self):
        with pytest.raises(DatabaseError):
            await self.service.paginate(self.repository, page=1, row=10)

    @pytest.mark.asyncio
    async def test_create_failure(self):
        with pytest.raises(DatabaseError):
            await self.service.create(self.repository, {"text": "a"})

    @pytest.mark.asyncio
    async def test_update_failure(self):
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.update(self.repository, str(ObjectId()), {"text": "a"})
        assert exc_info.value.context["operation"] == "update"

    @pytest.mark.asyncio
    async def test_delete_failure(self):
        with pytest.raises(DatabaseError):
            await self.service.delete(self.repository, str(ObjectId()))


class TestListServiceRelational:
    """Tests for the relational dump."""

    def setup_method(self):
        self.service = ListService()

    @pytest.mark.asyncio
    async def test_returns_all_rows_in_key_order(self, relational_session_factory):
        async with relational_session_factory() as session:
            session.add_all([ListRow(text="first"), ListRow(text="second")])
            await session.commit()

        async with relational_session_factory() as session:
            result = await self.service.list_relational(session)

        assert [row.text for row in result.data] == ["first", "second"]
        assert [row.id for row in result.data] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_table(self, relational_session_factory):
        async with relational_session_factory() as session:
            result = await self.service.list_relational(session)
        assert result.data == []

    @pytest.mark.asyncio
    async def test_query_failure_wrapped(self):
        session = AsyncMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.list_relational(session)
        assert exc_info.value.context["operation"] == "find_all"
