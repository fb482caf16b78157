"""
ListBoard Backend: List Route Handlers
=========================================

What:  The six HTTP operations of the list resource.
How:   Extracts query/path/body parameters, delegates to ListService with the
       injected storage handles, returns JSON.
Who:   Mounted by create_app() under settings.list_prefix (default /__/list).

Errors are not caught here: they propagate to the global exception handlers
registered in main.py.

Examples:
    GET    /__/list                     every record
    GET    /__/list?_id=<id>            one record by id
    GET    /__/list?text=milk           records whose text contains "milk"
    GET    /__/list/pagination/2/10     records 11-20, as [[...]]
    POST   /__/list                     {"text": "buy milk", ...}
    PUT    /__/list/<id>                {"text": "buy oat milk"}
    DELETE /__/list/<id>
    GET    /__/list/relational          {"data": [...]} from the SQL table
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from listboard.config import settings
from listboard.database import get_db_session
from listboard.document import ListRepository, get_list_repository
from listboard.schemas.list import ErrorResponse, MessageResponse, RelationalListResponse
from listboard.services.list_service import list_service


# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix=settings.list_prefix, tags=["List"])

_error_responses = {
    400: {"description": "Malformed list id", "model": ErrorResponse},
    500: {"description": "Storage error", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    responses=_error_responses,
    summary="List or filter records",
)
@router.get("/", response_model=List[Dict[str, Any]], include_in_schema=False)
async def list_records(
    record_id: Optional[str] = Query(
        default=None, alias="_id",
        description="Return only the record with this identifier",
    ),
    text: Optional[str] = Query(
        default=None,
        description="Case-insensitive substring to look for in the record text",
    ),
    repository: ListRepository = Depends(get_list_repository),
) -> List[Dict[str, Any]]:
    return await list_service.list_records(repository, record_id=record_id, text=text)


@router.get(
    "/pagination/{page}/{row}",
    response_model=List[List[Dict[str, Any]]],
    responses=_error_responses,
    summary="Get one page of records",
    description=(
        "Returns `[[record, ...]]` holding page `page` (1-indexed) of size `row`, "
        "or `[]` when the page does not exist."
    ),
)
async def paginate_records(
    page: int,
    row: int,
    repository: ListRepository = Depends(get_list_repository),
) -> List[List[Dict[str, Any]]]:
    return await list_service.paginate(repository, page=page, row=row)


@router.get(
    "/relational",
    response_model=RelationalListResponse,
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="Dump the relational list table",
)
async def list_relational(
    db: AsyncSession = Depends(get_db_session),
) -> RelationalListResponse:
    return await list_service.list_relational(db)


@router.post(
    "",
    response_model=MessageResponse,
    responses=_error_responses,
    summary="Create a record",
    description="Stores the body as a new record. `text` is required; other fields are kept as sent.",
)
@router.post("/", response_model=MessageResponse, include_in_schema=False)
async def create_record(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    repository: ListRepository = Depends(get_list_repository),
) -> MessageResponse:
    return await list_service.create(repository, payload or {})


@router.put(
    "/{record_id}",
    response_model=MessageResponse,
    responses={
        **_error_responses,
        404: {"description": "No record with this id", "model": ErrorResponse},
    },
    summary="Update a record",
    description="Overwrites every field present in the body; other fields are left unchanged.",
)
async def update_record(
    record_id: str,
    patch: Optional[Dict[str, Any]] = Body(default=None),
    repository: ListRepository = Depends(get_list_repository),
) -> MessageResponse:
    return await list_service.update(repository, record_id, patch or {})


@router.delete(
    "/{record_id}",
    response_model=MessageResponse,
    responses=_error_responses,
    summary="Delete a record",
)
async def delete_record(
    record_id: str,
    repository: ListRepository = Depends(get_list_repository),
) -> MessageResponse:
    return await list_service.delete(repository, record_id)
