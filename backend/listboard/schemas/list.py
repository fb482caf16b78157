"""
ListBoard Backend: Pydantic Response Schemas
===============================================

What:  Pydantic models for the parts of the API contract that have a fixed shape.
How:   FastAPI serializes responses through these models and builds the
       OpenAPI docs from them.

List records themselves have no schema (any body field is stored), so the
record-returning endpoints use plain `Dict[str, Any]` instead of a model.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    """
    Outcome of a mutation.

    Values: "List saved", "List updated", "List deleted", "Please pass text."
    """
    message: str = Field(description="Human-readable outcome of the operation")


class ListRowResponse(BaseModel):
    """One row of the relational `list` table."""
    id: int = Field(description="Relational primary key")
    text: str = Field(description="List item text")
    created_at: datetime = Field(description="Row creation time (UTC)")
    updated_at: datetime = Field(description="Last modification time (UTC)")

    model_config = {"from_attributes": True}


class RelationalListResponse(BaseModel):
    """Wrapper returned by GET /relational."""
    data: List[ListRowResponse] = Field(description="Every row of the `list` table")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "list with ID '65f0c0ffee...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and storage status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    document_store: str = Field(description="MongoDB connectivity: connected, disconnected")
    database: str = Field(description="Relational database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
