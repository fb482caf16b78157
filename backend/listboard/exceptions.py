"""
ListBoard Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error cases of the list API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by the service layer and the document-store accessor.

Exception Hierarchy:
    ListBoardError (base)        → 500 Internal Server Error
    ├── ValidationError          → 400 Bad Request (malformed identifier)
    ├── NotFoundError            → 404 Not Found (update of a missing record)
    └── DatabaseError            → 500 Internal Server Error (storage failure)

Missing `text` on create is NOT an exception: the API answers it with a
plain 200 message.
"""

from typing import Any, Dict, Optional


class ListBoardError(Exception):
    """
    Base exception for all ListBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ListBoardError):
    """
    Raised when client input cannot be turned into a storage query.

    When:  `_id` query parameter or `{id}` path segment is not a valid ObjectId.
    HTTP:  400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "'abc' is not a valid list id",
            "details": {"field": "id", "value": "abc"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ListBoardError):
    """
    Raised when a requested resource does not exist.

    When:  PUT /{id} for an id with no stored record.
    HTTP:  404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ListBoardError):
    """
    Raised when a document-store or relational-store operation fails.

    What:    Wraps a driver exception (PyMongoError, SQLAlchemyError).
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The wrapped
    exception type and operation are kept in `context` and logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
