"""
Notes API — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the failures a note operation can have.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the {status, message} envelope with the right HTTP status code.
Who:   Raised by the repository; caught by global handlers.

Exception Hierarchy:
    NotesAPIError (base)
    ├── ValidationError     → 422 Unprocessable Entity
    ├── NotFoundError       → 404 Not Found
    ├── DuplicateKeyError   → 409 Conflict
    └── StoreError          → 500 Internal Server Error

Malformed request bodies, path ids and query params are rejected by FastAPI
itself (RequestValidationError → 422); ValidationError covers the checks that
need runtime settings.
"""

from typing import Any, Dict, Optional


class NotesAPIError(Exception):
    """
    Base exception for all Notes API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesAPIError):
    """
    Raised when request input is well-formed but outside allowed bounds.

    When:    limit above MAX_PAGE_SIZE, which depends on runtime settings
             and so cannot be expressed in the route signature.
    HTTP:    422 Unprocessable Entity (same as FastAPI's own validation)
    """

    status_code = 422

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


class NotFoundError(NotesAPIError):
    """
    Raised when a requested note does not exist.

    When:    get, update or delete with an id that matches zero rows.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID: {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DuplicateKeyError(NotesAPIError):
    """
    Raised when an insert or update violates the unique constraint on title.

    HTTP:    409 Conflict
    """

    status_code = 409

    def __init__(
        self,
        message: str = "Note with that title already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(NotesAPIError):
    """
    Raised when a database operation fails for any other reason.

    What:    Connectivity loss, query failure, unexpected constraint violation.
    HTTP:    500 Internal Server Error

    The client only ever sees the generic message; driver details stay in
    `context` and the server log.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
