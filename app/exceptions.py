"""
TechNotes Backend - Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Services signal failures by raising; global exception handlers
       (registered in main.py) map each type to an HTTP status code and a
       structured JSON body. Services never build HTTP responses themselves.
How:   Each exception class carries a user-facing message and an optional
       context dict that is logged but never returned to the client.

Exception Hierarchy:
    TechNotesError (base)
    ├── ValidationError          → 400 Bad Request (missing/malformed fields)
    ├── NotFoundError            → 400 Bad Request (referenced user/note missing)
    ├── ConflictError            → 409 Conflict (duplicate unique field)
    │   └── HasDependentsError   → 400 Bad Request (delete blocked by notes)
    └── DatabaseError            → 500 Internal Server Error

Why NotFoundError is a 400:
    The id being looked up always arrives in the request body (PATCH/DELETE
    payloads, the `user` reference on a note), never in the URL path. A
    dangling reference is therefore bad input from the client, not a missing
    resource at the requested URL.
"""

from typing import Any, Dict, Optional


class TechNotesError(Exception):
    """
    Base exception for all TechNotes application errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status used by the global handlers
        error_code:  Machine-readable code placed in the response body
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TechNotesError):
    """
    Raised when client input fails validation.

    When:    Required field missing or blank, roles not a non-empty list of
             strings, `completed`/`active` not a boolean, password too long.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class NotFoundError(TechNotesError):
    """
    Raised when a referenced user or note does not exist.

    SQLAlchemy returns None for missing records; services convert that None
    into this exception so the status code is decided in one place.
    """

    status_code = 400
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource.capitalize()} with id {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(TechNotesError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Duplicate username or note title, either caught by the pre-write
             duplicate check or reported by the database's unique constraint.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class HasDependentsError(ConflictError):
    """
    Raised when a user cannot be deleted because notes still reference it.

    HTTP:    400 Bad Request (the client must reassign or delete the notes first)
    """

    status_code = 400
    error_code = "has_dependents"

    def __init__(
        self,
        message: str = "User has assigned notes",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TechNotesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL and constraint names are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
