"""
DevFlow Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the storage layer, the session
       accessor and the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by compiled models, services and dependencies; caught by global
       handlers.

Exception Hierarchy:
    DevFlowError (base)
    ├── ValidationError        → 400 Bad Request (client can fix)
    ├── AuthenticationError    → 401 Unauthorized
    ├── NotFoundError          → 404 Not Found
    ├── DuplicateKeyError      → 409 Conflict (unique index violated)
    ├── DuplicateModelError    → 500 Internal Server Error (registry misuse)
    └── DatabaseError          → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class DevFlowError(Exception):
    """
    Base exception for all DevFlow application errors.

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


class ValidationError(DevFlowError):
    """
    Raised when a document or request fails validation.

    When:    Missing required field, wrong type, negative counter, unknown
             filter field.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Question.title: Field required",
            "details": {"field": "title", "model": "Question"}
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


class AuthenticationError(DevFlowError):
    """Raised when a route needs a session and the request has none. HTTP 401."""

    def __init__(
        self,
        message: str = "You must be signed in to do that",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevFlowError):
    """
    Raised when a requested document does not exist.

    Compiled models return None for missing documents; services convert
    that into NotFoundError so routes answer 404.
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


class DuplicateKeyError(DevFlowError):
    """
    Raised when a write violates a unique index (e.g. two tags named "python").

    HTTP:    409 Conflict
    The session that raised it must be rolled back before reuse.
    """

    def __init__(
        self,
        model: str,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        ctx = context or {}
        ctx["model"] = model
        super().__init__(
            message=message or f"A {model} with the same unique value already exists",
            context=ctx,
        )
        self.model = model


class DuplicateModelError(DevFlowError):
    """
    Raised by ModelRegistry.model() when a name is compiled twice.

    Use ModelRegistry.get_or_compile() for module-level declarations so that
    re-evaluating a module returns the existing binding instead.
    """

    def __init__(self, name: str):
        super().__init__(
            message=f"Cannot overwrite `{name}` model once compiled",
            context={"model": name},
        )
        self.name = name


class DatabaseError(DevFlowError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
