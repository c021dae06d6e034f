"""
Hypercontacts — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the failures a request can hit.
Why:   Global handlers (registered in main.py) turn each type into the right
       HTTP status without try/except blocks in every route.
How:   Each exception carries a message and an optional context dict.
       The context is logged server-side and never returned to the client.

Exception Hierarchy:
    HypercontactsError (base)
    ├── ValidationError   → 400 Bad Request (JSON API business rules)
    ├── NotFoundError     → 404 Not Found   (JSON API lookups)
    └── DatabaseError     → 500 Internal Server Error

Not everything is an exception:
    Form validation on the HTML pages returns a field-error map that is
    rendered next to the inputs, and a missing contact on the HTML pages is a
    redirect with a warning flash. Both are ordinary return values.
"""

from typing import Any, Dict, Optional


class HypercontactsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HypercontactsError):
    """
    Raised when JSON API input breaks a business rule.

    When:    A create/replace request reuses another contact's email address.
    HTTP:    400 Bad Request

    Schema problems (missing or empty fields in the JSON body) never reach
    this class; FastAPI answers those with 422 from the Pydantic model.
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


class NotFoundError(HypercontactsError):
    """
    Raised by the JSON API when a requested contact does not exist.

    The service layer returns None for missing rows; only the API routes
    convert that into this exception so the handler can answer 404.
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


class DatabaseError(HypercontactsError):
    """
    Raised when a database operation fails.

    What:    Pool exhaustion, lost connection, or a failed statement.
    HTTP:    500 Internal Server Error

    Security Note:
        The client always sees the same static message. The underlying
        exception type and the affected identifiers go to the log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
