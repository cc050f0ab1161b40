"""
Readlater Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error taxonomy of the API.
How:   Each exception carries a client-safe message and an optional context dict
       that is logged but never returned. Global handlers registered in
       main.py map them to HTTP responses; resolvers map them to error payloads.
Who:   Raised by config loading, services and auth dependencies.

Exception Hierarchy:
    ReadlaterError (base)
    ├── ValidationError      → 400 Bad Request
    ├── UnauthorizedError    → 401 Unauthorized
    ├── NotFoundError        → 404 Not Found (also used for foreign-owned rows)
    ├── DatabaseError        → 500 Internal Server Error
    └── ConfigurationError   → process does not start

Propagation policy:
    Services raise and never catch. The outermost resolver/endpoint layer is
    the only place these are converted into client-visible results.
"""

from typing import Any, Dict, Optional


class ReadlaterError(Exception):
    """
    Base exception for all Readlater application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
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


class ValidationError(ReadlaterError):
    """
    Raised when client input fails validation.

    When:    Unknown filter columns, malformed profile data, bad request bodies.
    HTTP:    400 Bad Request
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


class UnauthorizedError(ReadlaterError):
    """
    Raised when a request carries no valid identity.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ReadlaterError):
    """
    Raised when a requested resource does not exist for the current owner.

    What:    The row is missing OR belongs to another user. Both cases produce
             the same error so that existence is never leaked across owners.
    HTTP:    404 Not Found
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
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(ReadlaterError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Constraint
        names and SQL are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(ReadlaterError):
    """
    Raised at startup when a required environment value is missing or invalid.

    What:    Fatal. create_app() lets it propagate so the process never serves
             traffic with a half-populated configuration.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        variable: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if variable:
            ctx["variable"] = variable
        super().__init__(message=message, context=ctx)
        self.variable = variable
