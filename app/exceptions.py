# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error reaches the client as {"error": ..., "code": ...} with the
# matching HTTP status. Database errors are translated here so routes never
# see raw PostgREST payloads.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from lib.supabase_client import (
    NO_ROWS_CODE,
    UNIQUE_VIOLATION_CODE,
    error_code,
    error_message,
    is_missing_table_error,
)

logger = logging.getLogger(__name__)


class SiteOpsException(Exception):
    """
    Base exception for the SiteOps API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "SITEOPS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class UnauthorizedError(SiteOpsException):
    """Raised when no valid session token accompanies the request."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Sign in again and send the access token as a Bearer header",
        )


class ForbiddenError(SiteOpsException):
    """Raised when the caller is signed in but lacks rights on a resource."""

    def __init__(self, message: str = "Insufficient permissions", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details=details,
        )


class AdminRequiredError(SiteOpsException):
    """Raised when an admin-only route is called by a non-admin."""

    def __init__(self):
        super().__init__(
            message="Admin access required",
            code="ADMIN_REQUIRED",
            status_code=403,
            suggestion="Ask an administrator to add your account to admin_users",
        )


# =============================================================================
# Lookup Exceptions
# =============================================================================

class NotFoundError(SiteOpsException):
    """Raised when a row doesn't exist (or isn't visible to the caller)."""

    def __init__(self, resource: str, resource_id: str | None = None, message: str | None = None):
        details = {"resource": resource}
        if resource_id is not None:
            details["id"] = str(resource_id)
        super().__init__(
            message=message or f"{resource.capitalize()} not found",
            code="NOT_FOUND",
            status_code=404,
            details=details,
        )


class TableMissingError(SiteOpsException):
    """Raised when the backing table has not been created in the database."""

    def __init__(self, table: str | None = None):
        super().__init__(
            message="Database tables need to be created",
            code="TABLE_MISSING",
            status_code=404,
            suggestion="Please contact an administrator to set up the database",
            details={"table": table} if table else None,
        )


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationFailedError(SiteOpsException):
    """Raised when a request body fails a presence or value check."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=400,
            details=details,
        )


class ConflictError(SiteOpsException):
    """Raised when a write collides with an existing row."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details,
        )


class DatabaseError(SiteOpsException):
    """Raised for any other failure reported by the database client."""

    def __init__(self, action: str, error: str):
        super().__init__(
            message=f"Failed to {action}",
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


def translate_database_error(
    exc: Exception,
    action: str,
    resource: str = "record",
    table: str | None = None,
) -> SiteOpsException:
    """
    Map a Supabase/PostgREST error to the matching API exception.

    Args:
        exc: The error raised by the client
        action: Verb phrase used in the message ("fetch sheet", ...)
        resource: Resource name for not-found messages
        table: Table name reported when the relation is missing

    Returns:
        The exception to raise in place of `exc`
    """
    if isinstance(exc, SiteOpsException):
        return exc

    code = error_code(exc)
    message = error_message(exc)

    if code == NO_ROWS_CODE:
        return NotFoundError(resource)
    if is_missing_table_error(exc):
        return TableMissingError(table)
    if code == UNIQUE_VIOLATION_CODE:
        return ConflictError(f"{resource.capitalize()} already exists", details={"error": message})

    logger.error(f"Failed to {action}: {message}")
    return DatabaseError(action, message)


# =============================================================================
# Exception Handlers
# =============================================================================

async def siteops_exception_handler(
    request: Request,
    exc: SiteOpsException
) -> JSONResponse:
    """Convert SiteOpsException to JSON response."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    errors = jsonable_encoder(exc.errors()) if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )
