"""
Centralized HTTP exceptions for consistent error handling.

Every error logs itself on construction with structured context and
carries the HTTP status the web layer should answer with.

Usage:
    from shared.utils.exceptions import NotFoundError, AuthorizationError, ValidationError

    raise NotFoundError("Brand", brand_id)
    raise AuthorizationError("list projects")
    raise ValidationError("Invalid sortBy field: 'colour'", field="sortBy")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Raised for absent ids, soft-deleted rows and rows outside the
    caller's scope alike, so existence is never leaked across tenants.

    Usage:
        raise NotFoundError("Product", 123)
        raise NotFoundError("Brand", brand_id, project_id=project_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 403 Authorization Errors
# =============================================================================


class AuthorizationError(AppException):
    """
    Authorization/scope error (403).

    Usage:
        raise AuthorizationError("list projects")
        raise AuthorizationError(reason="caller has no project", user_id=7)
    """

    def __init__(self, action: str | None = None, reason: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"
        if reason:
            detail = f"{detail}: {reason}"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Covers malformed pagination, sort, filter and query-string input.

    Usage:
        raise ValidationError("Sort order must be either 'ASC' or 'DESC'", field="sortOrder")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class MalformedQueryError(ValidationError):
    """Query string could not be parsed into a filter tree."""

    def __init__(self, reason: str, key: str | None = None, **log_context: Any):
        detail = f"Malformed query: {reason}"
        if key:
            detail = f"{detail} (key '{key}')"
        super().__init__(detail, key=key, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Brand name already exists")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to export report", report_id=123)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class ConfigurationError(InternalError):
    """
    A resource declared a relation or field its entity does not have.

    This is a programming error in a resource service, never user input,
    and is not retryable.
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(f"Configuration error: {detail}", **log_context)


class DatabaseError(InternalError):
    """Database write failed and was rolled back."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
