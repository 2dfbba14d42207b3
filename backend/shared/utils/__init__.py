"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    AuthorizationError,
    ValidationError,
    MalformedQueryError,
    ConflictError,
    InternalError,
    ConfigurationError,
    DatabaseError,
)
from shared.utils.validators import (
    escape_like_pattern,
    sanitize_search_term,
)

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "AuthorizationError",
    "ValidationError",
    "MalformedQueryError",
    "ConflictError",
    "InternalError",
    "ConfigurationError",
    "DatabaseError",
    # validators
    "escape_like_pattern",
    "sanitize_search_term",
]
