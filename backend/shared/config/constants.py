"""
Centralized constants for the backend application.
Avoids magic strings and repeated constants.

Usage:
    from shared.config.constants import Roles, SortOrder, Limits

    if role == Roles.SUPER_ADMIN:
        ...

    limit = min(limit, Limits.MAX_PAGE_SIZE)
"""

from typing import Final

from shared.config.settings import settings


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    SUPER_ADMIN: Final[str] = settings.super_admin_role
    ADMIN: Final[str] = "admin"
    SUPERVISOR: Final[str] = "supervisor"
    PROMOTER: Final[str] = "promoter"

    ALL: Final[list[str]] = [SUPER_ADMIN, ADMIN, SUPERVISOR, PROMOTER]


# =============================================================================
# Listing
# =============================================================================


class SortOrder:
    """Sort direction constants."""

    ASC: Final[str] = "ASC"
    DESC: Final[str] = "DESC"

    ALL: Final[tuple[str, str]] = (ASC, DESC)


DEFAULT_SORT_FIELD: Final[str] = "created_at"

# Filter value meaning "IS NULL"
NULL_LITERAL: Final[str] = "__NULL__"

# Top-level query keys that are not filters
LIST_QUERY_KEYS: Final[frozenset[str]] = frozenset(
    {"search", "page", "limit", "sortBy", "sortOrder", "filters"}
)


class SurveyStatus:
    """Survey lifecycle constants."""

    ACTIVE: Final[str] = "active"
    INACTIVE: Final[str] = "inactive"


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048
    MAX_SEARCH_TERM_LENGTH: Final[int] = settings.max_search_term_length

    # Pagination defaults
    DEFAULT_PAGE: Final[int] = 1
    DEFAULT_PAGE_SIZE: Final[int] = settings.default_page_size
    MAX_PAGE_SIZE: Final[int] = settings.max_page_size
    MAX_EXPORT_ROWS: Final[int] = settings.max_export_rows
    # Largest OFFSET a signed 64-bit column accepts
    MAX_OFFSET: Final[int] = 2**63 - 1

    # Bracket-notation parser caps
    MAX_FILTER_DEPTH: Final[int] = settings.max_filter_depth
    MAX_FILTER_ARRAY_LENGTH: Final[int] = settings.max_filter_array_length
