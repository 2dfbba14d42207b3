"""
Shared dependencies and helpers for admin routers.

This module provides common imports and dependencies used across all
admin sub-routers.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.config.constants import Roles
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context as current_user
from shared.utils.exceptions import AuthorizationError
from rest_api.routers._common import get_list_query, to_csv_response, to_list_response


# =============================================================================
# Role-based Dependencies
# =============================================================================


def require_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires ADMIN or SUPER_ADMIN role."""
    if user.get("role") not in (Roles.SUPER_ADMIN, Roles.ADMIN):
        raise AuthorizationError("modify this resource", reason="admin role required")
    return user


def require_super_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires SUPER_ADMIN role."""
    if user.get("role") != Roles.SUPER_ADMIN:
        raise AuthorizationError("manage shared reference data", reason="super admin role required")
    return user


def include_deleted_param(
    include_deleted: bool = Query(default=False, description="Also return soft-deleted rows"),
) -> bool:
    return include_deleted


def deleted_response(entity_id: int) -> dict[str, Any]:
    return {"deleted": True, "id": entity_id}


__all__ = [
    "APIRouter",
    "Depends",
    "Session",
    "status",
    "get_db",
    "current_user",
    "get_list_query",
    "to_list_response",
    "to_csv_response",
    "require_admin",
    "require_super_admin",
    "include_deleted_param",
    "deleted_response",
]
