"""
Caller identity - the authenticated user as seen by scoping and services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from shared.config.constants import Roles


@dataclass(frozen=True)
class CallerIdentity:
    """
    Authenticated caller built from verified JWT claims.

    Usage:
        caller = CallerIdentity.from_claims(ctx)
        if caller.is_super_admin:
            ...
    """

    user_id: int
    role: str | None = None
    project_id: int | None = None
    email: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "CallerIdentity":
        sub = claims.get("sub")
        project_id = claims.get("project_id")
        return cls(
            user_id=int(sub) if sub is not None else 0,
            role=claims.get("role"),
            project_id=int(project_id) if project_id is not None else None,
            email=claims.get("email"),
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == Roles.SUPER_ADMIN
