"""
Tenant scope resolution.

A non-super-admin caller is always confined to one project. The project
comes from the token claim, then from the user's own row, then from the
project of the user's branch. A caller with none of these is refused.

Usage:
    scope = ScopeResolver(db).resolve(CallerIdentity.from_claims(ctx))
    if scope.is_super_admin:
        ...  # no forced predicate
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from shared.config.logging import get_logger
from shared.utils.exceptions import AuthorizationError

from rest_api.models import User

from .context import CallerIdentity

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScopeContext:
    """
    Resolved tenant scope for one request.

    Non-super-admin scopes always carry a project id.
    """

    caller_id: int
    is_super_admin: bool
    tenant_project_id: int | None = None

    def __post_init__(self):
        if not self.is_super_admin and self.tenant_project_id is None:
            raise AuthorizationError(
                reason="caller has no project membership", user_id=self.caller_id
            )


class ScopeResolver:
    """
    Computes the ScopeContext of a caller.

    Without a session only the token claims are consulted.
    """

    def __init__(self, db: Session | None = None):
        self._db = db

    def resolve(self, caller: CallerIdentity) -> ScopeContext:
        """
        Raises:
            AuthorizationError: Caller is not super admin and no project
                can be found for it.
        """
        if caller.is_super_admin:
            return ScopeContext(caller_id=caller.user_id, is_super_admin=True)

        project_id = caller.project_id
        if project_id is None:
            project_id = self._lookup_project(caller.user_id)

        if project_id is None:
            raise AuthorizationError(
                reason="caller has no project membership", user_id=caller.user_id
            )

        return ScopeContext(
            caller_id=caller.user_id,
            is_super_admin=False,
            tenant_project_id=project_id,
        )

    def _lookup_project(self, user_id: int) -> int | None:
        if self._db is None:
            return None
        user = self._db.scalar(
            select(User)
            .options(joinedload(User.branch))
            .where(User.id == user_id, User.deleted_at.is_(None))
        )
        if user is None:
            return None
        if user.project_id is not None:
            return user.project_id
        if user.branch is not None and user.branch.project_id is not None:
            logger.debug("Project resolved from branch", user_id=user_id, branch_id=user.branch_id)
            return user.branch.project_id
        return None
