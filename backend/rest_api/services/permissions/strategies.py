"""
Scoping strategies.
Strategy Pattern for tenant isolation of listings and single-row access.

Each strategy turns a ScopeContext into predicates that are AND'ed onto
the caller's own filters, never replacing them:

- GlobalScope: shared reference data, no predicate
- ProjectScope: ``<project path> = caller project``
- OwnerOrProjectScope: ``<project path> = caller project OR <owner> = caller``
- SuperAdminOnlyScope: super admins only, everyone else is refused

Super admins bypass every predicate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.utils.exceptions import AuthorizationError

from rest_api.services.crud.list_request import ListRequest
from rest_api.services.crud.predicates import AndGroup, FilterOp, OrGroup, Predicate

from .scope import ScopeContext


def _path(dotted: str) -> tuple[str, ...]:
    return tuple(dotted.split("."))


class ScopingStrategy(ABC):
    """
    Abstract base for scoping strategies.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def and_predicates(self, scope: ScopeContext) -> AndGroup:
        """Predicates that must all hold for rows in scope."""
        ...

    def or_groups(self, scope: ScopeContext) -> OrGroup:
        """Alternatives of which one must hold for rows in scope."""
        return OrGroup()

    def declared_paths(self) -> tuple[tuple[str, ...], ...]:
        """Field paths the predicates filter on, for checking against the model."""
        return ()

    def apply(self, request: ListRequest, scope: ScopeContext) -> ListRequest:
        """Narrow a listing to the scope."""
        return request.narrowed(self.and_predicates(scope)).with_or_groups(self.or_groups(scope))


class GlobalScope(ScopingStrategy):
    """Reference data visible to every authenticated caller."""

    @property
    def name(self) -> str:
        return "global"

    def and_predicates(self, scope: ScopeContext) -> AndGroup:
        return AndGroup()


class ProjectScope(ScopingStrategy):
    """
    Rows belong to exactly one project.

    ``project_path`` may go through relations, e.g. ``survey.project.id``.
    """

    def __init__(self, project_path: str = "project_id"):
        self.project_path = _path(project_path)

    @property
    def name(self) -> str:
        return "project"

    def declared_paths(self) -> tuple[tuple[str, ...], ...]:
        return (self.project_path,)

    def and_predicates(self, scope: ScopeContext) -> AndGroup:
        if scope.is_super_admin:
            return AndGroup()
        predicate = Predicate(self.project_path, FilterOp.EQ, scope.tenant_project_id, declared=True)
        return AndGroup((predicate,))


class OwnerOrProjectScope(ScopingStrategy):
    """
    Rows visible through the caller's project or to their direct owner.

    Records created by a user before being attached to a project stay
    visible to that user.
    """

    def __init__(self, project_path: str = "project_id", owner_field: str = "owner_user_id"):
        self.project_path = _path(project_path)
        self.owner_path = _path(owner_field)

    @property
    def name(self) -> str:
        return "owner_or_project"

    def declared_paths(self) -> tuple[tuple[str, ...], ...]:
        return (self.project_path, self.owner_path)

    def and_predicates(self, scope: ScopeContext) -> AndGroup:
        return AndGroup()

    def or_groups(self, scope: ScopeContext) -> OrGroup:
        if scope.is_super_admin:
            return OrGroup()
        in_project = Predicate(self.project_path, FilterOp.EQ, scope.tenant_project_id, declared=True)
        owned = Predicate(self.owner_path, FilterOp.EQ, scope.caller_id, declared=True)
        return OrGroup((AndGroup((in_project,)), AndGroup((owned,))))


class SuperAdminOnlyScope(ScopingStrategy):
    """Resources only super admins may see or change."""

    def __init__(self, action: str = "access this resource"):
        self.action = action

    @property
    def name(self) -> str:
        return "super_admin_only"

    def and_predicates(self, scope: ScopeContext) -> AndGroup:
        if not scope.is_super_admin:
            raise AuthorizationError(self.action, user_id=scope.caller_id)
        return AndGroup()
