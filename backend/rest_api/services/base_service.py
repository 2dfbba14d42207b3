"""
Base service class for listable resources.

A ResourceService holds the static per-resource contract (entity, default
sort, relations, searchable fields, scoping strategy) and runs every call
through the same pipeline:

    raw query -> parse_bracket_query -> normalize_list_request
        -> scoping strategy -> QueryComposer -> output DTOs

Architecture:
    Router (thin) -> ResourceService (business logic) -> QueryComposer -> Model

Usage:
    from rest_api.services.base_service import ResourceService

    class ChainService(ResourceService[Chain, ChainOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                model=Chain,
                output_schema=ChainOutput,
                entity_name="Chain",
                relations=("project",),
                searchable_fields=("name",),
                scoping=ProjectScope(),
            )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Base
from rest_api.services.crud import (
    ListRequest,
    ListResult,
    QueryComposer,
    commit_write,
    normalize_list_request,
    parse_bracket_query,
    validate_relations,
)
from rest_api.services.crud.predicates import AndGroup, OrGroup
from rest_api.services.crud.relations import has_column, require_field
from rest_api.services.permissions import (
    CallerIdentity,
    GlobalScope,
    OwnerOrProjectScope,
    ScopeContext,
    ScopeResolver,
    ScopingStrategy,
)
from shared.config.constants import DEFAULT_SORT_FIELD
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    AuthorizationError,
    ConflictError,
    MalformedQueryError,
    ValidationError,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


def query_scalar(value: Any) -> Any:
    """Last value of a repeated query param."""
    if isinstance(value, list):
        return value[-1] if value else None
    return value


def set_filter_default(filters: dict[str, Any], path: Sequence[str], value: Any) -> None:
    """Set ``filters[path...]`` unless the caller already set it."""
    node = filters
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise MalformedQueryError("filter is both a value and a group", key=segment)
        node = child
    node.setdefault(path[-1], value)


class ResourceService(Generic[ModelT, OutputT]):
    """
    Base service for scoped, listable entities.

    Subclasses pass their static contract to ``__init__`` and override the
    hooks below for resource rules:

    - ``_translate_query``: map convenience query params onto ``filters``
    - ``_validate_create`` / ``_prepare_create``
    - ``_validate_update``
    - ``_validate_delete``
    - ``to_output``: DTO conversion (field masking)
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        alias: str | None = None,
        relations: Sequence[str] = (),
        detail_relations: Sequence[str] | None = None,
        searchable_fields: Sequence[str] = (),
        field_types: Mapping[str, type] | None = None,
        default_sort: str = DEFAULT_SORT_FIELD,
        scoping: ScopingStrategy | None = None,
        supports_soft_delete: bool = False,
        query_aliases: Mapping[str, tuple[str, ...]] | None = None,
    ):
        self._db = db
        self._model = model
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._alias = alias or model.__tablename__
        self._relations = tuple(relations)
        self._detail_relations = tuple(
            detail_relations if detail_relations is not None else relations
        )
        self._searchable_fields = tuple(searchable_fields)
        self._field_types = dict(field_types or {})
        self._default_sort = default_sort
        self._scoping = scoping or GlobalScope()
        self._supports_soft_delete = supports_soft_delete
        self._query_aliases = dict(query_aliases or {})
        self._composer = QueryComposer(db)
        self._resolver = ScopeResolver(db)

        validate_relations(model, self._relations)
        validate_relations(model, self._detail_relations)
        for name in self._searchable_fields:
            require_field(model, name, declared=True, purpose="search")
        for path in self._scoping.declared_paths():
            require_field(model, path, declared=True, purpose="scope")

    @property
    def db(self) -> Session:
        return self._db

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def scoping(self) -> ScopingStrategy:
        return self._scoping

    @property
    def composer(self) -> QueryComposer:
        return self._composer

    # =========================================================================
    # Scope
    # =========================================================================

    def resolve_scope(self, user: Mapping[str, Any]) -> ScopeContext:
        """Resolve the tenant scope of the authenticated caller."""
        return self._resolver.resolve(CallerIdentity.from_claims(dict(user)))

    def owner_or_project_predicate(self, scope: ScopeContext) -> OrGroup:
        """OR group restricting rows to the caller's project or ownership."""
        return self._scoping.or_groups(scope)

    def scope_filters(self, scope: ScopeContext) -> tuple[AndGroup, OrGroup]:
        """Scope predicates for single-row lookups."""
        return self._scoping.and_predicates(scope), self._scoping.or_groups(scope)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def build_request(
        self,
        raw_query: Mapping[str, Any],
        scope: ScopeContext,
        *,
        max_limit: int = settings.max_page_size,
    ) -> ListRequest:
        """
        Parse and normalize a raw query, then narrow it to the scope.

        ``max_limit`` caps the page size (exports allow larger pages).

        Raises:
            MalformedQueryError: Bracket keys too deep, arrays too long.
            ValidationError: Bad sort order, boolean or date bound.
            AuthorizationError: The scoping strategy refuses the caller.
        """
        tree = parse_bracket_query(
            raw_query,
            max_depth=settings.max_filter_depth,
            max_array_length=settings.max_filter_array_length,
        )
        tree = self._translate_query(tree)
        request = normalize_list_request(
            tree,
            field_types=self._field_types,
            default_sort=self._default_sort,
            max_limit=max_limit,
        )
        return self._scoping.apply(request, scope)

    def list(
        self,
        raw_query: Mapping[str, Any],
        user: Mapping[str, Any],
        *,
        include_deleted: bool = False,
    ) -> ListResult[OutputT]:
        """
        List one page of entities visible to the caller.

        Args:
            raw_query: Flat query-string mapping (bracket keys allowed).
            user: Verified JWT claims.
            include_deleted: Also list soft-deleted rows.

        Returns:
            ListResult of output DTOs.
        """
        scope = self.resolve_scope(user)
        request = self.build_request(raw_query, scope)
        return self.list_page(request, scope, include_deleted=include_deleted)

    def list_page(
        self,
        request: ListRequest,
        scope: ScopeContext,
        *,
        include_deleted: bool = False,
    ) -> ListResult[OutputT]:
        """Run an already-scoped request and convert the page to DTOs."""
        result = self._composer.find_page(
            self._model,
            self._alias,
            request,
            relations=self._relations,
            searchable_fields=self._searchable_fields,
            include_deleted=include_deleted,
        )
        return ListResult(
            total=result.total,
            page=result.page,
            limit=result.limit,
            records=[self.to_output(entity, scope) for entity in result.records],
        )

    def export(
        self,
        raw_query: Mapping[str, Any],
        user: Mapping[str, Any],
        *,
        include_deleted: bool = False,
    ) -> list[OutputT]:
        """
        Rows for a file export of the listing.

        Same filters, search, sort and scope as ``list``; ``limit`` defaults
        to and is capped at ``settings.max_export_rows``.
        """
        raw_query = dict(raw_query)
        if query_scalar(raw_query.get("limit")) in (None, ""):
            raw_query["limit"] = str(settings.max_export_rows)
        scope = self.resolve_scope(user)
        request = self.build_request(raw_query, scope, max_limit=settings.max_export_rows)
        result = self.list_page(request, scope, include_deleted=include_deleted)
        logger.info(
            f"{self._entity_name} listing exported",
            rows=len(result.records),
            total=result.total,
        )
        return result.records

    def get_entity(
        self,
        entity_id: int,
        scope: ScopeContext,
        *,
        relations: Sequence[str] | None = None,
        include_deleted: bool = False,
    ) -> ModelT:
        """
        Get raw entity within scope (for internal use).

        Raises:
            NotFoundError: Absent, soft-deleted or out of scope.
        """
        and_group, or_group = self.scope_filters(scope)
        return self._composer.find_one(
            self._model,
            self._alias,
            entity_id,
            self._detail_relations if relations is None else relations,
            equality_filters=and_group,
            or_filter_groups=or_group,
            include_deleted=include_deleted,
        )

    def get(
        self,
        entity_id: int,
        user: Mapping[str, Any],
        *,
        include_deleted: bool = False,
    ) -> OutputT:
        """Get one entity by ID, as seen by the caller."""
        scope = self.resolve_scope(user)
        entity = self.get_entity(entity_id, scope, include_deleted=include_deleted)
        return self.to_output(entity, scope)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: dict[str, Any], user: Mapping[str, Any]) -> OutputT:
        """
        Create a new entity inside the caller's scope.

        Raises:
            ValidationError: Invalid data.
            AuthorizationError: Target project outside the caller's scope.
            ConflictError: A constraint rejected the row.
        """
        scope = self.resolve_scope(user)
        self._scoping.and_predicates(scope)
        data = dict(data)
        self._validate_create(data, scope)
        data = self._prepare_create(data, scope)

        entity = self._model(**data)
        self._db.add(entity)
        commit_write(self._db, f"create {self._alias}", self._alias)
        self._db.refresh(entity)

        logger.info(
            f"{self._entity_name} created",
            entity_id=entity.id,
            user_id=scope.caller_id,
        )
        return self.to_output(self.get_entity(entity.id, scope), scope)

    def update(self, entity_id: int, data: dict[str, Any], user: Mapping[str, Any]) -> OutputT:
        """
        Update an existing entity within scope.

        Raises:
            NotFoundError: Absent or out of scope.
            ValidationError: Invalid data.
            ConflictError: A constraint rejected the change.
        """
        scope = self.resolve_scope(user)
        entity = self.get_entity(entity_id, scope)
        data = dict(data)
        self._validate_update(entity, data, scope)

        for field_name, value in data.items():
            if has_column(self._model, field_name):
                setattr(entity, field_name, value)
        self._apply_update(entity, data, scope)

        commit_write(self._db, f"update {self._alias}", self._alias, entity_id)
        self._db.refresh(entity)

        logger.info(
            f"{self._entity_name} updated",
            entity_id=entity_id,
            user_id=scope.caller_id,
            fields=sorted(data),
        )
        return self.to_output(self.get_entity(entity_id, scope), scope)

    def delete(self, entity_id: int, user: Mapping[str, Any]) -> None:
        """
        Delete an entity (soft delete if the resource supports it).

        Raises:
            NotFoundError: Absent, already deleted or out of scope.
            ConflictError: Hard delete blocked by referencing rows.
        """
        scope = self.resolve_scope(user)
        entity = self.get_entity(entity_id, scope, relations=())
        self._validate_delete(entity, scope)

        and_group, or_group = self.scope_filters(scope)
        if self._supports_soft_delete:
            self._composer.soft_delete(
                self._model,
                self._alias,
                entity_id,
                equality_filters=and_group,
                or_filter_groups=or_group,
            )
        else:
            self._composer.delete(
                self._model,
                self._alias,
                entity_id,
                equality_filters=and_group,
                or_filter_groups=or_group,
            )

    def restore(self, entity_id: int, user: Mapping[str, Any]) -> OutputT:
        """
        Reverse a soft delete.

        Raises:
            ValidationError: The resource is hard-deleted.
            NotFoundError: Absent, not deleted or out of scope.
        """
        if not self._supports_soft_delete:
            raise ValidationError(
                f"{self._entity_name} does not support restore", entity=self._alias
            )
        scope = self.resolve_scope(user)
        and_group, or_group = self.scope_filters(scope)
        entity = self._composer.restore(
            self._model,
            self._alias,
            entity_id,
            equality_filters=and_group,
            or_filter_groups=or_group,
        )
        return self.to_output(self.get_entity(entity.id, scope), scope)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT, scope: ScopeContext) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for field masking.
        """
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Hooks (override in subclasses)
    # =========================================================================

    def _translate_query(self, tree: dict[str, Any]) -> dict[str, Any]:
        """
        Map resource-specific query params onto the ``filters`` tree.

        Each alias in ``query_aliases`` names the filter path it stands
        for. An explicit ``filters[...]`` entry for the same path wins.
        """
        if not self._query_aliases:
            return tree
        tree = dict(tree)
        filters = tree.get("filters") or {}
        if not isinstance(filters, dict):
            return tree
        filters = dict(filters)
        for param, path in self._query_aliases.items():
            value = query_scalar(tree.pop(param, None))
            if value not in (None, ""):
                set_filter_default(filters, path, value)
        tree["filters"] = filters
        return tree

    def _validate_create(self, data: dict[str, Any], scope: ScopeContext) -> None:
        pass

    def _prepare_create(self, data: dict[str, Any], scope: ScopeContext) -> dict[str, Any]:
        """
        Pin the new row to the caller's project.

        Super admins may name any project; other callers may only create
        inside their own.
        """
        if not has_column(self._model, "project_id") or scope.is_super_admin:
            return data
        requested = data.get("project_id")
        if requested is not None and requested != scope.tenant_project_id:
            raise AuthorizationError(
                f"create {self._alias} in another project",
                user_id=scope.caller_id,
                project_id=requested,
            )
        data["project_id"] = scope.tenant_project_id
        return data

    def _validate_update(self, entity: ModelT, data: dict[str, Any], scope: ScopeContext) -> None:
        pass

    def _apply_update(self, entity: ModelT, data: dict[str, Any], scope: ScopeContext) -> None:
        """Apply changes that are not plain columns (relations)."""
        pass

    def _validate_delete(self, entity: ModelT, scope: ScopeContext) -> None:
        pass


class OwnedResourceService(ResourceService[ModelT, OutputT], Generic[ModelT, OutputT]):
    """
    Service for entities a user can own outside any project.

    Extends ResourceService with:
    - project-or-owner scoping
    - name unique per owner (super admin rows have no owner)
    - ``owner_user_id`` hidden from callers who are neither super admin
      nor the owner
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        **kwargs: Any,
    ):
        kwargs.setdefault("scoping", OwnerOrProjectScope())
        super().__init__(
            db=db,
            model=model,
            output_schema=output_schema,
            entity_name=entity_name,
            **kwargs,
        )

    @staticmethod
    def owner_for(scope: ScopeContext) -> int | None:
        """Owner recorded on rows the caller creates."""
        return None if scope.is_super_admin else scope.caller_id

    def ensure_unique_name(self, name: str, owner_id: int | None, exclude_id: int | None = None) -> None:
        """
        Raises:
            ConflictError: The owner already has a live row with this name.
        """
        owner_column = self._model.owner_user_id
        stmt = select(self._model.id).where(
            self._model.name == name,
            owner_column.is_(None) if owner_id is None else owner_column == owner_id,
            self._model.deleted_at.is_(None),
        )
        if exclude_id is not None:
            stmt = stmt.where(self._model.id != exclude_id)
        if self._db.scalar(stmt) is not None:
            raise ConflictError(
                f"{self._entity_name} name already exists",
                entity=self._alias,
                owner_user_id=owner_id,
            )

    def _validate_create(self, data: dict[str, Any], scope: ScopeContext) -> None:
        self.ensure_unique_name(data["name"], self.owner_for(scope))

    def _prepare_create(self, data: dict[str, Any], scope: ScopeContext) -> dict[str, Any]:
        data["owner_user_id"] = self.owner_for(scope)
        if scope.is_super_admin:
            return data
        # Owned rows may live outside any project until attached
        if data.get("project_id") is None:
            data.pop("project_id", None)
            return data
        return super()._prepare_create(data, scope)

    def _validate_update(self, entity: ModelT, data: dict[str, Any], scope: ScopeContext) -> None:
        data.pop("owner_user_id", None)
        data.pop("project_id", None)
        name = data.get("name")
        if name is not None and name != entity.name:
            self.ensure_unique_name(name, entity.owner_user_id, exclude_id=entity.id)

    def to_output(self, entity: ModelT, scope: ScopeContext) -> OutputT:
        output = self._output_schema.model_validate(entity)
        visible = scope.is_super_admin or (
            entity.owner_user_id is not None and entity.owner_user_id == scope.caller_id
        )
        if not visible:
            output = output.model_copy(update={"owner_user_id": None})
        return output
