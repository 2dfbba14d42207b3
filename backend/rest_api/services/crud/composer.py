"""
Generic relation-aware listing engine.

QueryComposer turns a ListRequest into one SELECT that both counts the
matching rows and fetches the requested page, so the reported total and the
returned records always come from the same snapshot.

Usage:
    composer = QueryComposer(db)
    result = composer.find_all(
        Product, "product",
        search="phone", page=2, limit=20,
        sort_by="brand.name", sort_order="ASC",
        relations=["brand", "stock"],
        searchable_fields=["name", "sku"],
        equality_filters={"project.id": 3},
    )
    result.to_dict()  # {"total_records", "current_page", "per_page", "records"}
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

from sqlalchemy import String, and_, cast, func, or_, select, true
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased
from sqlalchemy.sql import Select, sqltypes
from sqlalchemy.sql.elements import ColumnElement

from shared.config.constants import DEFAULT_SORT_FIELD, SortOrder
from shared.config.logging import query_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    ConfigurationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from shared.utils.validators import escape_like_pattern

from .list_request import ListRequest
from .predicates import (
    AndGroup,
    FilterOp,
    OrGroup,
    Predicate,
    or_group_from_mappings,
    predicates_from_mapping,
)
from .relations import (
    ResolvedField,
    column_keys,
    has_column,
    loader_options,
    require_field,
    resolve_relation_steps,
    split_path,
    validate_relations,
    wrap_in_relations,
)

T = TypeVar("T")

FilterInput = AndGroup | Mapping[str, Any] | None
OrInput = OrGroup | Iterable[Mapping[str, Any]] | None


@dataclass
class ListResult(Generic[T]):
    """One page of a listing plus the size of the full matching set."""

    total: int
    page: int
    limit: int
    records: list[T] = field(default_factory=list)

    def to_dict(self, serialize: Callable[[T], Any] | None = None) -> dict[str, Any]:
        """Convert to the wire shape used by every list endpoint."""
        records = [serialize(r) for r in self.records] if serialize else list(self.records)
        return {
            "total_records": self.total,
            "current_page": self.page,
            "per_page": self.limit,
            "records": records,
        }


def _as_and_group(filters: FilterInput) -> AndGroup:
    if filters is None:
        return AndGroup()
    if isinstance(filters, AndGroup):
        return filters
    return predicates_from_mapping(filters, dotted_keys=True)


def _as_or_group(groups: OrInput) -> OrGroup:
    if groups is None:
        return OrGroup()
    if isinstance(groups, OrGroup):
        return groups
    return or_group_from_mappings(groups)


# =============================================================================
# Value coercion
# =============================================================================


def _coerce_scalar(value: Any, column_type: Any, field_name: str) -> Any:
    """Convert a raw filter value to the Python type of the target column."""
    try:
        if isinstance(column_type, sqltypes.Boolean):
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Filter on boolean field '{field_name}' needs a declared boolean value",
                    field=field_name,
                )
            return value
        if isinstance(value, bool):
            return value
        if isinstance(column_type, sqltypes.Integer):
            return int(str(value).strip())
        if isinstance(column_type, sqltypes.Float):
            return float(value)
        if isinstance(column_type, sqltypes.Numeric):
            return Decimal(str(value).strip())
        if isinstance(column_type, sqltypes.DateTime):
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime.combine(value, datetime.min.time())
            return datetime.fromisoformat(str(value).strip())
        if isinstance(column_type, sqltypes.Date):
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, date):
                return value
            return date.fromisoformat(str(value).strip())
        if isinstance(column_type, sqltypes.String):
            return str(value)
    except (ValueError, TypeError, InvalidOperation):
        raise ValidationError(
            f"Invalid value for '{field_name}': '{value}'", field=field_name
        )
    return value


def _column_criterion(resolved: ResolvedField, predicate: Predicate) -> ColumnElement:
    column = resolved.attribute()
    column_type = resolved.column_type
    op = predicate.op
    value = predicate.value

    if op is FilterOp.ISNULL:
        return column.is_(None) if value else column.is_not(None)

    if op in (FilterOp.LIKE, FilterOp.ILIKE):
        pattern = f"%{escape_like_pattern(str(value))}%"
        target = column if isinstance(column_type, sqltypes.String) else cast(column, String)
        if op is FilterOp.LIKE:
            return target.like(pattern, escape="\\")
        return target.ilike(pattern, escape="\\")

    if op is FilterOp.IN:
        values = [_coerce_scalar(v, column_type, predicate.field) for v in value]
        return column.in_(values)

    value = _coerce_scalar(value, column_type, predicate.field)
    if op is FilterOp.EQ:
        return column == value
    if op is FilterOp.NE:
        return column != value
    if op is FilterOp.GT:
        return column > value
    if op is FilterOp.GTE:
        return column >= value
    if op is FilterOp.LT:
        return column < value
    if op is FilterOp.LTE:
        return column <= value
    raise ValidationError(f"Unsupported filter operator '{op.value}'", field=predicate.field)


# =============================================================================
# Writes
# =============================================================================


def commit_write(session: Session, operation: str, alias: str, entity_id: Any = None) -> None:
    """
    Commit a write, rolling back on failure.

    Raises:
        ConflictError: A constraint rejected the write.
        DatabaseError: Any other store failure.
    """
    try:
        safe_commit(session)
    except IntegrityError:
        raise ConflictError(
            f"Cannot {operation}: conflicts with existing records",
            entity=alias,
            entity_id=entity_id,
        )
    except SQLAlchemyError:
        raise DatabaseError(operation, entity=alias, entity_id=entity_id)


# =============================================================================
# Composer
# =============================================================================


class QueryComposer:
    """
    Builds and runs listing, lookup and delete statements for any mapped entity.

    The composer never hardcodes resource field names: relations, searchable
    fields and scope predicates all come from the caller.
    """

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # -------------------------------------------------------------------------
    # Criteria
    # -------------------------------------------------------------------------

    def _and_criterion(self, model: type, group: AndGroup) -> ColumnElement:
        """
        AND a group of predicates.

        Predicates sharing a relation path go into the same EXISTS, so
        ``stock.branch_id=1&stock.quantity[gt]=0`` means one stock row
        satisfying both.
        """
        by_path: dict[tuple[str, ...], list[ColumnElement]] = defaultdict(list)
        steps_for: dict[tuple[str, ...], tuple] = {}
        for predicate in group:
            resolved = require_field(
                model, predicate.path, declared=predicate.declared, purpose="filter"
            )
            key = predicate.relation_path
            steps_for[key] = resolved.steps
            by_path[key].append(_column_criterion(resolved, predicate))

        clauses = []
        for key, criteria in by_path.items():
            criterion = and_(*criteria) if len(criteria) > 1 else criteria[0]
            clauses.append(wrap_in_relations(steps_for[key], criterion))
        if not clauses:
            return true()
        return and_(*clauses)

    def _search_criterion(self, model: type, search: str | None, fields: Sequence[str]) -> ColumnElement | None:
        if not search or not fields:
            return None
        pattern = f"%{escape_like_pattern(search)}%"
        clauses = []
        for name in fields:
            resolved = require_field(model, name, declared=True, purpose="search")
            column = resolved.attribute()
            if not isinstance(resolved.column_type, sqltypes.String):
                column = cast(column, String)
            clauses.append(wrap_in_relations(resolved.steps, column.ilike(pattern, escape="\\")))
        return or_(*clauses)

    def _criteria(
        self,
        model: type,
        request: ListRequest,
        searchable_fields: Sequence[str],
        include_deleted: bool,
    ) -> list[ColumnElement]:
        criteria = []
        if not include_deleted and has_column(model, "deleted_at"):
            criteria.append(model.deleted_at.is_(None))
        if request.equality_filters:
            criteria.append(self._and_criterion(model, request.equality_filters))
        if request.or_filter_groups:
            criteria.append(
                or_(*(self._and_criterion(model, group) for group in request.or_filter_groups))
            )
        search = self._search_criterion(model, request.search, searchable_fields)
        if search is not None:
            criteria.append(search)
        return criteria

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------

    def _sort_field(self, model: type, alias: str, sort_by: str, relations: Sequence[str]) -> ResolvedField:
        parts = split_path(sort_by or DEFAULT_SORT_FIELD)
        if len(parts) == 2 and parts[0] == alias and has_column(model, parts[1]):
            parts = parts[1:]

        if len(parts) == 1:
            key = parts[0]
            if has_column(model, key):
                return ResolvedField(steps=(), target=model, column_key=key)

            # Bare key: look for it on the declared to-one relations
            candidates = []
            for relation in relations:
                steps = resolve_relation_steps(model, split_path(relation))
                if not steps or any(step.uselist for step in steps):
                    continue
                target = steps[-1].mapper.class_
                if has_column(target, key):
                    candidates.append((relation, ResolvedField(steps, target, key)))
            if len(candidates) > 1:
                options = ", ".join(f"{relation}.{key}" for relation, _ in candidates)
                raise ValidationError(
                    f"Ambiguous sortBy field '{key}'. Use one of: {options}",
                    field="sortBy",
                )
            if candidates:
                return candidates[0][1]
            available = ", ".join(column_keys(model))
            raise ValidationError(
                f"Invalid sortBy field: '{key}'. Available: {available}",
                field="sortBy",
            )

        resolved = require_field(model, parts, declared=False, purpose="sort")
        if resolved.through_collection:
            raise ValidationError(
                f"Cannot sort by '{sort_by}': it goes through a to-many relation",
                field="sortBy",
            )
        return resolved

    def _join_sort_column(
        self, stmt: Select, model: type, resolved: ResolvedField
    ) -> tuple[Select, ColumnElement]:
        """Outer-join the to-one hops of the sort path and return its column."""
        entity: Any = model
        for step in resolved.steps:
            target = aliased(step.mapper.class_)
            stmt = stmt.outerjoin(getattr(entity, step.key).of_type(target))
            entity = target
        return stmt, resolved.attribute(entity)

    @staticmethod
    def _ordering(sort_order: str, column: ColumnElement, tie_breakers: Sequence[ColumnElement]) -> list:
        """Sort column plus primary-key tie-breakers, all in one direction."""
        if sort_order == SortOrder.ASC:
            return [column.asc(), *(c.asc() for c in tie_breakers)]
        return [column.desc(), *(c.desc() for c in tie_breakers)]

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def find_all(
        self,
        model: type[T],
        alias: str,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str | None = None,
        sort_order: str = SortOrder.DESC,
        relations: Sequence[str] = (),
        searchable_fields: Sequence[str] = (),
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
        *,
        include_deleted: bool = False,
    ) -> ListResult[T]:
        """
        List one page of ``model`` rows.

        Args:
            model: Mapped entity class.
            alias: Entity label; also accepted as a qualifier in ``sort_by``.
            search: Case-insensitive substring OR'ed across ``searchable_fields``.
                No effect when ``searchable_fields`` is empty.
            page, limit: Clamped to ``page >= 1`` and ``1 <= limit <= 100``.
            sort_by: Root column, alias-qualified relation column
                (``brand.name``) or a bare column of one declared to-one relation.
            sort_order: "ASC" or "DESC".
            relations: Relation paths to eager-load.
            searchable_fields: Columns (or relation-path columns) to search.
            equality_filters: AndGroup, or a mapping with dotted relation keys.
            or_filter_groups: OrGroup, or mappings each AND'ed internally.
            include_deleted: Also return soft-deleted rows.

        Raises:
            ValidationError: Invalid sort, filter field or filter value.
            ConfigurationError: Unknown declared relation or search field.
        """
        request = ListRequest(
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by or DEFAULT_SORT_FIELD,
            sort_order=sort_order,
            equality_filters=_as_and_group(equality_filters),
            or_filter_groups=_as_or_group(or_filter_groups),
        )
        return self.find_page(
            model,
            alias,
            request,
            relations=relations,
            searchable_fields=searchable_fields,
            include_deleted=include_deleted,
        )

    def find_page(
        self,
        model: type[T],
        alias: str,
        request: ListRequest,
        *,
        relations: Sequence[str] = (),
        searchable_fields: Sequence[str] = (),
        include_deleted: bool = False,
    ) -> ListResult[T]:
        """
        List one page of ``model`` rows for an already-normalized request.

        The page is a subquery left-joined onto a one-row count of the
        whole matching set, so a page past the end still comes back as a
        single row carrying the total.
        """
        relation_steps = validate_relations(model, relations)
        sort_field = self._sort_field(model, alias, request.sort_by, relations)
        criteria = self._criteria(model, request, searchable_fields, include_deleted)

        total_sq = (
            select(func.count().label("total_count"))
            .select_from(model)
            .where(*criteria)
            .subquery("listing_total")
        )

        page_stmt, sort_column = self._join_sort_column(select(model), model, sort_field)
        if sort_field.steps:
            page_stmt = page_stmt.add_columns(sort_column.label("sort_key"))
        primary_keys = list(model.__mapper__.primary_key)
        page_sq = (
            page_stmt.where(*criteria)
            .order_by(*self._ordering(request.sort_order, sort_column, primary_keys))
            .offset(request.offset)
            .limit(request.limit)
            .subquery("listing_page")
        )
        entity = aliased(model, page_sq)
        if sort_field.steps:
            page_sort = page_sq.c.sort_key
        else:
            page_sort = page_sq.corresponding_column(model.__mapper__.columns[sort_field.column_key])

        stmt = (
            select(total_sq.c.total_count, entity)
            .select_from(total_sq)
            .outerjoin(page_sq, true())
            .order_by(
                *self._ordering(
                    request.sort_order,
                    page_sort,
                    [page_sq.corresponding_column(pk) for pk in primary_keys],
                )
            )
            .options(*loader_options(model, relation_steps, root=entity))
        )

        logger.debug(
            "Listing composed",
            entity=alias,
            page=request.page,
            limit=request.limit,
            sort_by=request.sort_by,
            sort_order=request.sort_order,
            filters=len(request.equality_filters),
            or_groups=len(request.or_filter_groups),
            search=bool(request.search),
        )

        rows = self._session.execute(stmt).all()
        total = rows[0].total_count if rows else 0
        records = [row[1] for row in rows if row[1] is not None]

        return ListResult(total=total, page=request.page, limit=request.limit, records=records)

    # -------------------------------------------------------------------------
    # Single-row operations
    # -------------------------------------------------------------------------

    def _lookup(
        self,
        model: type[T],
        entity_id: Any,
        *,
        relations: Sequence[str] = (),
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
        deleted: bool | None = False,
    ) -> T | None:
        """
        Select one row by primary key.

        ``deleted``: False excludes soft-deleted rows, True returns only
        soft-deleted rows, None ignores the marker.
        """
        relation_steps = validate_relations(model, relations)
        stmt = select(model).where(model.id == entity_id)
        if has_column(model, "deleted_at"):
            if deleted is False:
                stmt = stmt.where(model.deleted_at.is_(None))
            elif deleted is True:
                stmt = stmt.where(model.deleted_at.is_not(None))
        and_group = _as_and_group(equality_filters)
        if and_group:
            stmt = stmt.where(self._and_criterion(model, and_group))
        or_group = _as_or_group(or_filter_groups)
        if or_group:
            stmt = stmt.where(or_(*(self._and_criterion(model, g) for g in or_group)))
        stmt = stmt.options(*loader_options(model, relation_steps))
        return self._session.scalar(stmt)

    def find_one(
        self,
        model: type[T],
        alias: str,
        entity_id: Any,
        relations: Sequence[str] = (),
        *,
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
        include_deleted: bool = False,
    ) -> T:
        """
        Fetch one row by id.

        Scope is the caller's business: pass it as filters.

        Raises:
            NotFoundError: No live row (or no row at all with
                ``include_deleted``) matches.
        """
        entity = self._lookup(
            model,
            entity_id,
            relations=relations,
            equality_filters=equality_filters,
            or_filter_groups=or_filter_groups,
            deleted=None if include_deleted else False,
        )
        if entity is None:
            raise NotFoundError(alias.capitalize(), entity_id)
        return entity

    def delete(
        self,
        model: type[T],
        alias: str,
        entity_id: Any,
        *,
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
    ) -> None:
        """
        Remove a row permanently.

        Raises:
            NotFoundError: The id does not exist (or is soft-deleted).
            ConflictError: Other rows still reference it.
        """
        entity = self.find_one(
            model,
            alias,
            entity_id,
            equality_filters=equality_filters,
            or_filter_groups=or_filter_groups,
        )
        self._session.delete(entity)
        commit_write(self._session, f"delete {alias}", alias, entity_id)
        logger.info("Entity deleted", entity=alias, entity_id=entity_id)

    def soft_delete(
        self,
        model: type[T],
        alias: str,
        entity_id: Any,
        *,
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
    ) -> T:
        """
        Set the deletion marker instead of removing the row.

        Later reads exclude the row unless they opt in.

        Raises:
            ConfigurationError: The entity has no deletion marker.
            NotFoundError: The id does not exist or is already deleted.
        """
        if not has_column(model, "deleted_at"):
            raise ConfigurationError(f"{model.__name__} does not support soft delete")
        entity = self.find_one(
            model,
            alias,
            entity_id,
            equality_filters=equality_filters,
            or_filter_groups=or_filter_groups,
        )
        entity.soft_delete()
        commit_write(self._session, f"soft delete {alias}", alias, entity_id)
        logger.info("Entity soft deleted", entity=alias, entity_id=entity_id)
        return entity

    def restore(
        self,
        model: type[T],
        alias: str,
        entity_id: Any,
        *,
        equality_filters: FilterInput = None,
        or_filter_groups: OrInput = None,
    ) -> T:
        """
        Clear the deletion marker.

        Raises:
            ConfigurationError: The entity has no deletion marker.
            NotFoundError: The id does not exist or is not deleted.
        """
        if not has_column(model, "deleted_at"):
            raise ConfigurationError(f"{model.__name__} does not support soft delete")
        entity = self._lookup(
            model,
            entity_id,
            equality_filters=equality_filters,
            or_filter_groups=or_filter_groups,
            deleted=True,
        )
        if entity is None:
            raise NotFoundError(f"Deleted {alias}", entity_id)
        entity.restore()
        commit_write(self._session, f"restore {alias}", alias, entity_id)
        self._session.refresh(entity)
        logger.info("Entity restored", entity=alias, entity_id=entity_id)
        return entity
