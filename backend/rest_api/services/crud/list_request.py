"""
Listing request normalization.

Turns a parsed query tree (see ``bracket_notation``) into a ``ListRequest``
with defaults applied and declared types coerced.

Usage:
    tree = parse_bracket_query(raw_params)
    request = normalize_list_request(tree, field_types={"is_active": bool})
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from shared.config.constants import DEFAULT_SORT_FIELD, Limits, SortOrder
from shared.utils.exceptions import ValidationError
from shared.utils.validators import sanitize_search_term

from .predicates import (
    AndGroup,
    FilterOp,
    OrGroup,
    Predicate,
    or_group_from_mappings,
    predicates_from_mapping,
)

START_DATE_KEY = "start_date"
END_DATE_KEY = "end_date"

_BOOL_STRINGS = {"true": True, "1": True, "false": False, "0": False}


@dataclass
class ListRequest:
    """
    Canonical listing request.

    Attributes:
        search: Case-insensitive substring to match across searchable fields
        page: 1-indexed page number (clamped to >= 1, offset must fit in 64 bits)
        limit: Page size (clamped to 1..max_limit)
        sort_by: Root column or alias-qualified relation column
        sort_order: "ASC" or "DESC"
        equality_filters: Predicates that must all hold
        or_filter_groups: Alternatives of which one must hold
    """

    search: str | None = None
    page: int = Limits.DEFAULT_PAGE
    limit: int = Limits.DEFAULT_PAGE_SIZE
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = SortOrder.DESC
    equality_filters: AndGroup = field(default_factory=AndGroup)
    or_filter_groups: OrGroup = field(default_factory=OrGroup)
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.page = max(1, self.page)
        self.limit = min(max(1, self.limit), self.max_limit)
        if self.offset > Limits.MAX_OFFSET:
            raise ValidationError(f"Page {self.page} is out of range", field="page")
        if not self.sort_by:
            self.sort_by = DEFAULT_SORT_FIELD
        order = (self.sort_order or SortOrder.DESC).upper()
        if order not in SortOrder.ALL:
            raise ValidationError(
                "Sort order must be either 'ASC' or 'DESC'", field="sortOrder"
            )
        self.sort_order = order
        if self.search is not None and not self.search.strip():
            self.search = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def narrowed(self, predicates: AndGroup | Iterable[Predicate]) -> "ListRequest":
        """Return a copy with extra predicates AND'ed onto the filters."""
        return replace(self, equality_filters=self.equality_filters.extend(predicates))

    def with_or_groups(self, groups: OrGroup) -> "ListRequest":
        """
        Return a copy with ``groups`` as the OR group.

        Only one OR group exists per request; a second one would change
        the meaning of the first, so this refuses to overwrite.
        """
        if self.or_filter_groups and groups:
            raise ValidationError("Listing already carries an OR filter group")
        return replace(self, or_filter_groups=groups or self.or_filter_groups)


# =============================================================================
# Helpers
# =============================================================================


def _scalar(tree: Mapping[str, Any], key: str) -> Any:
    value = tree.get(key)
    if isinstance(value, Mapping):
        raise ValidationError(f"'{key}' must be a single value", field=key)
    if isinstance(value, list):
        return value[-1] if value else None
    return value


def _parse_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _parse_day(value: Any, key: str) -> date:
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(
            f"Invalid {key}: '{value}'. Expected YYYY-MM-DD", field=key
        )


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def date_range_predicates(start: Any = None, end: Any = None) -> list[Predicate]:
    """
    Inclusive calendar-day bounds on the root ``created_at`` column.
    """
    predicates = []
    start_day = end_day = None
    if start not in (None, ""):
        start_day = _parse_day(start, START_DATE_KEY)
        predicates.append(Predicate(("created_at",), FilterOp.GTE, _day_start(start_day)))
    if end not in (None, ""):
        end_day = _parse_day(end, END_DATE_KEY)
        predicates.append(
            Predicate(("created_at",), FilterOp.LT, _day_start(end_day + timedelta(days=1)))
        )
    if start_day and end_day and start_day > end_day:
        raise ValidationError("start_date must not be after end_date", field=START_DATE_KEY)
    return predicates


def coerce_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    coerced = _BOOL_STRINGS.get(str(value).strip().lower())
    if coerced is None:
        raise ValidationError(
            f"Invalid boolean for '{field_name}': '{value}'", field=field_name
        )
    return coerced


def _coerce_one(value: Any, declared: type, field_name: str) -> Any:
    if declared is bool:
        return coerce_bool(value, field_name)
    try:
        return declared(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid {declared.__name__} for '{field_name}': '{value}'",
            field=field_name,
        )


def _coerce_declared(group: AndGroup, field_types: Mapping[str, type]) -> AndGroup:
    if not field_types:
        return group
    coerced = []
    for predicate in group:
        declared = field_types.get(predicate.field)
        if declared is None or predicate.op is FilterOp.ISNULL:
            coerced.append(predicate)
            continue
        if isinstance(predicate.value, tuple):
            value = tuple(_coerce_one(v, declared, predicate.field) for v in predicate.value)
        else:
            value = _coerce_one(predicate.value, declared, predicate.field)
        coerced.append(replace(predicate, value=value))
    return AndGroup(tuple(coerced))


# =============================================================================
# Normalizer
# =============================================================================


def normalize_list_request(
    tree: Mapping[str, Any],
    *,
    field_types: Mapping[str, type] | None = None,
    or_filter_groups: OrGroup | Iterable[Mapping[str, Any]] | None = None,
    default_sort: str = DEFAULT_SORT_FIELD,
    max_limit: int = Limits.MAX_PAGE_SIZE,
) -> ListRequest:
    """
    Build a ListRequest from a parsed query tree.

    Args:
        tree: Output of ``parse_bracket_query``.
        field_types: Declared types for filter fields (``bool``, ``int``,
            ``float``), keyed by dotted path. Undeclared fields keep their
            string values.
        or_filter_groups: Caller-supplied OR semantics, passed through.
        default_sort: Sort field when ``sortBy`` is absent.
        max_limit: Upper bound for ``limit``.

    Raises:
        ValidationError: On a malformed ``filters`` tree, sort order,
            boolean, or date bound.
    """
    filters = tree.get("filters") or {}
    if not isinstance(filters, Mapping):
        raise ValidationError("'filters' must use bracket notation", field="filters")

    filters = dict(filters)
    start = filters.pop(START_DATE_KEY, None)
    end = filters.pop(END_DATE_KEY, None)
    if isinstance(start, (Mapping, list)) or isinstance(end, (Mapping, list)):
        raise ValidationError("Date bounds must be single values", field=START_DATE_KEY)

    equality = predicates_from_mapping(filters)
    equality = _coerce_declared(equality, field_types or {})
    equality = equality.extend(date_range_predicates(start, end))

    if isinstance(or_filter_groups, OrGroup):
        or_groups = or_filter_groups
    else:
        or_groups = or_group_from_mappings(or_filter_groups)

    search = _scalar(tree, "search")
    search = sanitize_search_term(search, Limits.MAX_SEARCH_TERM_LENGTH) if search else None

    return ListRequest(
        search=search or None,
        page=_parse_int(_scalar(tree, "page"), Limits.DEFAULT_PAGE),
        limit=_parse_int(_scalar(tree, "limit"), Limits.DEFAULT_PAGE_SIZE),
        sort_by=_scalar(tree, "sortBy") or default_sort,
        sort_order=_scalar(tree, "sortOrder") or SortOrder.DESC,
        equality_filters=equality,
        or_filter_groups=or_groups,
        max_limit=max_limit,
    )
