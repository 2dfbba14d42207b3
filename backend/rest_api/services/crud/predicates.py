"""
Filter predicates with explicit AND / OR structure.

A listing filter is an ``AndGroup`` of ``Predicate`` objects, optionally
AND'ed with one ``OrGroup`` whose members are themselves ``AndGroup``s:

    WHERE <and group> AND (<and group 1> OR <and group 2> OR ...)

Predicates are built from plain mappings. Nested mappings address relation
paths (dotted keys too, when asked for), and a trailing operator segment
selects the comparison:

    predicates_from_mapping({"price": {"gte": "10", "lte": "50"}})
    predicates_from_mapping({"project.id": 3, "status": ["a", "b"]}, dotted_keys=True)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from shared.config.constants import NULL_LITERAL
from shared.utils.exceptions import ValidationError

Scalar = Union[str, int, float, bool, Decimal, date, datetime]
FilterValue = Union[Scalar, tuple[Scalar, ...], None]


class FilterOp(str, Enum):
    EQ = "eq"
    NE = "ne"
    LIKE = "like"
    ILIKE = "ilike"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    ISNULL = "isnull"
    IN = "in"


OPERATOR_NAMES = frozenset(op.value for op in FilterOp)

_TRUE_STRINGS = frozenset({"true", "1"})


@dataclass(frozen=True)
class Predicate:
    """
    One comparison against a root column or a relation-path column.

    ``declared`` marks predicates built from a resource's static contract
    (scoping paths) rather than from request input; an unknown field there
    is a ConfigurationError, not a 400.
    """

    path: tuple[str, ...]
    op: FilterOp = FilterOp.EQ
    value: FilterValue = None
    declared: bool = dataclass_field(default=False, compare=False)

    @property
    def field(self) -> str:
        return ".".join(self.path)

    @property
    def column(self) -> str:
        return self.path[-1]

    @property
    def relation_path(self) -> tuple[str, ...]:
        return self.path[:-1]


@dataclass(frozen=True)
class AndGroup:
    """Predicates that must all hold."""

    predicates: tuple[Predicate, ...] = ()

    def __len__(self) -> int:
        return len(self.predicates)

    def __iter__(self):
        return iter(self.predicates)

    def extend(self, other: "AndGroup | Iterable[Predicate]") -> "AndGroup":
        """Return a new group holding both sets of predicates."""
        return AndGroup(self.predicates + tuple(other))


@dataclass(frozen=True)
class OrGroup:
    """Alternatives of which at least one must hold."""

    groups: tuple[AndGroup, ...] = ()

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self):
        return iter(self.groups)


def _split_operator(path: tuple[str, ...]) -> tuple[tuple[str, ...], FilterOp]:
    if len(path) > 1 and path[-1] in OPERATOR_NAMES:
        return path[:-1], FilterOp(path[-1])
    return path, FilterOp.EQ


def _flatten(mapping: Mapping[str, Any], dotted_keys: bool, prefix: tuple[str, ...] = ()):
    for key, value in mapping.items():
        key = str(key)
        parts = tuple(p for p in key.split(".") if p) if dotted_keys else (key,)
        path = prefix + parts
        if isinstance(value, Mapping):
            yield from _flatten(value, dotted_keys, path)
        else:
            yield path, value


def _is_null_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_STRINGS


def build_predicate(path: tuple[str, ...], value: Any) -> Predicate | None:
    """
    Build one predicate from a flattened path and its raw value.

    Returns None for values that mean "not provided" (None, empty string,
    empty list).
    """
    path, op = _split_operator(path)
    if not path:
        raise ValidationError("Empty filter field", field="filters")

    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        values = tuple(v for v in value if v is not None and v != "")
        if not values:
            return None
        if op not in (FilterOp.EQ, FilterOp.IN):
            raise ValidationError(
                f"Operator '{op.value}' does not accept a list of values",
                field=".".join(path),
            )
        if NULL_LITERAL in values:
            raise ValidationError(
                f"'{NULL_LITERAL}' cannot be combined with other values",
                field=".".join(path),
            )
        return Predicate(path, FilterOp.IN, values)

    if isinstance(value, str) and value == "":
        return None

    if value == NULL_LITERAL:
        return Predicate(path, FilterOp.ISNULL, True)

    if op is FilterOp.ISNULL:
        return Predicate(path, FilterOp.ISNULL, _is_null_flag(value))

    if op is FilterOp.IN:
        return Predicate(path, FilterOp.IN, (value,))

    return Predicate(path, op, value)


def predicates_from_mapping(
    mapping: Mapping[str, Any] | None,
    *,
    dotted_keys: bool = False,
) -> AndGroup:
    """
    Flatten a (possibly nested) mapping into an AndGroup.

    Empty-string values are skipped. ``__NULL__`` becomes an IS NULL test.
    With ``dotted_keys`` a key like ``project.id`` is read as a path;
    otherwise dots are kept as part of the field name.
    """
    if not mapping:
        return AndGroup()
    predicates = []
    for path, value in _flatten(mapping, dotted_keys):
        predicate = build_predicate(path, value)
        if predicate is not None:
            predicates.append(predicate)
    return AndGroup(tuple(predicates))


def or_group_from_mappings(
    mappings: Iterable[Mapping[str, Any]] | None,
    *,
    dotted_keys: bool = True,
) -> OrGroup:
    """
    Build an OrGroup where each mapping is AND'ed internally.

    A mapping that yields no predicate at all would match every row and make
    the whole OR trivially true, so it is rejected.
    """
    if not mappings:
        return OrGroup()
    groups = []
    for mapping in mappings:
        group = predicates_from_mapping(mapping, dotted_keys=dotted_keys)
        if not group:
            raise ValidationError("OR filter group has no usable predicate")
        groups.append(group)
    return OrGroup(tuple(groups))
