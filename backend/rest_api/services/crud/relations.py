"""
Relation-path resolution against the mapped entity graph.

Paths are dot-separated relationship names (``feedbacks.user``) checked
against SQLAlchemy mapper metadata. Unknown paths raise instead of being
ignored, so a typo never turns into an empty result set.

Statically declared paths (eager-load relations, searchable fields) raise
``ConfigurationError``; paths coming from a request raise
``ValidationError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipProperty, joinedload, selectinload
from sqlalchemy.sql.elements import ColumnElement

from shared.utils.exceptions import ConfigurationError, ValidationError


@dataclass(frozen=True)
class ResolvedField:
    """A column reached through zero or more relationships."""

    steps: tuple[RelationshipProperty, ...]
    target: type
    column_key: str

    @property
    def is_root(self) -> bool:
        return not self.steps

    @property
    def through_collection(self) -> bool:
        return any(step.uselist for step in self.steps)

    @property
    def column_type(self) -> Any:
        return inspect(self.target).column_attrs[self.column_key].columns[0].type

    def attribute(self, entity: Any = None) -> Any:
        """The column attribute on ``entity`` (default: the target class)."""
        return getattr(entity if entity is not None else self.target, self.column_key)


def split_path(path: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


def resolve_relation_steps(model: type, path: Sequence[str]) -> tuple[RelationshipProperty, ...] | None:
    """
    Walk ``path`` through mapper relationships.

    Returns None when any segment is not a relationship.
    """
    mapper = inspect(model)
    steps = []
    for segment in path:
        relationship = mapper.relationships.get(segment)
        if relationship is None:
            return None
        steps.append(relationship)
        mapper = relationship.mapper
    return tuple(steps)


def column_keys(model: type) -> list[str]:
    return [attr.key for attr in inspect(model).column_attrs]


def has_column(model: type, key: str) -> bool:
    return key in inspect(model).column_attrs


def resolve_field(model: type, path: str | Sequence[str]) -> ResolvedField | None:
    """
    Resolve ``relation.path.column`` to a ResolvedField, or None if unknown.
    """
    parts = split_path(path)
    if not parts:
        return None
    steps = resolve_relation_steps(model, parts[:-1])
    if steps is None:
        return None
    target = steps[-1].mapper.class_ if steps else model
    if not has_column(target, parts[-1]):
        return None
    return ResolvedField(steps=steps, target=target, column_key=parts[-1])


def require_field(model: type, path: str | Sequence[str], *, declared: bool, purpose: str) -> ResolvedField:
    """
    Resolve a field or raise.

    Args:
        declared: True for statically declared fields (ConfigurationError),
            False for request input (ValidationError).
        purpose: Used in the error message ("filter", "search", "sort").
    """
    resolved = resolve_field(model, path)
    if resolved is not None:
        return resolved
    name = path if isinstance(path, str) else ".".join(path)
    if declared:
        raise ConfigurationError(
            f"{model.__name__} has no {purpose} field '{name}'",
            entity=model.__name__,
            field=name,
        )
    raise ValidationError(
        f"Invalid {purpose} field: '{name}'",
        entity=model.__name__,
        field=name,
    )


def validate_relations(model: type, relations: Sequence[str]) -> list[tuple[RelationshipProperty, ...]]:
    """
    Check every declared relation path against the entity graph.

    Raises:
        ConfigurationError: If any path is not a chain of relationships.
    """
    resolved = []
    invalid = []
    for relation in relations:
        steps = resolve_relation_steps(model, split_path(relation))
        if not steps:
            invalid.append(relation)
        else:
            resolved.append(steps)
    if invalid:
        raise ConfigurationError(
            f"Invalid relations for {model.__name__}: {', '.join(invalid)}",
            entity=model.__name__,
            relations=invalid,
        )
    return resolved


def loader_options(
    model: type,
    relation_steps: Sequence[tuple[RelationshipProperty, ...]],
    root: Any = None,
) -> list[Any]:
    """
    Eager-load options for validated relation paths.

    ``root`` replaces ``model`` as the first hop when the rows come from an
    aliased entity.

    To-one relations load in the same statement (LEFT OUTER JOIN); to-many
    relations load with a second SELECT ... IN so the page LIMIT applies to
    root rows only.
    """
    options = []
    for steps in relation_steps:
        option = None
        entity = root if root is not None else model
        for step in steps:
            attr = getattr(entity, step.key)
            if option is None:
                option = selectinload(attr) if step.uselist else joinedload(attr)
            else:
                option = option.selectinload(attr) if step.uselist else option.joinedload(attr)
            entity = step.mapper.class_
        options.append(option)
    return options


def wrap_in_relations(steps: Sequence[RelationshipProperty], criterion: ColumnElement) -> ColumnElement:
    """
    Lift a criterion on a related entity to the root entity.

    Each to-one step becomes ``has()`` and each to-many step ``any()``
    (correlated EXISTS), so matching never multiplies root rows.
    """
    for step in reversed(steps):
        attr = step.class_attribute
        criterion = attr.any(criterion) if step.uselist else attr.has(criterion)
    return criterion
