"""
Bracket-notation query parsing.

Turns flat query-string keys such as ``filters[role][name]`` into a nested
mapping so structured filters survive URL encoding:

    parse_bracket_query({"filters[role][name]": "admin", "page": "2"})
    # {"filters": {"role": {"name": "admin"}}, "page": "2"}

Only the bracket form is understood. ``filters.role.name`` stays a plain
top-level key because field names may legitimately contain dots.

Repeated keys (``filters[status][]=a&filters[status][]=b``) collect into a
list. Keys deeper than the configured depth, or lists longer than the
configured array length, are rejected rather than truncated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

from shared.config.constants import Limits
from shared.utils.exceptions import MalformedQueryError

# Leaves are strings (or lists of strings); internal nodes are mappings
FilterNode = dict[str, Union["FilterNode", str, list[str]]]


def split_bracket_key(key: str) -> list[str]:
    """
    Split ``a[b][c]`` into ``["a", "b", "c"]``.

    Empty segments (``a[]``) are dropped. A key without brackets yields a
    single segment.

    Raises:
        MalformedQueryError: On unbalanced or stray brackets.
    """
    if "[" not in key:
        if "]" in key:
            raise MalformedQueryError("unbalanced brackets", key=key)
        return [key]

    head, _, rest = key.partition("[")
    if not head:
        raise MalformedQueryError("missing field name before '['", key=key)
    if "]" in head:
        raise MalformedQueryError("unbalanced brackets", key=key)

    segments = [head]
    for raw in rest.split("["):
        if not raw.endswith("]") or "]" in raw[:-1]:
            raise MalformedQueryError("unbalanced brackets", key=key)
        segment = raw[:-1]
        if segment:
            segments.append(segment)
    return segments


def _as_values(key: str, value: Any, max_array_length: int) -> str | list[str]:
    if isinstance(value, (list, tuple)):
        if len(value) > max_array_length:
            raise MalformedQueryError(
                f"array exceeds {max_array_length} elements", key=key
            )
        if len(value) == 1:
            return value[0]
        return list(value)
    return value


def _merge_leaf(existing: Any, incoming: Any) -> list[str]:
    left = existing if isinstance(existing, list) else [existing]
    right = incoming if isinstance(incoming, list) else [incoming]
    return left + right


def parse_bracket_query(
    params: Mapping[str, Any],
    *,
    max_depth: int = Limits.MAX_FILTER_DEPTH,
    max_array_length: int = Limits.MAX_FILTER_ARRAY_LENGTH,
) -> FilterNode:
    """
    Parse a flat query mapping into a nested FilterNode tree.

    Args:
        params: Raw query keys mapped to a string or a sequence of strings.
        max_depth: Maximum number of path segments per key.
        max_array_length: Maximum number of values collected under one path.

    Returns:
        A freshly built tree. The input is never mutated.

    Raises:
        MalformedQueryError: On depth or array-length violations, unbalanced
            brackets, or a key used both as a value and as a parent.
    """
    tree: FilterNode = {}

    for key, raw_value in params.items():
        segments = split_bracket_key(key)
        if len(segments) > max_depth:
            raise MalformedQueryError(
                f"nesting exceeds {max_depth} levels", key=key
            )

        value = _as_values(key, raw_value, max_array_length)

        node: dict[str, Any] = tree
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise MalformedQueryError(
                    f"'{segment}' is both a value and a group", key=key
                )
            node = child

        leaf = segments[-1]
        if leaf not in node:
            node[leaf] = value
            continue

        if isinstance(node[leaf], dict):
            raise MalformedQueryError(f"'{leaf}' is both a value and a group", key=key)
        merged = _merge_leaf(node[leaf], value)
        if len(merged) > max_array_length:
            raise MalformedQueryError(
                f"array exceeds {max_array_length} elements", key=key
            )
        node[leaf] = merged

    return tree


def collect_query_params(items: Sequence[tuple[str, str]]) -> dict[str, str | list[str]]:
    """
    Fold ``(key, value)`` pairs into a mapping, keeping repeats as lists.

    Usage:
        collect_query_params(request.query_params.multi_items())
    """
    collected: dict[str, str | list[str]] = {}
    for key, value in items:
        if key not in collected:
            collected[key] = value
        elif isinstance(collected[key], list):
            collected[key].append(value)
        else:
            collected[key] = [collected[key], value]
    return collected
