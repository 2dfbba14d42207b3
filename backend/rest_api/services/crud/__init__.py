"""
CRUD engine - generic listing and single-row operations.

Provides:
- parse_bracket_query: ``filters[a][b]=v`` query keys to a nested tree
- Predicate / AndGroup / OrGroup: explicit filter structure
- ListRequest / normalize_list_request: canonical listing input
- QueryComposer / ListResult: one-statement paginated listing, find, delete
"""

from .bracket_notation import FilterNode, parse_bracket_query, collect_query_params
from .predicates import (
    FilterOp,
    Predicate,
    AndGroup,
    OrGroup,
    predicates_from_mapping,
    or_group_from_mappings,
)
from .list_request import ListRequest, normalize_list_request
from .relations import validate_relations, resolve_field
from .composer import QueryComposer, ListResult, commit_write

__all__ = [
    # Parsing
    "FilterNode",
    "parse_bracket_query",
    "collect_query_params",
    # Predicates
    "FilterOp",
    "Predicate",
    "AndGroup",
    "OrGroup",
    "predicates_from_mapping",
    "or_group_from_mappings",
    # Requests
    "ListRequest",
    "normalize_list_request",
    # Relations
    "validate_relations",
    "resolve_field",
    # Composer
    "QueryComposer",
    "ListResult",
    "commit_write",
]
