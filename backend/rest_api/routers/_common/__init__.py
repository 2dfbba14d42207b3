"""
Common utilities shared across routers.
"""

from .export import to_csv_response
from .pagination import get_list_query, to_list_response

__all__ = [
    "get_list_query",
    "to_csv_response",
    "to_list_response",
]
