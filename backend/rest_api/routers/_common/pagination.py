"""
Standardized list query handling for all routers.

Every list endpoint takes the raw query string (bracket notation included)
and answers with the same envelope.

Usage:
    from rest_api.routers._common.pagination import get_list_query, to_list_response

    @router.get("/products", response_model=ListResponse[ProductOutput])
    def list_products(
        query: dict = Depends(get_list_query),
        db: Session = Depends(get_db),
        user: dict = Depends(current_user),
    ):
        return to_list_response(ProductService(db).list(query, user))
"""

from typing import Any

from fastapi import Query, Request

from rest_api.services.crud import ListResult, collect_query_params
from shared.config.constants import Limits, SortOrder


def get_list_query(
    request: Request,
    # Documented here for OpenAPI; the values are read from the raw query
    search: str | None = Query(default=None, description="Case-insensitive search term"),
    page: str | None = Query(default=None, description=f"1-indexed page (default {Limits.DEFAULT_PAGE})"),
    limit: str | None = Query(
        default=None,
        description=f"Page size, clamped to 1..{Limits.MAX_PAGE_SIZE} (default {Limits.DEFAULT_PAGE_SIZE})",
    ),
    sortBy: str | None = Query(default=None, description="Column or alias-qualified relation column"),
    sortOrder: str | None = Query(default=None, description=f"{SortOrder.ASC} or {SortOrder.DESC}"),
) -> dict[str, Any]:
    """
    FastAPI dependency collecting the raw query string.

    Repeated keys are kept as lists; ``filters[...]`` keys are parsed later
    by the resource service.
    """
    return collect_query_params(request.query_params.multi_items())


def to_list_response(result: ListResult) -> dict[str, Any]:
    """Convert a ListResult to the list endpoint envelope."""
    return result.to_dict()
