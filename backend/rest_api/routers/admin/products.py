"""
Product management endpoints.

The list endpoint accepts ``brandId``, ``categoryId``, ``branchId``,
``isActive``, ``minPrice``, ``maxPrice`` and ``inStock`` on top of the
generic ``filters[...]`` syntax. ``/products/export`` takes the same query
and answers with a CSV file.
"""

from fastapi import Response

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session,
    get_db, current_user, get_list_query, to_list_response, to_csv_response,
    require_admin, include_deleted_param, deleted_response,
)
from rest_api.routers.admin_schemas import DeletedOutput, ListResponse, ProductOutput
from rest_api.services.domain import ProductService


router = APIRouter(tags=["admin-products"])


@router.get("/products", response_model=ListResponse[ProductOutput])
def list_products(
    query: dict = Depends(get_list_query),
    include_deleted: bool = Depends(include_deleted_param),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    return to_list_response(
        ProductService(db).list(query, user, include_deleted=include_deleted)
    )


@router.get("/products/export", response_class=Response)
def export_products(
    query: dict = Depends(get_list_query),
    include_deleted: bool = Depends(include_deleted_param),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> Response:
    """Download the filtered product listing as CSV."""
    rows = ProductService(db).export(query, user, include_deleted=include_deleted)
    return to_csv_response(rows, ProductOutput, "products")


@router.get("/products/{product_id}", response_model=ProductOutput)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> ProductOutput:
    return ProductService(db).get(product_id, user)


@router.delete("/products/{product_id}", response_model=DeletedOutput)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Soft delete a product. Requires ADMIN role."""
    ProductService(db).delete(product_id, user)
    return deleted_response(product_id)


@router.post("/products/{product_id}/restore", response_model=ProductOutput)
def restore_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> ProductOutput:
    """Restore a soft-deleted product. Requires ADMIN role."""
    return ProductService(db).restore(product_id, user)
