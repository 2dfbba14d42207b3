"""
Product Service.

Besides the generic ``filters[...]`` syntax the product listing accepts a
few convenience query params, mapped onto the filter tree before
normalization:

    brandId=3         -> filters[brand_id]=3
    categoryId=4      -> filters[category_id]=4
    branchId=7        -> filters[stock][branch_id]=7
    isActive=true     -> filters[is_active]=true
    minPrice=10       -> filters[price][gte]=10
    maxPrice=50       -> filters[price][lte]=50
    inStock=true      -> filters[stock][quantity][gt]=0
    inStock=false     -> filters[stock][quantity][lte]=0

``branchId`` and ``inStock`` address the same stock row, so together they
mean "in stock at this branch".
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Product
from rest_api.routers.admin_schemas import ProductOutput
from rest_api.services.base_service import ResourceService, query_scalar, set_filter_default
from rest_api.services.crud.list_request import coerce_bool
from rest_api.services.permissions import ProjectScope

PRODUCT_QUERY_ALIASES: dict[str, tuple[str, ...]] = {
    "brandId": ("brand_id",),
    "categoryId": ("category_id",),
    "branchId": ("stock", "branch_id"),
    "isActive": ("is_active",),
    "minPrice": ("price", "gte"),
    "maxPrice": ("price", "lte"),
}


class ProductService(ResourceService[Product, ProductOutput]):
    """
    Service for product management.

    Business rules:
    - Products belong to exactly one project
    - Soft delete keeps sales history intact
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Product,
            output_schema=ProductOutput,
            entity_name="Product",
            relations=("brand", "category", "project", "stock", "stock.branch"),
            searchable_fields=("name", "model", "sku"),
            field_types={"is_active": bool},
            scoping=ProjectScope(),
            supports_soft_delete=True,
            query_aliases=PRODUCT_QUERY_ALIASES,
        )

    def _translate_query(self, tree: dict[str, Any]) -> dict[str, Any]:
        tree = dict(tree)
        in_stock = query_scalar(tree.pop("inStock", None))
        tree = super()._translate_query(tree)
        if in_stock in (None, ""):
            return tree

        filters = tree.get("filters") or {}
        if isinstance(filters, dict):
            filters = dict(filters)
            op = "gt" if coerce_bool(in_stock, "inStock") else "lte"
            set_filter_default(filters, ("stock", "quantity", op), "0")
            tree["filters"] = filters
        return tree
