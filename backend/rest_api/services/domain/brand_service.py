"""
Brand Service.

Usage:
    from rest_api.services.domain import BrandService

    service = BrandService(db)
    page = service.list({"search": "acme", "page": "2"}, user)
    brand = service.create({"name": "Acme", "category_ids": [3]}, user)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Brand, Category
from rest_api.routers.admin_schemas import BrandOutput
from rest_api.services.base_service import OwnedResourceService
from rest_api.services.crud.predicates import AndGroup, FilterOp, Predicate
from rest_api.services.permissions import OwnerOrProjectScope, ScopeContext
from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError


class BrandService(OwnedResourceService[Brand, BrandOutput]):
    """
    Service for brand management.

    Business rules:
    - Visible through the caller's project or to the user who created it
    - Name is unique per owner
    - Linked categories must be visible to the caller
    - Hard delete
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Brand,
            output_schema=BrandOutput,
            entity_name="Brand",
            relations=("categories",),
            searchable_fields=("name",),
        )

    def _visible_categories(self, category_ids: Sequence[int], scope: ScopeContext) -> list[Category]:
        ids = tuple(dict.fromkeys(category_ids))
        if not ids:
            return []
        if len(ids) > Limits.MAX_PAGE_SIZE:
            raise ValidationError(
                f"At most {Limits.MAX_PAGE_SIZE} categories per brand", field="category_ids"
            )
        result = self.composer.find_all(
            Category,
            "category",
            limit=len(ids),
            equality_filters=AndGroup((Predicate(("id",), FilterOp.IN, ids),)),
            or_filter_groups=OwnerOrProjectScope().or_groups(scope),
        )
        found = {category.id for category in result.records}
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError(
                f"Unknown category ids: {', '.join(str(i) for i in missing)}",
                field="category_ids",
            )
        return list(result.records)

    def _prepare_create(self, data: dict[str, Any], scope: ScopeContext) -> dict[str, Any]:
        data = super()._prepare_create(data, scope)
        data["categories"] = self._visible_categories(data.pop("category_ids", None) or [], scope)
        return data

    def _apply_update(self, entity: Brand, data: dict[str, Any], scope: ScopeContext) -> None:
        category_ids = data.get("category_ids")
        if category_ids is not None:
            entity.categories = self._visible_categories(category_ids, scope)
