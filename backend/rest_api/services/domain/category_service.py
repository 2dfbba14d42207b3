"""
Category Service.

Categories follow the same ownership rules as brands: a user may create
one before joining a project and keeps seeing it afterwards.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.routers.admin_schemas import CategoryOutput
from rest_api.services.base_service import OwnedResourceService
from rest_api.services.permissions import ScopeContext
from shared.utils.exceptions import ConflictError


class CategoryService(OwnedResourceService[Category, CategoryOutput]):
    """
    Service for category management.

    Business rules:
    - Name is unique per owner
    - A category still used by live products cannot be deleted
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Category",
            relations=("brands",),
            searchable_fields=("name",),
        )

    def _validate_delete(self, entity: Category, scope: ScopeContext) -> None:
        """Validate category can be deleted."""
        live_products = self._db.scalar(
            select(func.count())
            .select_from(Product)
            .where(
                Product.category_id == entity.id,
                Product.deleted_at.is_(None),
            )
        )
        if live_products:
            raise ConflictError(
                f"Category has {live_products} products. Reassign or delete them first.",
                entity="category",
                entity_id=entity.id,
            )
