"""
Branch Service.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Branch
from rest_api.routers.admin_schemas import BranchOutput
from rest_api.services.base_service import ResourceService
from rest_api.services.permissions import ProjectScope


class BranchService(ResourceService[Branch, BranchOutput]):
    """Service for branch management. Soft delete keeps stock history."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Branch,
            output_schema=BranchOutput,
            entity_name="Branch",
            relations=("city", "chain", "project"),
            searchable_fields=("name",),
            scoping=ProjectScope(),
            supports_soft_delete=True,
            query_aliases={
                "cityId": ("city_id",),
                "chainId": ("chain_id",),
            },
        )
