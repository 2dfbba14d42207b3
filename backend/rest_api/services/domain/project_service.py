"""
Project Service.

Projects are the tenants themselves: only super admins list, read,
delete or restore them.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Project
from rest_api.routers.admin_schemas import ProjectOutput
from rest_api.services.base_service import ResourceService
from rest_api.services.permissions import SuperAdminOnlyScope


class ProjectService(ResourceService[Project, ProjectOutput]):
    """
    Service for project management.

    Search matches the project name and the owner's username or mobile.
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Project,
            output_schema=ProjectOutput,
            entity_name="Project",
            relations=("owner", "branches"),
            searchable_fields=("name", "owner.username", "owner.mobile"),
            field_types={"is_active": bool},
            scoping=SuperAdminOnlyScope("manage projects"),
            supports_soft_delete=True,
        )
