"""
Project management endpoints. Super admins only.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session,
    get_db, current_user, get_list_query, to_list_response,
    include_deleted_param, deleted_response,
)
from rest_api.routers.admin_schemas import DeletedOutput, ListResponse, ProjectOutput
from rest_api.services.domain import ProjectService


router = APIRouter(tags=["admin-projects"])


@router.get("/projects", response_model=ListResponse[ProjectOutput])
def list_projects(
    query: dict = Depends(get_list_query),
    include_deleted: bool = Depends(include_deleted_param),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List projects. Search matches name and the owner's username or mobile."""
    return to_list_response(
        ProjectService(db).list(query, user, include_deleted=include_deleted)
    )


@router.get("/projects/{project_id}", response_model=ProjectOutput)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> ProjectOutput:
    return ProjectService(db).get(project_id, user)


@router.delete("/projects/{project_id}", response_model=DeletedOutput)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """Soft delete a project."""
    ProjectService(db).delete(project_id, user)
    return deleted_response(project_id)


@router.post("/projects/{project_id}/restore", response_model=ProjectOutput)
def restore_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> ProjectOutput:
    return ProjectService(db).restore(project_id, user)
