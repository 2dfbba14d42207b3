"""
Branch management endpoints.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, include_deleted_param, deleted_response,
)
from rest_api.routers.admin_schemas import BranchOutput, DeletedOutput, ListResponse
from rest_api.services.domain import BranchService


router = APIRouter(tags=["admin-branches"])


@router.get("/branches", response_model=ListResponse[BranchOutput])
def list_branches(
    query: dict = Depends(get_list_query),
    include_deleted: bool = Depends(include_deleted_param),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List branches of the caller's project. Accepts cityId and chainId."""
    return to_list_response(
        BranchService(db).list(query, user, include_deleted=include_deleted)
    )


@router.get("/branches/{branch_id}", response_model=BranchOutput)
def get_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> BranchOutput:
    return BranchService(db).get(branch_id, user)


@router.delete("/branches/{branch_id}", response_model=DeletedOutput)
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Soft delete a branch. Requires ADMIN role."""
    BranchService(db).delete(branch_id, user)
    return deleted_response(branch_id)


@router.post("/branches/{branch_id}/restore", response_model=BranchOutput)
def restore_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> BranchOutput:
    return BranchService(db).restore(branch_id, user)
