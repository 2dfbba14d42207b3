"""
Brand management endpoints.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session, status,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, deleted_response,
)
from rest_api.routers.admin_schemas import (
    BrandCreate, BrandOutput, BrandUpdate, DeletedOutput, ListResponse,
)
from rest_api.services.domain import BrandService


router = APIRouter(tags=["admin-brands"])


@router.get("/brands", response_model=ListResponse[BrandOutput])
def list_brands(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List brands visible through the caller's project or ownership."""
    return to_list_response(BrandService(db).list(query, user))


@router.get("/brands/{brand_id}", response_model=BrandOutput)
def get_brand(
    brand_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> BrandOutput:
    return BrandService(db).get(brand_id, user)


@router.post("/brands", response_model=BrandOutput, status_code=status.HTTP_201_CREATED)
def create_brand(
    body: BrandCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> BrandOutput:
    """Create a brand owned by the caller (unowned for super admins)."""
    return BrandService(db).create(body.model_dump(), user)


@router.patch("/brands/{brand_id}", response_model=BrandOutput)
def update_brand(
    brand_id: int,
    body: BrandUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> BrandOutput:
    return BrandService(db).update(brand_id, body.model_dump(exclude_unset=True), user)


@router.delete("/brands/{brand_id}", response_model=DeletedOutput)
def delete_brand(
    brand_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Delete a brand permanently. Requires ADMIN role."""
    BrandService(db).delete(brand_id, user)
    return deleted_response(brand_id)
