"""
Category management endpoints.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session, status,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, deleted_response,
)
from rest_api.routers.admin_schemas import (
    CategoryCreate, CategoryOutput, CategoryUpdate, DeletedOutput, ListResponse,
)
from rest_api.services.domain import CategoryService


router = APIRouter(tags=["admin-categories"])


@router.get("/categories", response_model=ListResponse[CategoryOutput])
def list_categories(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List categories visible through the caller's project or ownership."""
    return to_list_response(CategoryService(db).list(query, user))


@router.get("/categories/{category_id}", response_model=CategoryOutput)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> CategoryOutput:
    """Get a specific category."""
    return CategoryService(db).get(category_id, user)


@router.post("/categories", response_model=CategoryOutput, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> CategoryOutput:
    """Create a new category owned by the caller."""
    return CategoryService(db).create(body.model_dump(), user)


@router.patch("/categories/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> CategoryOutput:
    """Update a category."""
    return CategoryService(db).update(category_id, body.model_dump(exclude_unset=True), user)


@router.delete("/categories/{category_id}", response_model=DeletedOutput)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Delete a category with no live products. Requires ADMIN role."""
    CategoryService(db).delete(category_id, user)
    return deleted_response(category_id)
