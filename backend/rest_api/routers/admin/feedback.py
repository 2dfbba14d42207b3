"""
User feedback endpoints.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session, status,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, deleted_response,
)
from rest_api.routers.admin_schemas import (
    DeletedOutput, FeedbackCreate, FeedbackOutput, FeedbackResolve, ListResponse,
)
from rest_api.services.domain import FeedbackService


router = APIRouter(tags=["admin-feedback"])


@router.get("/feedback", response_model=ListResponse[FeedbackOutput])
def list_feedback(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List feedback of the caller's project. Accepts userId, type and is_resolved."""
    return to_list_response(FeedbackService(db).list(query, user))


@router.get("/feedback/{feedback_id}", response_model=FeedbackOutput)
def get_feedback(
    feedback_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> FeedbackOutput:
    return FeedbackService(db).get(feedback_id, user)


@router.post("/feedback", response_model=FeedbackOutput, status_code=status.HTTP_201_CREATED)
def create_feedback(
    body: FeedbackCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> FeedbackOutput:
    """Send feedback as the caller, inside the caller's project."""
    return FeedbackService(db).create(body.model_dump(), user)


@router.patch("/feedback/{feedback_id}/resolve", response_model=FeedbackOutput)
def resolve_feedback(
    feedback_id: int,
    body: FeedbackResolve,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> FeedbackOutput:
    """Mark feedback resolved by the caller, or reopen it. Requires ADMIN role."""
    return FeedbackService(db).set_resolved(feedback_id, body.is_resolved, user)


@router.delete("/feedback/{feedback_id}", response_model=DeletedOutput)
def delete_feedback(
    feedback_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    FeedbackService(db).delete(feedback_id, user)
    return deleted_response(feedback_id)
