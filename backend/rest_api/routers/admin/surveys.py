"""
Survey endpoints, including the feedback collected by each survey.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, include_deleted_param, deleted_response,
)
from rest_api.routers.admin_schemas import (
    DeletedOutput, ListResponse, SurveyFeedbackOutput, SurveyOutput,
)
from rest_api.services.domain import SurveyFeedbackService, SurveyService


router = APIRouter(tags=["admin-surveys"])


@router.get("/surveys", response_model=ListResponse[SurveyOutput])
def list_surveys(
    query: dict = Depends(get_list_query),
    include_deleted: bool = Depends(include_deleted_param),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    return to_list_response(
        SurveyService(db).list(query, user, include_deleted=include_deleted)
    )


@router.get("/surveys/{survey_id}", response_model=SurveyOutput)
def get_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> SurveyOutput:
    return SurveyService(db).get(survey_id, user)


@router.get("/surveys/{survey_id}/feedback", response_model=ListResponse[SurveyFeedbackOutput])
def list_survey_feedback(
    survey_id: int,
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List the answers collected by one survey."""
    return to_list_response(
        SurveyFeedbackService(db).list_for_survey(survey_id, query, user)
    )


@router.delete("/surveys/feedback/{feedback_id}", response_model=DeletedOutput)
def delete_survey_feedback(
    feedback_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Delete one survey answer permanently. Requires ADMIN role."""
    SurveyFeedbackService(db).delete(feedback_id, user)
    return deleted_response(feedback_id)


@router.delete("/surveys/{survey_id}", response_model=DeletedOutput)
def delete_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    """Soft delete a survey. Requires ADMIN role."""
    SurveyService(db).delete(survey_id, user)
    return deleted_response(survey_id)


@router.post("/surveys/{survey_id}/restore", response_model=SurveyOutput)
def restore_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> SurveyOutput:
    return SurveyService(db).restore(survey_id, user)
