"""
Survey and survey feedback services.

Survey feedback rows carry no project of their own; they are scoped
through the project of their survey (``survey.project_id``).

Usage:
    surveys = SurveyService(db)
    page = surveys.list({"filters[status]": "active"}, user)

    answers = SurveyFeedbackService(db)
    page = answers.list_for_survey(survey_id, {"page": "1"}, user)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Survey, SurveyFeedback
from rest_api.routers.admin_schemas import SurveyFeedbackOutput, SurveyOutput
from rest_api.services.base_service import ResourceService
from rest_api.services.crud import ListResult
from rest_api.services.crud.predicates import FilterOp, Predicate
from rest_api.services.permissions import ProjectScope


class SurveyService(ResourceService[Survey, SurveyOutput]):
    """
    Service for surveys.

    Listings eager-load questions and every feedback with its user and
    branch; soft delete keeps collected answers reachable.
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Survey,
            output_schema=SurveyOutput,
            entity_name="Survey",
            relations=("questions", "feedbacks", "feedbacks.user", "feedbacks.branch"),
            searchable_fields=("name",),
            scoping=ProjectScope(),
            supports_soft_delete=True,
        )


class SurveyFeedbackService(ResourceService[SurveyFeedback, SurveyFeedbackOutput]):
    """Service for answers collected by a survey."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=SurveyFeedback,
            output_schema=SurveyFeedbackOutput,
            entity_name="Survey feedback",
            relations=("user", "survey", "branch"),
            scoping=ProjectScope("survey.project_id"),
        )
        self._surveys = SurveyService(db)

    def list_for_survey(
        self,
        survey_id: int,
        raw_query: Mapping[str, Any],
        user: Mapping[str, Any],
    ) -> ListResult[SurveyFeedbackOutput]:
        """
        List the feedback of one survey.

        Raises:
            NotFoundError: The survey is absent, deleted or out of scope.
        """
        scope = self.resolve_scope(user)
        self._surveys.get_entity(survey_id, scope, relations=())
        request = self.build_request(raw_query, scope).narrowed(
            [Predicate(("survey_id",), FilterOp.EQ, survey_id)]
        )
        return self.list_page(request, scope)
