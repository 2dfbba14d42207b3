"""
Feedback Service.

Free-form messages sent by users of a project. Admins mark them resolved
(recording who and when) or reopen them.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Feedback
from rest_api.routers.admin_schemas import FeedbackOutput
from rest_api.services.base_service import ResourceService
from rest_api.services.crud import commit_write
from rest_api.services.permissions import ProjectScope, ScopeContext


class FeedbackService(ResourceService[Feedback, FeedbackOutput]):
    """
    Service for user feedback.

    Listing accepts ``userId``, ``type`` and ``is_resolved`` as shortcuts
    for the matching ``filters[...]`` entries.
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Feedback,
            output_schema=FeedbackOutput,
            entity_name="Feedback",
            relations=("user", "project", "resolved_by"),
            searchable_fields=("message", "type"),
            field_types={"is_resolved": bool},
            scoping=ProjectScope(),
            query_aliases={
                "userId": ("user_id",),
                "type": ("type",),
                "is_resolved": ("is_resolved",),
            },
        )

    def _prepare_create(self, data: dict[str, Any], scope: ScopeContext) -> dict[str, Any]:
        data = super()._prepare_create(data, scope)
        data.setdefault("user_id", scope.caller_id)
        data["is_resolved"] = False
        data["resolved_by_id"] = None
        data["resolved_at"] = None
        return data

    def set_resolved(self, entity_id: int, is_resolved: bool, user: Mapping[str, Any]) -> FeedbackOutput:
        """
        Mark feedback resolved by the caller, or reopen it.

        Raises:
            NotFoundError: Absent or out of scope.
        """
        scope = self.resolve_scope(user)
        feedback = self.get_entity(entity_id, scope, relations=())

        feedback.is_resolved = is_resolved
        if is_resolved:
            feedback.resolved_by_id = scope.caller_id
            feedback.resolved_at = datetime.now(timezone.utc)
        else:
            feedback.resolved_by_id = None
            feedback.resolved_at = None

        commit_write(self._db, "resolve feedback", self.alias, entity_id)
        self._db.refresh(feedback)
        return self.to_output(self.get_entity(entity_id, scope), scope)
