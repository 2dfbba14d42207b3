"""
Survey models: Survey, SurveyQuestion, SurveyFeedback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import SurveyStatus

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .project import Project, User
    from .location import Branch


class Survey(AuditMixin, Base):
    __tablename__ = "survey"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=SurveyStatus.ACTIVE, nullable=False)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)

    project: Mapped[Optional["Project"]] = relationship()
    questions: Mapped[list["SurveyQuestion"]] = relationship(
        back_populates="survey", order_by="SurveyQuestion.position"
    )
    feedbacks: Mapped[list["SurveyFeedback"]] = relationship(back_populates="survey")


class SurveyQuestion(AuditMixin, Base):
    __tablename__ = "survey_question"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    survey_id: Mapped[int] = mapped_column(ForeignKey("survey.id"), nullable=False, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), default="text", nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    survey: Mapped["Survey"] = relationship(back_populates="questions")


class SurveyFeedback(AuditMixin, Base):
    """A user's answers to a survey, captured at a branch."""

    __tablename__ = "survey_feedback"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    survey_id: Mapped[int] = mapped_column(ForeignKey("survey.id"), nullable=False, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("app_user.id"), index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(ForeignKey("branch.id"), index=True)
    answers: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)

    survey: Mapped["Survey"] = relationship(back_populates="feedbacks")
    user: Mapped[Optional["User"]] = relationship()
    branch: Mapped[Optional["Branch"]] = relationship()
