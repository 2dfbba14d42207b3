"""
Feedback model: free-form messages from users, resolvable by admins.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .project import Project, User


class Feedback(AuditMixin, Base):
    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("app_user.id"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    resolved_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("app_user.id"))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    user: Mapped[Optional["User"]] = relationship(foreign_keys=[user_id])
    project: Mapped[Optional["Project"]] = relationship()
    resolved_by: Mapped[Optional["User"]] = relationship(foreign_keys=[resolved_by_id])
