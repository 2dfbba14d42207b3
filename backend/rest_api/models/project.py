"""
Tenancy and identity models: Project, Role, User.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .location import Branch


class Project(AuditMixin, Base):
    """
    Top-level tenant. Most records belong to exactly one project.
    """

    __tablename__ = "project"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # No FK: user.project_id already points here
    owner_user_id: Mapped[Optional[int]] = mapped_column(IdType, nullable=True, index=True)

    owner: Mapped[Optional["User"]] = relationship(
        primaryjoin="foreign(Project.owner_user_id) == User.id",
        viewonly=True,
    )
    branches: Mapped[list["Branch"]] = relationship(back_populates="project")
    users: Mapped[list["User"]] = relationship(
        back_populates="project", foreign_keys="User.project_id"
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"


class Role(Base):
    """Named role; ``super_admin`` bypasses tenant scoping."""

    __tablename__ = "role"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    users: Mapped[list["User"]] = relationship(back_populates="role")


class User(AuditMixin, Base):
    """
    Back-office user (admin, supervisor or promoter).
    A user belongs to a project directly or through its branch.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    username: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    role_id: Mapped[Optional[int]] = mapped_column(ForeignKey("role.id"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(ForeignKey("branch.id"), index=True)

    role: Mapped[Optional["Role"]] = relationship(back_populates="users")
    project: Mapped[Optional["Project"]] = relationship(
        back_populates="users", foreign_keys=[project_id]
    )
    branch: Mapped[Optional["Branch"]] = relationship(foreign_keys=[branch_id])

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
