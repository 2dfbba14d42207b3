"""
Location models: Country, Region, City, Chain, Branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .project import Project
    from .catalog import Stock


class Country(AuditMixin, Base):
    __tablename__ = "country"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    regions: Mapped[list["Region"]] = relationship(back_populates="country")


class Region(AuditMixin, Base):
    __tablename__ = "region"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    country_id: Mapped[int] = mapped_column(ForeignKey("country.id"), nullable=False, index=True)

    country: Mapped["Country"] = relationship(back_populates="regions")
    cities: Mapped[list["City"]] = relationship(back_populates="region")


class City(AuditMixin, Base):
    __tablename__ = "city"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("region.id"), nullable=False, index=True)

    region: Mapped["Region"] = relationship(back_populates="cities")
    branches: Mapped[list["Branch"]] = relationship(back_populates="city")


class Chain(AuditMixin, Base):
    """Retail chain operating branches inside a project."""

    __tablename__ = "chain"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)

    project: Mapped[Optional["Project"]] = relationship()
    branches: Mapped[list["Branch"]] = relationship(back_populates="chain")


class Branch(AuditMixin, Base):
    """
    Physical store where promoters work and stock is held.
    """

    __tablename__ = "branch"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)
    city_id: Mapped[Optional[int]] = mapped_column(ForeignKey("city.id"), index=True)
    chain_id: Mapped[Optional[int]] = mapped_column(ForeignKey("chain.id"), index=True)

    project: Mapped[Optional["Project"]] = relationship(back_populates="branches")
    city: Mapped[Optional["City"]] = relationship(back_populates="branches")
    chain: Mapped[Optional["Chain"]] = relationship(back_populates="branches")
    stock: Mapped[list["Stock"]] = relationship(back_populates="branch")

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}', project_id={self.project_id})>"
