"""
Catalog models: Brand, Category, Product, Stock.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean, Column, ForeignKey, Integer, Numeric, String, Table, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .project import Project, User
    from .location import Branch


brand_categories = Table(
    "brand_categories",
    Base.metadata,
    Column("brand_id", ForeignKey("brand.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", ForeignKey("category.id", ondelete="CASCADE"), primary_key=True),
)


class Brand(AuditMixin, Base):
    """
    Product brand. Created by a user, optionally attached to a project.
    """

    __tablename__ = "brand"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    owner_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("app_user.id"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)

    owner: Mapped[Optional["User"]] = relationship()
    project: Mapped[Optional["Project"]] = relationship()
    categories: Mapped[list["Category"]] = relationship(
        secondary=brand_categories, back_populates="brands"
    )
    products: Mapped[list["Product"]] = relationship(back_populates="brand")

    __table_args__ = (
        UniqueConstraint("owner_user_id", "name", name="uq_brand_owner_name"),
    )


class Category(AuditMixin, Base):
    """
    Product category. Same ownership rules as Brand.
    """

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    owner_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("app_user.id"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)

    owner: Mapped[Optional["User"]] = relationship()
    project: Mapped[Optional["Project"]] = relationship()
    brands: Mapped[list["Brand"]] = relationship(
        secondary=brand_categories, back_populates="categories"
    )
    products: Mapped[list["Product"]] = relationship(back_populates="category")

    __table_args__ = (
        UniqueConstraint("owner_user_id", "name", name="uq_category_owner_name"),
    )


class Product(AuditMixin, Base):
    """
    Sellable product of a brand within a project.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[Optional[str]] = mapped_column(String(100))
    sku: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    brand_id: Mapped[Optional[int]] = mapped_column(ForeignKey("brand.id"), index=True)
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("category.id"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("project.id"), index=True)

    brand: Mapped[Optional["Brand"]] = relationship(back_populates="products")
    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    project: Mapped[Optional["Project"]] = relationship()
    stock: Mapped[list["Stock"]] = relationship(back_populates="product")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', sku='{self.sku}')>"


class Stock(AuditMixin, Base):
    """Quantity of a product held at a branch."""

    __tablename__ = "stock"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("product.id"), nullable=False, index=True)
    branch_id: Mapped[int] = mapped_column(ForeignKey("branch.id"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    product: Mapped["Product"] = relationship(back_populates="stock")
    branch: Mapped["Branch"] = relationship(back_populates="stock")

    __table_args__ = (
        UniqueConstraint("product_id", "branch_id", name="uq_stock_product_branch"),
    )
