"""
Pydantic schemas for back-office API endpoints.
Centralized to avoid circular imports between services and routers.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from shared.config.constants import Limits, SurveyStatus

T = TypeVar("T")


class ORMOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ListResponse(BaseModel, Generic[T]):
    """Paginated listing envelope shared by every list endpoint."""

    total_records: int
    current_page: int
    per_page: int
    records: list[T]


class DeletedOutput(BaseModel):
    deleted: bool = True
    id: int


# =============================================================================
# Identity Schemas
# =============================================================================


class RoleOutput(ORMOutput):
    id: int
    name: str


class UserSummary(ORMOutput):
    id: int
    name: str
    username: str | None = None
    mobile: str | None = None
    email: str | None = None


# =============================================================================
# Project Schemas
# =============================================================================


class BranchSummary(ORMOutput):
    id: int
    name: str
    project_id: int | None = None


class ProjectOutput(ORMOutput):
    id: int
    name: str
    image_url: str | None = None
    is_active: bool
    owner_user_id: int | None = None
    owner: UserSummary | None = None
    branches: list[BranchSummary] = Field(default_factory=list)
    created_at: datetime
    deleted_at: datetime | None = None


# =============================================================================
# Location Schemas
# =============================================================================


class CountrySummary(ORMOutput):
    id: int
    name: str


class RegionSummary(ORMOutput):
    id: int
    name: str
    country_id: int


class CountryOutput(CountrySummary):
    regions: list[RegionSummary] = Field(default_factory=list)
    created_at: datetime


class RegionOutput(RegionSummary):
    country: CountrySummary | None = None
    created_at: datetime


class CityOutput(ORMOutput):
    id: int
    name: str
    region_id: int
    region: RegionSummary | None = None
    created_at: datetime


class CitySummary(ORMOutput):
    id: int
    name: str


class ChainSummary(ORMOutput):
    id: int
    name: str


class ProjectSummary(ORMOutput):
    id: int
    name: str


class ChainOutput(ChainSummary):
    project_id: int | None = None
    project: ProjectSummary | None = None
    created_at: datetime


class BranchOutput(ORMOutput):
    id: int
    name: str
    address: str | None = None
    project_id: int | None = None
    city_id: int | None = None
    chain_id: int | None = None
    city: CitySummary | None = None
    chain: ChainSummary | None = None
    project: ProjectSummary | None = None
    created_at: datetime
    deleted_at: datetime | None = None


# =============================================================================
# Catalog Schemas
# =============================================================================


class CategorySummary(ORMOutput):
    id: int
    name: str


class BrandSummary(ORMOutput):
    id: int
    name: str


class BrandOutput(ORMOutput):
    id: int
    name: str
    description: str | None = None
    logo_url: str | None = None
    owner_user_id: int | None = None
    project_id: int | None = None
    categories: list[CategorySummary] = Field(default_factory=list)
    created_at: datetime


class BrandCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    logo_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    project_id: int | None = None
    category_ids: list[int] = Field(default_factory=list)


class BrandUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    logo_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    category_ids: list[int] | None = None


class CategoryOutput(ORMOutput):
    id: int
    name: str
    description: str | None = None
    owner_user_id: int | None = None
    project_id: int | None = None
    brands: list[BrandSummary] = Field(default_factory=list)
    created_at: datetime


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    project_id: int | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)


class StockOutput(ORMOutput):
    id: int
    branch_id: int
    quantity: int
    branch: BranchSummary | None = None


class ProductOutput(ORMOutput):
    id: int
    name: str
    model: str | None = None
    sku: str | None = None
    description: str | None = None
    price: Decimal
    is_active: bool
    brand_id: int | None = None
    category_id: int | None = None
    project_id: int | None = None
    brand: BrandSummary | None = None
    category: CategorySummary | None = None
    project: ProjectSummary | None = None
    stock: list[StockOutput] = Field(default_factory=list)
    created_at: datetime
    deleted_at: datetime | None = None


# =============================================================================
# Survey Schemas
# =============================================================================


class SurveyQuestionOutput(ORMOutput):
    id: int
    text: str
    kind: str
    position: int


class SurveyFeedbackOutput(ORMOutput):
    id: int
    survey_id: int
    user_id: int | None = None
    branch_id: int | None = None
    answers: dict[str, Any] | None = None
    user: UserSummary | None = None
    branch: BranchSummary | None = None
    created_at: datetime


class SurveyOutput(ORMOutput):
    id: int
    name: str
    status: str = SurveyStatus.ACTIVE
    project_id: int | None = None
    questions: list[SurveyQuestionOutput] = Field(default_factory=list)
    feedbacks: list[SurveyFeedbackOutput] = Field(default_factory=list)
    created_at: datetime
    deleted_at: datetime | None = None


# =============================================================================
# Feedback Schemas
# =============================================================================


class FeedbackOutput(ORMOutput):
    id: int
    type: str
    message: str
    is_resolved: bool
    user_id: int | None = None
    project_id: int | None = None
    resolved_by_id: int | None = None
    resolved_at: datetime | None = None
    user: UserSummary | None = None
    resolved_by: UserSummary | None = None
    created_at: datetime


class FeedbackResolve(BaseModel):
    is_resolved: bool = True


class FeedbackCreate(BaseModel):
    type: str = Field(min_length=1, max_length=50)
    message: str = Field(min_length=1, max_length=Limits.MAX_DESCRIPTION_LENGTH)
