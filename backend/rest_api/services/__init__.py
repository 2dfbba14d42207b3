"""
Services module for business logic.

- crud/: bracket-notation parsing, list-request normalization and the
  relation-aware QueryComposer
- permissions/: caller identity, scope resolution and scoping strategies
- domain/: one ResourceService per resource - USE THESE

Usage:
    from rest_api.services.domain import BrandService
    service = BrandService(db)
    page = service.list(query, user)
"""

from .crud import (
    ListRequest,
    ListResult,
    QueryComposer,
    normalize_list_request,
    parse_bracket_query,
)

from .permissions import (
    CallerIdentity,
    ScopeContext,
    ScopeResolver,
    ScopingStrategy,
    GlobalScope,
    ProjectScope,
    OwnerOrProjectScope,
    SuperAdminOnlyScope,
)

from .base_service import ResourceService, OwnedResourceService

from .domain import (
    BrandService,
    CategoryService,
    ProductService,
    SurveyService,
    SurveyFeedbackService,
    FeedbackService,
    BranchService,
    CountryService,
    RegionService,
    CityService,
    ChainService,
    ProjectService,
)

__all__ = [
    # CRUD engine
    "ListRequest",
    "ListResult",
    "QueryComposer",
    "normalize_list_request",
    "parse_bracket_query",
    # Scoping
    "CallerIdentity",
    "ScopeContext",
    "ScopeResolver",
    "ScopingStrategy",
    "GlobalScope",
    "ProjectScope",
    "OwnerOrProjectScope",
    "SuperAdminOnlyScope",
    # Base services
    "ResourceService",
    "OwnedResourceService",
    # Domain services
    "BrandService",
    "CategoryService",
    "ProductService",
    "SurveyService",
    "SurveyFeedbackService",
    "FeedbackService",
    "BranchService",
    "CountryService",
    "RegionService",
    "CityService",
    "ChainService",
    "ProjectService",
]
