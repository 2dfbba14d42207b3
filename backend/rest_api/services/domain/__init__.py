"""
Domain Services - one per listable resource.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    QueryComposer (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import ProductService

    # In router
    service = ProductService(db)
    page = service.list(query, user)
"""

from .brand_service import BrandService
from .category_service import CategoryService
from .product_service import ProductService
from .survey_service import SurveyService, SurveyFeedbackService
from .feedback_service import FeedbackService
from .branch_service import BranchService
from .location_service import CountryService, RegionService, CityService, ChainService
from .project_service import ProjectService

__all__ = [
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
