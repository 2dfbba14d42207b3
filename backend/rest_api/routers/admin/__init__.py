"""
Admin API router - combines all back-office sub-routers.

- brands: Brand CRUD (project or owner scoped)
- categories: Category CRUD (project or owner scoped)
- products: Product listing with convenience filters, soft delete
- surveys: Surveys and their collected feedback
- feedback: User feedback, resolve/reopen
- branches: Branch listing, soft delete
- locations: Countries, regions, cities and chains
- projects: Project management (super admin only)

All routes are prefixed with /api
"""

from fastapi import APIRouter

from .brands import router as brands_router
from .categories import router as categories_router
from .products import router as products_router
from .surveys import router as surveys_router
from .feedback import router as feedback_router
from .branches import router as branches_router
from .locations import router as locations_router
from .projects import router as projects_router


# Create the main admin router
router = APIRouter(prefix="/api")

# Catalog
router.include_router(brands_router)
router.include_router(categories_router)
router.include_router(products_router)

# Surveys and feedback
router.include_router(surveys_router)
router.include_router(feedback_router)

# Organization
router.include_router(branches_router)
router.include_router(locations_router)
router.include_router(projects_router)


__all__ = ["router"]
