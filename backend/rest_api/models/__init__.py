"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- project: Project, Role, User
- location: Country, Region, City, Chain, Branch
- catalog: Brand, Category, Product, Stock
- survey: Survey, SurveyQuestion, SurveyFeedback
- feedback: Feedback
"""

from .base import Base, AuditMixin

from .project import Project, Role, User

from .location import Country, Region, City, Chain, Branch

from .catalog import Brand, Category, Product, Stock, brand_categories

from .survey import Survey, SurveyQuestion, SurveyFeedback

from .feedback import Feedback

__all__ = [
    "Base",
    "AuditMixin",
    "Project",
    "Role",
    "User",
    "Country",
    "Region",
    "City",
    "Chain",
    "Branch",
    "Brand",
    "Category",
    "Product",
    "Stock",
    "brand_categories",
    "Survey",
    "SurveyQuestion",
    "SurveyFeedback",
    "Feedback",
]
