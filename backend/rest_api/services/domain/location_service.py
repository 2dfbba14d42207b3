"""
Location Services - countries, regions, cities and chains.

Countries, regions and cities are shared reference data visible to every
authenticated caller. Chains belong to a project.

Usage:
    from rest_api.services.domain import RegionService

    service = RegionService(db)
    page = service.list({"countryId": "4", "sortBy": "name", "sortOrder": "ASC"}, user)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Chain, City, Country, Region
from rest_api.routers.admin_schemas import ChainOutput, CityOutput, CountryOutput, RegionOutput
from rest_api.services.base_service import ResourceService
from rest_api.services.permissions import GlobalScope, ProjectScope


class CountryService(ResourceService[Country, CountryOutput]):
    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Country,
            output_schema=CountryOutput,
            entity_name="Country",
            relations=("regions",),
            searchable_fields=("name",),
            scoping=GlobalScope(),
        )


class RegionService(ResourceService[Region, RegionOutput]):
    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Region,
            output_schema=RegionOutput,
            entity_name="Region",
            relations=("country",),
            searchable_fields=("name",),
            scoping=GlobalScope(),
            query_aliases={"countryId": ("country_id",)},
        )


class CityService(ResourceService[City, CityOutput]):
    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=City,
            output_schema=CityOutput,
            entity_name="City",
            relations=("region",),
            searchable_fields=("name",),
            scoping=GlobalScope(),
            query_aliases={
                "regionId": ("region_id",),
                "countryId": ("region", "country_id"),
            },
        )


class ChainService(ResourceService[Chain, ChainOutput]):
    """Retail chains; each belongs to one project."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Chain,
            output_schema=ChainOutput,
            entity_name="Chain",
            relations=("project",),
            searchable_fields=("name",),
            scoping=ProjectScope(),
        )
