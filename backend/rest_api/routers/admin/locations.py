"""
Location endpoints: countries, regions, cities and chains.

Countries, regions and cities are shared by every project; only super
admins delete them. Chains belong to the caller's project.
"""

from rest_api.routers.admin._base import (
    APIRouter, Depends, Session,
    get_db, current_user, get_list_query, to_list_response,
    require_admin, require_super_admin, deleted_response,
)
from rest_api.routers.admin_schemas import (
    ChainOutput, CityOutput, CountryOutput, DeletedOutput, ListResponse, RegionOutput,
)
from rest_api.services.domain import ChainService, CityService, CountryService, RegionService


router = APIRouter(prefix="/locations", tags=["admin-locations"])


# =============================================================================
# Countries
# =============================================================================


@router.get("/countries", response_model=ListResponse[CountryOutput])
def list_countries(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    return to_list_response(CountryService(db).list(query, user))


@router.get("/countries/{country_id}", response_model=CountryOutput)
def get_country(
    country_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> CountryOutput:
    return CountryService(db).get(country_id, user)


@router.delete("/countries/{country_id}", response_model=DeletedOutput)
def delete_country(
    country_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_super_admin),
) -> dict:
    CountryService(db).delete(country_id, user)
    return deleted_response(country_id)


# =============================================================================
# Regions
# =============================================================================


@router.get("/regions", response_model=ListResponse[RegionOutput])
def list_regions(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List regions. Accepts countryId."""
    return to_list_response(RegionService(db).list(query, user))


@router.get("/regions/{region_id}", response_model=RegionOutput)
def get_region(
    region_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> RegionOutput:
    return RegionService(db).get(region_id, user)


@router.delete("/regions/{region_id}", response_model=DeletedOutput)
def delete_region(
    region_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_super_admin),
) -> dict:
    RegionService(db).delete(region_id, user)
    return deleted_response(region_id)


# =============================================================================
# Cities
# =============================================================================


@router.get("/cities", response_model=ListResponse[CityOutput])
def list_cities(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    """List cities. Accepts regionId and countryId."""
    return to_list_response(CityService(db).list(query, user))


@router.get("/cities/{city_id}", response_model=CityOutput)
def get_city(
    city_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> CityOutput:
    return CityService(db).get(city_id, user)


@router.delete("/cities/{city_id}", response_model=DeletedOutput)
def delete_city(
    city_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_super_admin),
) -> dict:
    CityService(db).delete(city_id, user)
    return deleted_response(city_id)


# =============================================================================
# Chains
# =============================================================================


@router.get("/chains", response_model=ListResponse[ChainOutput])
def list_chains(
    query: dict = Depends(get_list_query),
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> dict:
    return to_list_response(ChainService(db).list(query, user))


@router.get("/chains/{chain_id}", response_model=ChainOutput)
def get_chain(
    chain_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(current_user),
) -> ChainOutput:
    return ChainService(db).get(chain_id, user)


@router.delete("/chains/{chain_id}", response_model=DeletedOutput)
def delete_chain(
    chain_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> dict:
    ChainService(db).delete(chain_id, user)
    return deleted_response(chain_id)
