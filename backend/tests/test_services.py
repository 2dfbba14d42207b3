"""
Tests for resource services: scoping policy, convenience params and
domain rules of each resource.
"""

import pytest

from rest_api.services.domain import (
    BranchService,
    BrandService,
    CategoryService,
    ChainService,
    CityService,
    CountryService,
    FeedbackService,
    ProductService,
    ProjectService,
    RegionService,
    SurveyFeedbackService,
    SurveyService,
)
from shared.utils.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def names(result):
    return sorted(record.name for record in result.records)


# =============================================================================
# Brands and categories (project OR owner)
# =============================================================================


class TestBrandService:
    """Brand listing, ownership and uniqueness."""

    def test_member_sees_own_project(self, db_session, seed_catalog, admin_a_claims):
        result = BrandService(db_session).list({}, admin_a_claims)
        assert names(result) == ["Acme"]

    def test_owner_sees_unattached_rows(self, db_session, seed_catalog, promoter_b_claims):
        """Solo has no project but stays visible to its creator."""
        result = BrandService(db_session).list({}, promoter_b_claims)
        assert names(result) == ["Solo", "Zeta"]

    def test_super_admin_sees_everything(self, db_session, seed_catalog, super_claims):
        result = BrandService(db_session).list({}, super_claims)
        assert result.total == 3
        assert all(record.owner_user_id is not None for record in result.records)

    def test_owner_id_masked_for_non_owner(self, db_session, seed_catalog, branch_user_claims):
        result = BrandService(db_session).list({}, branch_user_claims)
        assert names(result) == ["Acme"]
        assert result.records[0].owner_user_id is None

    def test_owner_id_visible_to_owner(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        brand = BrandService(db_session).get(seed_catalog.acme.id, admin_a_claims)
        assert brand.owner_user_id == seed_tenants.admin_a.id
        assert [c.name for c in brand.categories] == ["Beverages"]

    def test_get_outside_scope(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(NotFoundError):
            BrandService(db_session).get(seed_catalog.zeta.id, admin_a_claims)

    def test_caller_filter_cannot_widen_scope(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        result = BrandService(db_session).list(
            {"filters[project_id]": str(seed_tenants.project_b.id)}, admin_a_claims
        )
        assert result.total == 0

    def test_create_owned_and_unattached(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        service = BrandService(db_session)
        brand = service.create(
            {"name": "Nova", "category_ids": [seed_catalog.beverages.id]}, admin_a_claims
        )
        assert brand.owner_user_id == seed_tenants.admin_a.id
        assert brand.project_id is None
        assert [c.name for c in brand.categories] == ["Beverages"]
        assert "Nova" in names(service.list({}, admin_a_claims))

    def test_create_in_own_project(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        brand = BrandService(db_session).create(
            {"name": "Nova", "project_id": seed_tenants.project_a.id}, admin_a_claims
        )
        assert brand.project_id == seed_tenants.project_a.id

    def test_create_in_other_project_refused(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        with pytest.raises(AuthorizationError):
            BrandService(db_session).create(
                {"name": "Nova", "project_id": seed_tenants.project_b.id}, admin_a_claims
            )

    def test_duplicate_name_per_owner(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(ConflictError, match="name already exists"):
            BrandService(db_session).create({"name": "Acme"}, admin_a_claims)

    def test_same_name_other_owner(self, db_session, seed_catalog, seed_tenants, promoter_b_claims):
        brand = BrandService(db_session).create({"name": "Acme"}, promoter_b_claims)
        assert brand.owner_user_id == seed_tenants.promoter_b.id

    def test_super_admin_creates_unowned(self, db_session, seed_catalog, super_claims):
        service = BrandService(db_session)
        brand = service.create({"name": "House"}, super_claims)
        assert brand.owner_user_id is None
        with pytest.raises(ConflictError):
            service.create({"name": "House"}, super_claims)

    def test_invisible_category_rejected(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(ValidationError, match="Unknown category ids"):
            BrandService(db_session).create(
                {"name": "Nova", "category_ids": [seed_catalog.snacks.id]}, admin_a_claims
            )

    def test_rename_conflict(self, db_session, seed_catalog, admin_a_claims):
        service = BrandService(db_session)
        service.create({"name": "Nova"}, admin_a_claims)
        with pytest.raises(ConflictError):
            service.update(seed_catalog.acme.id, {"name": "Nova"}, admin_a_claims)

    def test_update_replaces_categories(self, db_session, seed_catalog, admin_a_claims):
        brand = BrandService(db_session).update(
            seed_catalog.acme.id,
            {"description": "Fizzy", "category_ids": []},
            admin_a_claims,
        )
        assert brand.description == "Fizzy"
        assert brand.categories == []

    def test_update_cannot_change_owner(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        brand = BrandService(db_session).update(
            seed_catalog.acme.id,
            {"owner_user_id": seed_tenants.promoter_b.id, "name": "Acme Two"},
            admin_a_claims,
        )
        assert brand.owner_user_id == seed_tenants.admin_a.id
        assert brand.name == "Acme Two"

    def test_update_outside_scope(self, db_session, seed_catalog, promoter_b_claims):
        with pytest.raises(NotFoundError):
            BrandService(db_session).update(seed_catalog.acme.id, {"name": "Mine"}, promoter_b_claims)

    def test_search(self, db_session, seed_catalog, super_claims):
        result = BrandService(db_session).list({"search": "ze"}, super_claims)
        assert names(result) == ["Zeta"]


class TestCategoryService:
    """Category rules."""

    def test_listing_scope(self, db_session, seed_catalog, promoter_b_claims):
        result = CategoryService(db_session).list({}, promoter_b_claims)
        assert names(result) == ["Drafts", "Snacks"]

    def test_delete_in_use_refused(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(ConflictError, match="products"):
            CategoryService(db_session).delete(seed_catalog.beverages.id, admin_a_claims)

    def test_delete_unused(self, db_session, seed_catalog, promoter_b_claims):
        service = CategoryService(db_session)
        service.delete(seed_catalog.drafts.id, promoter_b_claims)
        with pytest.raises(NotFoundError):
            service.get(seed_catalog.drafts.id, promoter_b_claims)


# =============================================================================
# Products (project scope, convenience params)
# =============================================================================


class TestProductService:
    """Product listing."""

    def test_project_scope(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({}, admin_a_claims)
        assert result.total == 4
        assert "Chips" not in names(result)

    def test_branch_member_inherits_project(self, db_session, seed_catalog, branch_user_claims):
        assert ProductService(db_session).list({}, branch_user_claims).total == 4

    def test_super_admin_unscoped(self, db_session, seed_catalog, super_claims):
        assert ProductService(db_session).list({}, super_claims).total == 5

    def test_caller_without_project_refused(self, db_session, seed_catalog, orphan_claims):
        with pytest.raises(AuthorizationError):
            ProductService(db_session).list({}, orphan_claims)

    def test_brand_id(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"brandId": str(seed_catalog.acme.id)}, admin_a_claims)
        assert result.total == 3

    def test_is_active(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"isActive": "false"}, admin_a_claims)
        assert names(result) == ["Water 500ml"]

    def test_price_range(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"minPrice": "10", "maxPrice": "20"}, admin_a_claims)
        assert names(result) == ["Cola 1L", "Cola 500ml"]

    def test_in_stock(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"inStock": "true"}, admin_a_claims)
        assert names(result) == ["Cola 500ml", "Juice 100%_pure"]

    def test_in_stock_at_branch(self, db_session, seed_catalog, seed_tenants, admin_a_claims):
        service = ProductService(db_session)
        branch_id = str(seed_tenants.branch_a1.id)
        assert names(service.list({"branchId": branch_id, "inStock": "true"}, admin_a_claims)) == [
            "Cola 500ml"
        ]
        assert names(service.list({"branchId": branch_id, "inStock": "false"}, admin_a_claims)) == [
            "Cola 1L"
        ]

    def test_bad_in_stock_flag(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(ValidationError):
            ProductService(db_session).list({"inStock": "maybe"}, admin_a_claims)

    def test_explicit_filter_wins_over_shortcut(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list(
            {"isActive": "true", "filters[is_active]": "false"}, admin_a_claims
        )
        assert names(result) == ["Water 500ml"]

    def test_bracket_relation_filter_and_sort(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list(
            {"filters[brand][name]": "Acme", "sortBy": "name", "sortOrder": "ASC"},
            admin_a_claims,
        )
        assert [r.name for r in result.records] == ["Cola 1L", "Cola 500ml", "Water 500ml"]

    def test_search(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"search": "wat"}, admin_a_claims)
        assert names(result) == ["Water 500ml"]

    def test_output_carries_relations(self, db_session, seed_catalog, admin_a_claims):
        product = ProductService(db_session).get(seed_catalog.cola.id, admin_a_claims)
        assert product.brand.name == "Acme"
        assert product.project.name == "Alpha Retail"
        assert sorted(s.quantity for s in product.stock) == [0, 5]
        assert {s.branch.name for s in product.stock} == {"Centro", "Norte"}

    def test_invalid_sort(self, db_session, seed_catalog, admin_a_claims):
        with pytest.raises(ValidationError):
            ProductService(db_session).list({"sortBy": "colour"}, admin_a_claims)

    def test_pagination_envelope(self, db_session, seed_catalog, admin_a_claims):
        result = ProductService(db_session).list({"page": "2", "limit": "3"}, admin_a_claims)
        assert result.to_dict()["total_records"] == 4
        assert result.to_dict()["current_page"] == 2
        assert result.to_dict()["per_page"] == 3
        assert len(result.records) == 1


# =============================================================================
# Feedback
# =============================================================================


class TestFeedbackService:
    """Feedback listing and resolution."""

    def test_project_scope(self, db_session, seed_feedback, admin_a_claims):
        assert FeedbackService(db_session).list({}, admin_a_claims).total == 2

    def test_type_shortcut(self, db_session, seed_feedback, admin_a_claims):
        result = FeedbackService(db_session).list({"type": "bug"}, admin_a_claims)
        assert [r.message for r in result.records] == ["Scanner fails on damp labels"]

    def test_user_shortcut(self, db_session, seed_feedback, seed_tenants, admin_a_claims):
        result = FeedbackService(db_session).list(
            {"userId": str(seed_tenants.branch_user.id)}, admin_a_claims
        )
        assert [r.message for r in result.records] == ["Add a dark mode"]

    def test_is_resolved_declared_bool(self, db_session, seed_feedback, admin_a_claims):
        service = FeedbackService(db_session)
        assert service.list({"is_resolved": "false"}, admin_a_claims).total == 2
        assert service.list({"is_resolved": "true"}, admin_a_claims).total == 0

    def test_search_message(self, db_session, seed_feedback, admin_a_claims):
        result = FeedbackService(db_session).list({"search": "DARK"}, admin_a_claims)
        assert result.total == 1

    def test_create_defaults(self, db_session, seed_feedback, seed_tenants, branch_user_claims):
        feedback = FeedbackService(db_session).create(
            {"type": "idea", "message": "Bigger labels"}, branch_user_claims
        )
        assert feedback.user_id == seed_tenants.branch_user.id
        assert feedback.project_id == seed_tenants.project_a.id
        assert feedback.is_resolved is False

    def test_resolve_and_reopen(self, db_session, seed_feedback, seed_tenants, admin_a_claims):
        service = FeedbackService(db_session)
        resolved = service.set_resolved(seed_feedback.dark_mode.id, True, admin_a_claims)
        assert resolved.is_resolved is True
        assert resolved.resolved_by_id == seed_tenants.admin_a.id
        assert resolved.resolved_by.name == "Ana Admin"
        assert resolved.resolved_at is not None

        reopened = service.set_resolved(seed_feedback.dark_mode.id, False, admin_a_claims)
        assert reopened.is_resolved is False
        assert reopened.resolved_by_id is None
        assert reopened.resolved_at is None

    def test_resolve_outside_scope(self, db_session, seed_feedback, admin_a_claims):
        with pytest.raises(NotFoundError):
            FeedbackService(db_session).set_resolved(seed_feedback.login.id, True, admin_a_claims)


# =============================================================================
# Surveys
# =============================================================================


class TestSurveyServices:
    """Surveys and survey feedback scoped through the survey."""

    def test_survey_listing(self, db_session, seed_surveys, admin_a_claims):
        result = SurveyService(db_session).list({}, admin_a_claims)
        assert names(result) == ["Store Audit"]
        survey = result.records[0]
        assert [q.position for q in survey.questions] == [1, 2]
        assert {f.user.name for f in survey.feedbacks} == {"Ana Admin", "Carla Branch"}

    def test_feedback_of_survey(self, db_session, seed_surveys, admin_a_claims):
        result = SurveyFeedbackService(db_session).list_for_survey(
            seed_surveys.audit.id, {}, admin_a_claims
        )
        assert result.total == 2

    def test_feedback_of_survey_filtered(self, db_session, seed_surveys, seed_tenants, admin_a_claims):
        result = SurveyFeedbackService(db_session).list_for_survey(
            seed_surveys.audit.id,
            {"filters[user_id]": str(seed_tenants.branch_user.id)},
            admin_a_claims,
        )
        assert [r.branch.name for r in result.records] == ["Norte"]

    def test_feedback_of_foreign_survey(self, db_session, seed_surveys, admin_a_claims):
        with pytest.raises(NotFoundError):
            SurveyFeedbackService(db_session).list_for_survey(seed_surveys.shelf.id, {}, admin_a_claims)

    def test_feedback_scoped_through_survey(self, db_session, seed_surveys, admin_a_claims):
        service = SurveyFeedbackService(db_session)
        assert service.list({}, admin_a_claims).total == 2
        with pytest.raises(NotFoundError):
            service.get(seed_surveys.shelf_answer.id, admin_a_claims)

    def test_deleted_survey_hides_feedback_listing(self, db_session, seed_surveys, admin_a_claims):
        SurveyService(db_session).delete(seed_surveys.audit.id, admin_a_claims)
        with pytest.raises(NotFoundError):
            SurveyFeedbackService(db_session).list_for_survey(seed_surveys.audit.id, {}, admin_a_claims)


# =============================================================================
# Projects and locations
# =============================================================================


class TestProjectService:
    """Projects are super admin only."""

    def test_member_refused(self, db_session, seed_tenants, admin_a_claims):
        with pytest.raises(AuthorizationError, match="manage projects"):
            ProjectService(db_session).list({}, admin_a_claims)

    def test_search_owner_username(self, db_session, seed_tenants, super_claims):
        result = ProjectService(db_session).list({"search": "ana"}, super_claims)
        assert names(result) == ["Alpha Retail"]
        assert result.records[0].owner.username == "ana"

    def test_search_owner_mobile(self, db_session, seed_tenants, super_claims):
        result = ProjectService(db_session).list({"search": "0202"}, super_claims)
        assert names(result) == ["Beta Retail"]

    def test_branches_loaded(self, db_session, seed_tenants, super_claims):
        project = ProjectService(db_session).get(seed_tenants.project_a.id, super_claims)
        assert sorted(b.name for b in project.branches) == ["Centro", "Norte"]

    def test_soft_delete_and_include_deleted(self, db_session, seed_tenants, super_claims):
        service = ProjectService(db_session)
        service.delete(seed_tenants.project_b.id, super_claims)
        assert service.list({}, super_claims).total == 1
        assert service.list({}, super_claims, include_deleted=True).total == 2
        assert service.restore(seed_tenants.project_b.id, super_claims).deleted_at is None


class TestLocationServices:
    """Global reference data and project-scoped chains and branches."""

    def test_countries_global(self, db_session, seed_tenants, promoter_b_claims):
        result = CountryService(db_session).list({}, promoter_b_claims)
        assert names(result) == ["Chile"]
        assert [r.name for r in result.records[0].regions] == ["Metropolitana"]

    def test_regions_by_country(self, db_session, seed_tenants, admin_a_claims):
        service = RegionService(db_session)
        assert service.list({"countryId": str(seed_tenants.country.id)}, admin_a_claims).total == 1
        assert service.list({"countryId": "987654"}, admin_a_claims).total == 0

    def test_cities_by_country_through_region(self, db_session, seed_tenants, admin_a_claims):
        result = CityService(db_session).list(
            {"countryId": str(seed_tenants.country.id)}, admin_a_claims
        )
        assert names(result) == ["Santiago"]

    def test_chains_project_scoped(self, db_session, seed_tenants, admin_a_claims):
        assert names(ChainService(db_session).list({}, admin_a_claims)) == ["Lider"]

    def test_branches_project_scoped(self, db_session, seed_tenants, admin_a_claims):
        service = BranchService(db_session)
        assert names(service.list({}, admin_a_claims)) == ["Centro", "Norte"]
        assert service.list({"chainId": str(seed_tenants.chain_b.id)}, admin_a_claims).total == 0
        assert service.list({"cityId": str(seed_tenants.city.id)}, admin_a_claims).total == 2
