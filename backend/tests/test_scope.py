"""
Tests for caller identity, scope resolution and scoping strategies.
"""

import pytest
from pydantic import BaseModel

from rest_api.models import Product, SurveyFeedback
from rest_api.services.base_service import ResourceService
from rest_api.services.crud import QueryComposer
from rest_api.services.crud.list_request import ListRequest
from rest_api.services.crud.predicates import FilterOp, Predicate
from rest_api.services.permissions import (
    CallerIdentity,
    GlobalScope,
    OwnerOrProjectScope,
    ProjectScope,
    ScopeContext,
    ScopeResolver,
    SuperAdminOnlyScope,
)
from shared.config.constants import Roles
from shared.utils.exceptions import AuthorizationError, ConfigurationError, ValidationError


class TestCallerIdentity:
    """Tests for building the caller from token claims."""

    def test_from_claims(self):
        caller = CallerIdentity.from_claims(
            {"sub": "7", "role": Roles.ADMIN, "project_id": 3, "email": "a@b.c"}
        )
        assert caller.user_id == 7
        assert caller.project_id == 3
        assert caller.email == "a@b.c"
        assert not caller.is_super_admin

    def test_super_admin_flag(self):
        assert CallerIdentity.from_claims({"sub": "1", "role": Roles.SUPER_ADMIN}).is_super_admin


class TestScopeResolver:
    """Tests for resolving the tenant project of a caller."""

    def test_super_admin_unscoped(self, db_session, seed_tenants):
        scope = ScopeResolver(db_session).resolve(
            CallerIdentity(user_id=seed_tenants.super_admin.id, role=Roles.SUPER_ADMIN)
        )
        assert scope.is_super_admin
        assert scope.tenant_project_id is None

    def test_project_from_claim(self):
        """A claimed project needs no database lookup."""
        scope = ScopeResolver().resolve(CallerIdentity(user_id=5, role=Roles.ADMIN, project_id=9))
        assert scope == ScopeContext(caller_id=5, is_super_admin=False, tenant_project_id=9)

    def test_project_from_user_row(self, db_session, seed_tenants):
        scope = ScopeResolver(db_session).resolve(
            CallerIdentity(user_id=seed_tenants.admin_a.id, role=Roles.ADMIN)
        )
        assert scope.tenant_project_id == seed_tenants.project_a.id

    def test_project_from_branch(self, db_session, seed_tenants):
        """A user without a project inherits the project of their branch."""
        scope = ScopeResolver(db_session).resolve(
            CallerIdentity(user_id=seed_tenants.branch_user.id, role=Roles.PROMOTER)
        )
        assert scope.tenant_project_id == seed_tenants.project_a.id

    def test_no_project_refused(self, db_session, seed_tenants):
        with pytest.raises(AuthorizationError) as exc_info:
            ScopeResolver(db_session).resolve(
                CallerIdentity(user_id=seed_tenants.orphan.id, role=Roles.PROMOTER)
            )
        assert exc_info.value.status_code == 403

    def test_unknown_user_refused(self, db_session, seed_tenants):
        with pytest.raises(AuthorizationError):
            ScopeResolver(db_session).resolve(CallerIdentity(user_id=424242, role=Roles.ADMIN))

    def test_deleted_user_refused(self, db_session, seed_tenants):
        seed_tenants.admin_a.soft_delete()
        db_session.commit()
        with pytest.raises(AuthorizationError):
            ScopeResolver(db_session).resolve(
                CallerIdentity(user_id=seed_tenants.admin_a.id, role=Roles.ADMIN)
            )

    def test_scope_context_requires_project(self):
        with pytest.raises(AuthorizationError):
            ScopeContext(caller_id=1, is_super_admin=False)


class TestScopingStrategies:
    """Tests for the predicates each strategy forces onto a listing."""

    @pytest.fixture
    def member(self):
        return ScopeContext(caller_id=4, is_super_admin=False, tenant_project_id=2)

    @pytest.fixture
    def root(self):
        return ScopeContext(caller_id=1, is_super_admin=True)

    def test_global_adds_nothing(self, member):
        request = GlobalScope().apply(ListRequest(), member)
        assert len(request.equality_filters) == 0
        assert len(request.or_filter_groups) == 0

    def test_project_scope(self, member):
        group = ProjectScope().and_predicates(member)
        assert list(group) == [Predicate(("project_id",), FilterOp.EQ, 2)]

    def test_project_scope_through_relation(self, member):
        group = ProjectScope("survey.project_id").and_predicates(member)
        assert list(group) == [Predicate(("survey", "project_id"), FilterOp.EQ, 2)]

    def test_project_scope_bypassed_for_super_admin(self, root):
        assert len(ProjectScope().and_predicates(root)) == 0

    def test_owner_or_project(self, member):
        groups = list(OwnerOrProjectScope().or_groups(member))
        assert [list(g) for g in groups] == [
            [Predicate(("project_id",), FilterOp.EQ, 2)],
            [Predicate(("owner_user_id",), FilterOp.EQ, 4)],
        ]

    def test_owner_or_project_bypassed_for_super_admin(self, root):
        assert len(OwnerOrProjectScope().or_groups(root)) == 0

    def test_scope_narrows_caller_filters(self, member):
        """Scope predicates are added to, never replace, the caller's filters."""
        caller_filter = Predicate(("project_id",), FilterOp.EQ, 99)
        request = ListRequest().narrowed([caller_filter])
        scoped = ProjectScope().apply(request, member)
        assert list(scoped.equality_filters) == [
            caller_filter,
            Predicate(("project_id",), FilterOp.EQ, 2),
        ]

    def test_super_admin_only_refuses_members(self, member):
        with pytest.raises(AuthorizationError, match="manage projects"):
            SuperAdminOnlyScope("manage projects").and_predicates(member)

    def test_super_admin_only_allows_root(self, root):
        assert len(SuperAdminOnlyScope().and_predicates(root)) == 0

    def test_strategy_predicates_are_declared(self, member):
        assert all(p.declared for p in ProjectScope().and_predicates(member))
        for group in OwnerOrProjectScope().or_groups(member):
            assert all(p.declared for p in group)


class TestScopeMisconfiguration:
    """A mistyped scoping path is a programming error, not bad input."""

    @pytest.fixture
    def member(self):
        return ScopeContext(caller_id=4, is_super_admin=False, tenant_project_id=2)

    def test_unknown_scope_path_in_listing(self, db_session, member):
        request = ProjectScope("projectid").apply(ListRequest(), member)
        with pytest.raises(ConfigurationError, match="projectid"):
            QueryComposer(db_session).find_page(Product, "product", request)

    def test_unknown_owner_field_in_listing(self, db_session, member):
        request = OwnerOrProjectScope(owner_field="owner").apply(ListRequest(), member)
        with pytest.raises(ConfigurationError):
            QueryComposer(db_session).find_page(Product, "product", request)

    def test_unknown_request_filter_stays_validation_error(self, db_session, member):
        request = ProjectScope().apply(
            ListRequest().narrowed([Predicate(("projectid",), FilterOp.EQ, 2)]), member
        )
        with pytest.raises(ValidationError) as exc_info:
            QueryComposer(db_session).find_page(Product, "product", request)
        assert not isinstance(exc_info.value, ConfigurationError)

    def test_service_rejects_unknown_scope_path(self, db_session):
        with pytest.raises(ConfigurationError, match="scope field 'projectid'"):
            ResourceService(db_session, Product, BaseModel, "Product", scoping=ProjectScope("projectid"))

    def test_service_rejects_unknown_search_field(self, db_session):
        with pytest.raises(ConfigurationError, match="search field 'nmae'"):
            ResourceService(db_session, Product, BaseModel, "Product", searchable_fields=("nmae",))

    def test_service_accepts_relation_scope_path(self, db_session):
        service = ResourceService(
            db_session,
            SurveyFeedback,
            BaseModel,
            "Survey feedback",
            searchable_fields=("survey.name",),
            scoping=ProjectScope("survey.project_id"),
        )
        assert service.scoping.declared_paths() == (("survey", "project_id"),)
