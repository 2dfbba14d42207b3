"""
Property-based Testing with Hypothesis.

Listing invariants: page window size, repeatability, search no-op, scope
soundness and parser limits. Seeded data is only read by these tests, so
reusing function-scoped fixtures across examples is safe.
"""

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from rest_api.models import Brand, Product
from rest_api.services.crud import QueryComposer, normalize_list_request, parse_bracket_query
from rest_api.services.domain import BrandService, ProductService
from shared.utils.exceptions import MalformedQueryError

READ_ONLY_FIXTURES = settings(
    max_examples=50,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)


class TestPaginationProperties:
    """Property-based tests for the page window."""

    @given(page=st.integers(min_value=1, max_value=8), limit=st.integers(min_value=1, max_value=7))
    @READ_ONLY_FIXTURES
    def test_window_size(self, page, limit, db_session, seed_catalog):
        """Property: records == min(limit, total - (page-1)*limit), never negative."""
        result = QueryComposer(db_session).find_all(Product, "product", page=page, limit=limit)
        expected = max(0, min(limit, result.total - (page - 1) * limit))
        assert result.total == 5
        assert len(result.records) == expected
        assert len(result.records) <= limit

    @given(page=st.integers(min_value=1, max_value=4), limit=st.integers(min_value=1, max_value=4))
    @READ_ONLY_FIXTURES
    def test_pages_partition_the_listing(self, page, limit, db_session, seed_catalog):
        """Property: a page holds exactly the matching slice of the full ordering."""
        composer = QueryComposer(db_session)
        everything = [p.id for p in composer.find_all(Product, "product", limit=100).records]
        window = [p.id for p in composer.find_all(Product, "product", page=page, limit=limit).records]
        start = (page - 1) * limit
        assert window == everything[start:start + limit]

    @given(raw=st.integers(min_value=-10_000, max_value=10_000))
    @settings(max_examples=50)
    def test_limit_always_clamped(self, raw):
        """Property: any integer limit lands in [1, 100]."""
        limit = normalize_list_request({"limit": str(raw)}).limit
        assert 1 <= limit <= 100


class TestListingProperties:
    """Repeatability and search behaviour."""

    @given(
        search=st.text(alphabet="acilmo0125 %_", max_size=6),
        sort_by=st.sampled_from(["name", "price", "sku", "created_at"]),
        sort_order=st.sampled_from(["ASC", "DESC"]),
    )
    @READ_ONLY_FIXTURES
    def test_repeatable(self, search, sort_by, sort_order, db_session, seed_catalog, admin_a_claims):
        """Property: the same query against unchanged data gives the same page."""
        query = {"search": search, "sortBy": sort_by, "sortOrder": sort_order, "limit": "3"}
        service = ProductService(db_session)
        first = service.list(query, admin_a_claims).to_dict()
        second = service.list(query, admin_a_claims).to_dict()
        assert first == second

    @given(search=st.text(min_size=1, max_size=20))
    @READ_ONLY_FIXTURES
    def test_search_without_fields_is_noop(self, search, db_session, seed_catalog):
        """Property: with no searchable fields, any search term changes nothing."""
        composer = QueryComposer(db_session)
        searched = composer.find_all(Product, "product", search=search, searchable_fields=())
        plain = composer.find_all(Product, "product")
        assert [p.id for p in searched.records] == [p.id for p in plain.records]
        assert searched.total == plain.total


class TestScopeProperties:
    """Scope soundness for owner-or-project resources."""

    @given(
        caller=st.sampled_from(["admin_a", "promoter_b", "branch_user"]),
        page=st.integers(min_value=1, max_value=3),
        limit=st.integers(min_value=1, max_value=3),
    )
    @READ_ONLY_FIXTURES
    def test_brand_records_in_scope(self, caller, page, limit, db_session, seed_catalog, seed_tenants,
                                    admin_a_claims, promoter_b_claims, branch_user_claims):
        """Property: every listed brand is in the caller's project or owned by the caller."""
        claims = {
            "admin_a": admin_a_claims,
            "promoter_b": promoter_b_claims,
            "branch_user": branch_user_claims,
        }[caller]
        service = BrandService(db_session)
        scope = service.resolve_scope(claims)
        result = service.list({"page": str(page), "limit": str(limit)}, claims)

        for record in result.records:
            row = db_session.get(Brand, record.id)
            assert (
                row.project_id == scope.tenant_project_id
                or row.owner_user_id == scope.caller_id
            )


class TestParserProperties:
    """Bracket parser limits."""

    @given(depth=st.integers(min_value=1, max_value=15))
    @settings(max_examples=30)
    def test_depth_cap(self, depth):
        """Property: keys of up to ten segments parse; longer keys are rejected."""
        segments = ["filters"] + [f"k{i}" for i in range(depth - 1)]
        key = segments[0] + "".join(f"[{s}]" for s in segments[1:])
        if depth > 10:
            with pytest.raises(MalformedQueryError):
                parse_bracket_query({key: "v"})
            return

        node = parse_bracket_query({key: "v"})
        for segment in segments:
            node = node[segment]
        assert node == "v"

    @given(size=st.integers(min_value=2, max_value=150))
    @settings(max_examples=30)
    def test_array_cap(self, size):
        """Property: up to 100 repeated values are kept, more are rejected."""
        values = [str(i) for i in range(size)]
        if size > 100:
            with pytest.raises(MalformedQueryError):
                parse_bracket_query({"filters[id][]": values})
            return
        assert parse_bracket_query({"filters[id][]": values}) == {"filters": {"id": values}}
