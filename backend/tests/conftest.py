"""
Pytest configuration and fixtures for backend tests.

The fixtures build two tenants (projects A and B) with users of every
shape scoping cares about: a super admin, project members, a user who
belongs to a project only through their branch, and a user with no
project at all.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import (
    Base, Project, User, Country, Region, City, Chain, Branch,
    Brand, Category, Product, Stock,
    Survey, SurveyQuestion, SurveyFeedback, Feedback,
)
from rest_api.seed import seed_roles
from shared.config.constants import Roles
from shared.infrastructure.db import get_db
from shared.security.auth import sign_jwt


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Identity helpers
# =============================================================================


def claims_for(user: User, role: str) -> dict:
    """Verified-token claims as services receive them."""
    return {"sub": str(user.id), "role": role, "project_id": user.project_id}


def auth_headers(user: User, role: str) -> dict:
    """Authorization header carrying a signed token for ``user``."""
    payload = {"sub": user.id, "role": role}
    if user.project_id is not None:
        payload["project_id"] = user.project_id
    return {"Authorization": f"Bearer {sign_jwt(payload)}"}


# =============================================================================
# Seed fixtures
# =============================================================================


@pytest.fixture
def seed_tenants(db_session):
    """
    Two projects, a location tree, branches and one user per scope shape.
    """
    role_ids = seed_roles(db_session)

    project_a = Project(name="Alpha Retail", is_active=True)
    project_b = Project(name="Beta Retail", is_active=True)
    db_session.add_all([project_a, project_b])
    db_session.flush()

    chile = Country(name="Chile")
    db_session.add(chile)
    db_session.flush()
    metro = Region(name="Metropolitana", country_id=chile.id)
    db_session.add(metro)
    db_session.flush()
    santiago = City(name="Santiago", region_id=metro.id)
    db_session.add(santiago)
    db_session.flush()

    chain_a = Chain(name="Lider", project_id=project_a.id)
    chain_b = Chain(name="Jumbo", project_id=project_b.id)
    db_session.add_all([chain_a, chain_b])
    db_session.flush()

    branch_a1 = Branch(
        name="Centro", address="Alameda 100", project_id=project_a.id,
        city_id=santiago.id, chain_id=chain_a.id,
    )
    branch_a2 = Branch(
        name="Norte", address="Recoleta 200", project_id=project_a.id,
        city_id=santiago.id, chain_id=chain_a.id,
    )
    branch_b1 = Branch(
        name="Sur", address="Gran Avenida 300", project_id=project_b.id,
        city_id=santiago.id, chain_id=chain_b.id,
    )
    db_session.add_all([branch_a1, branch_a2, branch_b1])
    db_session.flush()

    super_admin = User(name="Root", username="root", role_id=role_ids[Roles.SUPER_ADMIN])
    admin_a = User(
        name="Ana Admin", username="ana", mobile="555-0101", email="ana@alpha.test",
        role_id=role_ids[Roles.ADMIN], project_id=project_a.id,
    )
    promoter_b = User(
        name="Bruno Promoter", username="bruno", mobile="555-0202",
        role_id=role_ids[Roles.PROMOTER], project_id=project_b.id,
    )
    branch_user = User(
        name="Carla Branch", username="carla",
        role_id=role_ids[Roles.PROMOTER], branch_id=branch_a2.id,
    )
    orphan = User(name="Dario Orphan", username="dario", role_id=role_ids[Roles.PROMOTER])
    db_session.add_all([super_admin, admin_a, promoter_b, branch_user, orphan])
    db_session.flush()

    project_a.owner_user_id = admin_a.id
    project_b.owner_user_id = promoter_b.id
    db_session.commit()

    return SimpleNamespace(
        project_a=project_a,
        project_b=project_b,
        country=chile,
        region=metro,
        city=santiago,
        chain_a=chain_a,
        chain_b=chain_b,
        branch_a1=branch_a1,
        branch_a2=branch_a2,
        branch_b1=branch_b1,
        super_admin=super_admin,
        admin_a=admin_a,
        promoter_b=promoter_b,
        branch_user=branch_user,
        orphan=orphan,
    )


@pytest.fixture
def seed_catalog(db_session, seed_tenants):
    """
    Brands, categories, products and stock across both projects.

    Project A products, in insertion order:
    Cola 500ml (in stock at Centro), Cola 1L (zero stock), Water 500ml
    (inactive), Juice 100%_pure (in stock at Norte).
    """
    t = seed_tenants

    beverages = Category(name="Beverages", project_id=t.project_a.id, owner_user_id=t.admin_a.id)
    snacks = Category(name="Snacks", project_id=t.project_b.id, owner_user_id=t.promoter_b.id)
    drafts = Category(name="Drafts", project_id=None, owner_user_id=t.promoter_b.id)
    db_session.add_all([beverages, snacks, drafts])
    db_session.flush()

    acme = Brand(
        name="Acme", project_id=t.project_a.id, owner_user_id=t.admin_a.id,
        categories=[beverages],
    )
    zeta = Brand(
        name="Zeta", project_id=t.project_b.id, owner_user_id=t.promoter_b.id,
        categories=[snacks],
    )
    solo = Brand(name="Solo", project_id=None, owner_user_id=t.promoter_b.id)
    db_session.add_all([acme, zeta, solo])
    db_session.flush()

    cola = Product(
        name="Cola 500ml", model="C5", sku="COLA-500", price=Decimal("10.00"),
        brand_id=acme.id, category_id=beverages.id, project_id=t.project_a.id,
    )
    cola_big = Product(
        name="Cola 1L", model="C10", sku="COLA-1000", price=Decimal("18.50"),
        brand_id=acme.id, category_id=beverages.id, project_id=t.project_a.id,
    )
    water = Product(
        name="Water 500ml", sku="WAT-500", price=Decimal("6.00"), is_active=False,
        brand_id=acme.id, category_id=beverages.id, project_id=t.project_a.id,
    )
    juice = Product(
        name="Juice 100%_pure", sku="JUI_1", price=Decimal("25.00"),
        brand_id=None, category_id=beverages.id, project_id=t.project_a.id,
    )
    chips = Product(
        name="Chips", sku="CHP-1", price=Decimal("8.00"),
        brand_id=zeta.id, category_id=snacks.id, project_id=t.project_b.id,
    )
    db_session.add_all([cola, cola_big, water, juice, chips])
    db_session.flush()

    db_session.add_all([
        Stock(product_id=cola.id, branch_id=t.branch_a1.id, quantity=5),
        Stock(product_id=cola.id, branch_id=t.branch_a2.id, quantity=0),
        Stock(product_id=cola_big.id, branch_id=t.branch_a1.id, quantity=0),
        Stock(product_id=juice.id, branch_id=t.branch_a2.id, quantity=3),
        Stock(product_id=chips.id, branch_id=t.branch_b1.id, quantity=10),
    ])
    db_session.commit()

    return SimpleNamespace(
        beverages=beverages,
        snacks=snacks,
        drafts=drafts,
        acme=acme,
        zeta=zeta,
        solo=solo,
        cola=cola,
        cola_big=cola_big,
        water=water,
        juice=juice,
        chips=chips,
    )


@pytest.fixture
def seed_surveys(db_session, seed_tenants):
    """One survey per project; the project A survey has two answers."""
    t = seed_tenants

    audit = Survey(name="Store Audit", project_id=t.project_a.id)
    shelf = Survey(name="Shelf Check", project_id=t.project_b.id)
    db_session.add_all([audit, shelf])
    db_session.flush()

    db_session.add_all([
        SurveyQuestion(survey_id=audit.id, text="Is the shelf full?", kind="bool", position=1),
        SurveyQuestion(survey_id=audit.id, text="Comments", position=2),
        SurveyQuestion(survey_id=shelf.id, text="Facings", kind="number", position=1),
    ])
    audit_answer_1 = SurveyFeedback(
        survey_id=audit.id, user_id=t.admin_a.id, branch_id=t.branch_a1.id,
        answers={"1": True, "2": "ok"},
    )
    audit_answer_2 = SurveyFeedback(
        survey_id=audit.id, user_id=t.branch_user.id, branch_id=t.branch_a2.id,
        answers={"1": False},
    )
    shelf_answer = SurveyFeedback(
        survey_id=shelf.id, user_id=t.promoter_b.id, branch_id=t.branch_b1.id,
        answers={"1": 4},
    )
    db_session.add_all([audit_answer_1, audit_answer_2, shelf_answer])
    db_session.commit()

    return SimpleNamespace(
        audit=audit,
        shelf=shelf,
        audit_answer_1=audit_answer_1,
        audit_answer_2=audit_answer_2,
        shelf_answer=shelf_answer,
    )


@pytest.fixture
def seed_feedback(db_session, seed_tenants):
    """Feedback messages: two in project A, one in project B."""
    t = seed_tenants

    scanner = Feedback(
        user_id=t.admin_a.id, project_id=t.project_a.id,
        type="bug", message="Scanner fails on damp labels",
    )
    dark_mode = Feedback(
        user_id=t.branch_user.id, project_id=t.project_a.id,
        type="idea", message="Add a dark mode",
    )
    login = Feedback(
        user_id=t.promoter_b.id, project_id=t.project_b.id,
        type="bug", message="Login is slow",
    )
    db_session.add_all([scanner, dark_mode, login])
    db_session.commit()

    return SimpleNamespace(scanner=scanner, dark_mode=dark_mode, login=login)


# =============================================================================
# Caller fixtures
# =============================================================================


@pytest.fixture
def super_claims(seed_tenants):
    return claims_for(seed_tenants.super_admin, Roles.SUPER_ADMIN)


@pytest.fixture
def admin_a_claims(seed_tenants):
    return claims_for(seed_tenants.admin_a, Roles.ADMIN)


@pytest.fixture
def promoter_b_claims(seed_tenants):
    return claims_for(seed_tenants.promoter_b, Roles.PROMOTER)


@pytest.fixture
def branch_user_claims(seed_tenants):
    return claims_for(seed_tenants.branch_user, Roles.PROMOTER)


@pytest.fixture
def orphan_claims(seed_tenants):
    return claims_for(seed_tenants.orphan, Roles.PROMOTER)


@pytest.fixture
def super_headers(seed_tenants):
    return auth_headers(seed_tenants.super_admin, Roles.SUPER_ADMIN)


@pytest.fixture
def admin_a_headers(seed_tenants):
    return auth_headers(seed_tenants.admin_a, Roles.ADMIN)


@pytest.fixture
def promoter_b_headers(seed_tenants):
    return auth_headers(seed_tenants.promoter_b, Roles.PROMOTER)


@pytest.fixture
def branch_user_headers(seed_tenants):
    return auth_headers(seed_tenants.branch_user, Roles.PROMOTER)


@pytest.fixture
def orphan_headers(seed_tenants):
    return auth_headers(seed_tenants.orphan, Roles.PROMOTER)
