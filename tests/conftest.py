from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import voice_order.config as config_mod
import voice_order.db as db
from voice_order.main import app
from voice_order.models import Base, Product
from voice_order.routes.orders import limiter
from voice_order.services import session as session_store
from voice_order.services.catalog import matches_term

# Test merchant credentials
TEST_MERCHANT_USERNAME = "testmerchant"
TEST_MERCHANT_PASSWORD = "testpassword123"

TEST_USER_ID = "user-1"
TEST_DEVICE_ID = "device-abc"

RICE_PRICE = 120.0


def _catalog() -> List[Product]:
    return [
        Product(
            name="Basmati Rice",
            category="grains",
            unit="kg",
            price=RICE_PRICE,
            stock_quantity=50,
            merchant_id="merchant-1",
            is_active=True,
            alternative_names=[
                {"language": "hindi", "dialect": "standard", "name": "चावल"},
            ],
            voice_patterns=[
                {"language": "hindi", "dialect": "colloquial", "patterns": ["chawal"], "is_active": True},
            ],
            unit_names=[
                {"language": "hindi", "dialect": "standard", "singular": "किलो", "plural": "किलो"},
                {"language": "english", "dialect": "colloquial", "singular": "kilo", "plural": "kilos"},
            ],
        ),
        Product(
            name="Sugar",
            category="groceries",
            unit="kg",
            price=45.0,
            stock_quantity=100,
            merchant_id="merchant-1",
            is_active=True,
            alternative_names=[{"language": "hindi", "dialect": "standard", "name": "चीनी"}],
            voice_patterns=[
                {"language": "hindi", "dialect": "colloquial", "patterns": ["cheeni"], "is_active": False},
            ],
        ),
        Product(
            name="Toor Dal",
            category="pulses",
            unit="kg",
            price=160.0,
            stock_quantity=30,
            merchant_id="merchant-2",
            is_active=True,
            alternative_names=[],
            voice_patterns=[],
        ),
        Product(
            name="Amul Milk",
            category="dairy",
            unit="l",
            price=60.0,
            stock_quantity=20,
            merchant_id="merchant-2",
            is_active=True,
            alternative_names=[],
            voice_patterns=[],
        ),
        Product(
            name="Brown Rice",
            category="grains",
            unit="kg",
            price=90.0,
            stock_quantity=10,
            merchant_id="merchant-3",
            is_active=True,
            alternative_names=[],
            voice_patterns=[],
        ),
        Product(
            name="Saffron",
            category="spices",
            unit="g",
            price=300.0,
            stock_quantity=0,
            merchant_id="merchant-3",
            is_active=False,
            alternative_names=[],
            voice_patterns=[],
        ),
    ]


class FakeCatalog:
    """In-memory CatalogLookup over unsaved Product objects."""

    def __init__(self, products: Optional[List[Product]] = None):
        self.products = products if products is not None else _catalog()
        self.searches = []

    def search(self, term, category=None, max_price=None):
        self.searches.append((term, category, max_price))
        results = []
        for product in self.products:
            if not product.is_active:
                continue
            if category and category.lower() not in (product.category or "").lower():
                continue
            if max_price is not None and product.price > max_price:
                continue
            if matches_term(product, term):
                results.append(product)
        return results


@pytest.fixture(autouse=True)
def rule_engine(monkeypatch):
    """Every test runs against the local rule engine unless it says otherwise."""
    monkeypatch.setattr(config_mod, "NLU_BACKEND", "rules")
    monkeypatch.setattr(config_mod, "OFFLINE_MODE_ENABLED", False)
    monkeypatch.setattr(config_mod, "ORDER_CONFIDENCE_THRESHOLD", 0.7)


@pytest.fixture
def engine():
    """In-memory SQLite engine; StaticPool so all connections share one database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Seed the catalog
    session = TestingSessionLocal()
    session.add_all(_catalog())
    session.commit()
    session.close()

    return TestingSessionLocal


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def client(engine, session_factory, monkeypatch):
    """Shared FastAPI TestClient using the in-memory SQLite DB.

    Sets up test merchant credentials and disables rate limiting.
    """
    monkeypatch.setattr(config_mod, "MERCHANT_USERNAME", TEST_MERCHANT_USERNAME)
    monkeypatch.setattr(config_mod, "MERCHANT_PASSWORD", TEST_MERCHANT_PASSWORD)

    # Patch the db module used by the app (background notifications open
    # their own sessions through db.SessionLocal)
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", session_factory)

    monkeypatch.setattr(limiter, "enabled", False)

    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db

    # Clear dialogue contexts before each test
    session_store.clear_cache()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    session_store.clear_cache()


@pytest.fixture
def user_headers():
    return {"X-User-ID": TEST_USER_ID}


@pytest.fixture
def merchant_auth():
    """Returns HTTP Basic Auth tuple for merchant endpoints."""
    return (TEST_MERCHANT_USERNAME, TEST_MERCHANT_PASSWORD)
