import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from groupbuy import models  # noqa: F401
from groupbuy.app import app
from groupbuy.db import Base, get_db
from groupbuy.products import invalidate_catalog_cache

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}
SALES = {"X-User-Id": "sales-1", "X-User-Role": "sales"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def engine():
    # Yksi jaettu in-memory -yhteys, jotta kaikki sessiot näkevät saman datan
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    invalidate_catalog_cache()
    yield TestClient(app)
    app.dependency_overrides.clear()
    invalidate_catalog_cache()


def hoodie_payload(**overrides):
    payload = {
        "name": "College Hoodie",
        "description": "Heavy cotton hoodie with hall logo",
        "booking_amount": "100",
        "images": ["hoodie.png"],
        "price_ranges": [
            {"min_quantity": 1, "max_quantity": 9, "price_per_unit": "500"},
            {"min_quantity": 10, "max_quantity": 49, "price_per_unit": "450"},
            {"min_quantity": 50, "max_quantity": None, "price_per_unit": "400"},
        ],
    }
    payload.update(overrides)
    return payload


def tee_payload(**overrides):
    payload = {
        "name": "Fest T-Shirt",
        "description": "Printed tee",
        "has_variants": True,
        "variants": [
            {
                "name": "S",
                "booking_amount": "50",
                "images": ["tee-s.png"],
                "price_ranges": [
                    {"min_quantity": 1, "max_quantity": 4, "price_per_unit": "300"},
                    {"min_quantity": 5, "max_quantity": None, "price_per_unit": "250"},
                ],
            },
            {
                "name": "XL",
                "booking_amount": "60",
                "images": ["tee-xl.png"],
                "is_active": False,
                "price_ranges": [{"min_quantity": 1, "price_per_unit": "320"}],
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def hoodie(client):
    resp = client.post("/admin/products", json=hoodie_payload(), headers=ADMIN)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def tee(client):
    resp = client.post("/admin/products", json=tee_payload(), headers=ADMIN)
    assert resp.status_code == 201, resp.text
    return resp.json()
