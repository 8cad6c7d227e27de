# tests/conftest.py
import os

# Must be set before app.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SEED_CATEGORIES", "false")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import Category
from sdk.market import MarketClient

# inserted out of alphabetical order on purpose; ids are 1, 2, 3
CATEGORY_NAMES = ["Vehicles", "Books", "Electronics"]


@pytest.fixture(autouse=True)
def db():
    from app import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        for name in CATEGORY_NAMES:
            session.add(Category(name=name))
        session.commit()
        yield session


@pytest.fixture
def client():
    return TestClient(app)


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


def make_product(client, user_id=42, **overrides):
    payload = {"title": "Desk", "price": 500, "categoryId": 1}
    payload.update(overrides)
    r = client.post("/products", json=payload, headers=as_user(user_id))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def market():
    """Returns a factory for SDK clients talking to the app in-process."""
    def _make(user_id=None):
        return MarketClient(base_url="http://testserver", user_id=user_id, session=TestClient(app))
    return _make
