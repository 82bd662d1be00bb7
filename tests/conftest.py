import mongomock
import pytest
from fastapi.testclient import TestClient

from backend.main import app, get_clock
from database import get_db

TODAY = "2024-03-15"


@pytest.fixture
def db():
    """
    Fresh in-memory MongoDB for each test.
    """
    return mongomock.MongoClient()["inventory"]


@pytest.fixture
def client(db):
    """
    Test client wired to the in-memory database and a fixed clock.
    """
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_clock] = lambda: (lambda: TODAY)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_item(client):
    def _make(**overrides):
        data = {"name": "Onion", "category": "other", "quantity": 100, "unit": "kg", "price": 20}
        data.update(overrides)
        resp = client.post("/api/inventory", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def today():
    return TODAY
