from pymongo.errors import ServerSelectionTimeoutError

from backend.main import app
from database import get_db


class UnreachableDatabase:
    def __getitem__(self, name):
        raise ServerSelectionTimeoutError("no servers available")

    def list_collection_names(self):
        raise ServerSelectionTimeoutError("no servers available")


def test_root(client):
    assert client.get("/").json() == {"message": "Vegetable Inventory Backend Running"}


def test_database_diagnostics(client, make_item):
    make_item()
    body = client.get("/test").json()
    assert body["connection_status"] == "Connected"
    assert "items" in body["collections"]


def test_storage_failure_is_reported(client):
    app.dependency_overrides[get_db] = lambda: UnreachableDatabase()

    resp = client.get("/api/inventory")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Storage failure"}

    resp = client.post("/api/transactions", json={"item_id": "0" * 24, "type": "sale", "quantity": 1, "price": 1})
    assert resp.status_code == 500

    # The process keeps serving after a storage error.
    assert client.get("/").status_code == 200
    assert client.get("/test").json()["connection_status"] == "Not Connected"
