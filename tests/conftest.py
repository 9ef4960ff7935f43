import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(tempfile.mkdtemp()) / 'test.db'}")

import pytest
from fastapi.testclient import TestClient

from warranty_tracker.deps import get_backend, init_db
from warranty_tracker.main import app
from warranty_tracker.models import AuthResponse, Product, ProductPage, User, Warranty
from warranty_tracker.services.backend import ApiError

init_db()


def make_warranty(wid: str, name: str, days_left: int | None = None, **extra) -> Warranty:
    end = (date.today() + timedelta(days=days_left)).isoformat() if days_left is not None else None
    return Warranty(
        id=wid,
        product_name=name,
        purchase_date="2023-01-15",
        warranty_end_date=end,
        **extra,
    )


class FakeBackend:
    def __init__(self) -> None:
        self.user = User(id="user-1", username="alice", email="alice@example.com")
        self.password = "secret"
        self.token = None
        self.tokens_seen = []
        self.warranties = [
            make_warranty("w1", "Toaster", 10),
            make_warranty("w2", "Laptop", 200),
            make_warranty("w3", "Kettle", 5),
            make_warranty("w4", "Chair"),
        ]
        self.expiring = [self.warranties[0], self.warranties[2]]
        self.deleted = []
        self.list_params = None
        self.expiring_failure = None
        self.saved = []

    def with_token(self, token):
        self.token = token
        self.tokens_seen.append(token)
        return self

    def login(self, email, password):
        if password != self.password:
            raise ApiError(401, "Invalid credentials")
        return AuthResponse(token="tok-123", user=self.user)

    def register(self, username, email, password):
        return AuthResponse(token="tok-new", user=User(id="user-2", username=username, email=email))

    def list_warranties(self, **params):
        self.list_params = params
        return list(self.warranties)

    def expiring_warranties(self):
        if self.expiring_failure:
            raise self.expiring_failure
        return list(self.expiring)

    def create_warranty(self, payload):
        self.saved.append(payload)
        return Warranty.model_validate({"_id": "w-new", **payload.to_wire()})

    def update_warranty(self, warranty_id, payload):
        self.get_warranty(warranty_id)
        self.saved.append(payload)
        return Warranty.model_validate({"_id": warranty_id, **payload.to_wire()})

    def get_warranty(self, warranty_id):
        for w in self.warranties:
            if w.id == warranty_id:
                return w
        raise ApiError(404, "Warranty not found")

    def delete_warranty(self, warranty_id):
        self.get_warranty(warranty_id)
        self.deleted.append(warranty_id)

    def list_products(self, **params):
        self.list_params = params
        return ProductPage(products=[Product(id="p1", name="Blender", category="appliances")], total=1, pages=1)

    def product_categories(self):
        return ["appliances", "electronics"]

    def get_product(self, product_id):
        if product_id != "p1":
            raise ApiError(404, "Product not found")
        return Product(id="p1", name="Blender", category="appliances")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_backend] = lambda: backend
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client):
    resp = client.post("/auth/login", json={"email": "alice@example.com", "password": "secret"})
    assert resp.status_code == 200
    return client
