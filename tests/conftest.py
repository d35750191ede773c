# tests/conftest.py
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from crudsuite.core.config import Deployment, settings
from crudsuite.db import mongo
from crudsuite.main import create_app
from crudsuite.repositories import products as products_repo
from crudsuite.repositories import users as users_repo
from crudsuite.services.auth import create_access_token, hash_password

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
async def mock_db(tmp_path, monkeypatch):
    """Fresh in-memory Mongo per test; uploads go to a temp dir."""
    client = AsyncMongoMockClient()
    mongo.set_mongo_client(client)
    mongo.select_database("crudsuite_test")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    await mongo.ensure_indexes()
    yield mongo.get_db()
    mongo.select_database(None)
    mongo.set_mongo_client(None)


def _client(deployment: Deployment) -> AsyncClient:
    # ASGITransport does not run startup, the mock client is already in place
    transport = ASGITransport(app=create_app(deployment))
    return AsyncClient(transport=transport, base_url="http://testserver")


@pytest.fixture
async def shop():
    async with _client(Deployment.SHOP) as ac:
        yield ac


@pytest.fixture
async def quiz_app():
    async with _client(Deployment.QUIZ) as ac:
        yield ac


@pytest.fixture
async def jobs_app():
    async with _client(Deployment.JOBS) as ac:
        yield ac


def auth(user: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def headers_for():
    return auth


@pytest.fixture
def make_user():
    """Create a stored user directly; returns (user, auth headers)."""
    async def _make(role: str = "user", name: str = "Test User", email: str = None, **extra):
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@example.com"
        user = await users_repo.create_user(name, email, hash_password(PASSWORD), role, extra)
        return user, auth(user)
    return _make


@pytest.fixture
def make_product():
    async def _make(name: str = "Leather Belt", price: float = 79.99, stock: int = 70, category: str = "accessories", **extra):
        fields = {"name": name, "category": category, "price": price, "stock": stock}
        fields.update(extra)
        return await products_repo.create_product(fields)
    return _make


SHIPPING = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address": "12 Analytical St",
    "city": "London",
    "zip": "N1 9GU",
    "country": "UK",
}
PAYMENT = {"card_number": "4242 4242 4242 4242", "card_name": "Ada Lovelace"}


@pytest.fixture
def order_body():
    def _body(*lines):
        return {
            "items": [{"product_id": pid, "quantity": qty} for pid, qty in lines],
            "shipping_info": SHIPPING,
            "payment_info": PAYMENT,
        }
    return _body
