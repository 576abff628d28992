"""Shared fixtures: test settings, a throwaway SQLite store, upstream fakes and an API client."""

from __future__ import annotations

import time
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from services.order_service.dependencies import get_order_service
from services.order_service.main import order_app
from services.order_service.schemas import Product, Profile
from services.order_service.service import OrderService
from shared.config.database import create_schema, get_db
from shared.config.settings import get_settings
from shared.security import limiter

JWT_SECRET = "test-secret-do-not-use-in-production"


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch):
    """Points settings at test values and clears cached state between tests."""
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("USER_SERVICE_URL", "http://users.test/graphql")
    monkeypatch.setenv("PRODUCT_SERVICE_URL", "http://products.test/graphql")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()


def make_token(user_id: str = "u1", role: str = "user", secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    payload = {"id": user_id, "role": role, "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture()
def token_factory():
    return make_token


class FakeIdentityClient:
    """Maps tokens to profiles; unknown tokens are rejected like the real user service would."""

    def __init__(self):
        self.profiles: dict[str, Profile] = {}
        self.calls: list[str] = []

    def register(self, token: str, **fields) -> None:
        self.profiles[token] = Profile(**fields)

    async def fetch_profile(self, token: str) -> Profile | None:
        self.calls.append(token)
        return self.profiles.get(token)


class FakeCatalogClient:
    def __init__(self):
        self.products: dict[str, Product] = {}
        self.calls: list[str] = []

    def add(self, product_id: str, name: str, price: str, stock: int) -> None:
        self.products[product_id] = Product(id=product_id, name=name, price=Decimal(price), stock=stock)

    async def fetch_product(self, product_id: str) -> Product | None:
        self.calls.append(product_id)
        return self.products.get(product_id)


@pytest.fixture()
def identity() -> FakeIdentityClient:
    return FakeIdentityClient()


@pytest.fixture()
def catalog() -> FakeCatalogClient:
    fake = FakeCatalogClient()
    fake.add("p1", "Mechanical Keyboard", "10.00", 5)
    return fake


@pytest.fixture()
def order_service(identity: FakeIdentityClient, catalog: FakeCatalogClient) -> OrderService:
    return OrderService(identity=identity, catalog=catalog)


@pytest_asyncio.fixture()
async def sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    await create_schema(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest_asyncio.fixture()
async def api(sessionmaker, order_service: OrderService):
    """HTTP client against the order app, wired to the test store and upstream fakes."""

    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    order_app.dependency_overrides[get_db] = override_get_db
    order_app.dependency_overrides[get_order_service] = lambda: order_service
    transport = httpx.ASGITransport(app=order_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    order_app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    """Builds an Authorization header for a freshly minted token."""

    def _headers(user_id: str = "u1", role: str = "user", **kwargs) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, role, **kwargs)}"}

    return _headers
