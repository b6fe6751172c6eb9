"""Shared test fixtures.

Drafts are stored in a private in-memory SQLite database per test, and the
REST backend is replaced by an ``httpx.MockTransport`` serving a small
in-memory catalog.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import json
from decimal import Decimal
from typing import Any, Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shoplytics.app.api.deps import get_backend_client, get_checkout_session
from shoplytics.app.core.database import Base, get_db
from shoplytics.app.core.security import create_access_token
from shoplytics.app.main import app
from shoplytics.app.models.kv_store import KeyValueEntry  # noqa: F401
from shoplytics.app.schemas.catalog import CatalogProduct
from shoplytics.app.services.backend_client import BackendClient
from shoplytics.app.services.checkout import CheckoutSession
from shoplytics.app.services.money import Money

BACKEND_URL = "http://backend.test/api"


# ─── Catalog helpers ──────────────────────────────────────────────────────────


def make_product(
    product_id: str,
    price: str = "100.00",
    quantity: int = 10,
    name: str | None = None,
    category: str = "Grocery",
) -> CatalogProduct:
    return CatalogProduct(
        id=product_id,
        name=name or f"Product {product_id}",
        selling_price=Decimal(price),
        category=category,
        quantity=quantity,
    )


def money(amount: str) -> Money:
    return Money.from_major(amount)


# ─── Fake REST backend ────────────────────────────────────────────────────────


class FakeBackend:
    """In-memory stand-in for the catalog, customer and transaction services."""

    def __init__(self) -> None:
        self.products: dict[str, dict[str, Any]] = {}
        self.customers: dict[str, dict[str, Any]] = {}
        self.transactions: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.transaction_failure: tuple[int, dict[str, Any]] | None = None

    def add_product(self, product_id: str, price: str, quantity: int, name: str | None = None) -> None:
        self.products[product_id] = {
            "id": product_id,
            "name": name or f"Product {product_id}",
            "sellingPrice": price,
            "category": "Grocery",
            "quantity": quantity,
        }

    def add_customer(self, customer_id: str, name: str) -> None:
        self.customers[customer_id] = {
            "id": customer_id,
            "name": name,
            "email": f"{customer_id}@example.com",
            "phone": "9876543210",
        }

    @staticmethod
    def _ok(data: Any, status_code: int = 200) -> httpx.Response:
        return httpx.Response(status_code, json={"success": True, "data": data})

    @staticmethod
    def _error(status_code: int, code: str, message: str) -> httpx.Response:
        return httpx.Response(
            status_code,
            json={"success": False, "error": {"code": code, "message": message}},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        parts = [p for p in path.split("/") if p]

        if parts == ["products"] and request.method == "GET":
            return self._ok(list(self.products.values()))
        if len(parts) == 2 and parts[0] == "products" and request.method == "GET":
            product = self.products.get(parts[1])
            if product is None:
                return self._error(404, "NOT_FOUND", "Product not found")
            return self._ok(product)

        if parts == ["customers"] and request.method == "GET":
            return self._ok(list(self.customers.values()))
        if parts == ["customers"] and request.method == "POST":
            body = json.loads(request.content)
            customer_id = f"cust-{len(self.customers) + 1}"
            self.customers[customer_id] = {"id": customer_id, **body}
            return self._ok(self.customers[customer_id], status_code=201)
        if len(parts) == 2 and parts[0] == "customers" and request.method == "GET":
            customer = self.customers.get(parts[1])
            if customer is None:
                return self._error(404, "NOT_FOUND", "Customer not found")
            return self._ok(customer)

        if parts == ["transactions"] and request.method == "POST":
            if self.transaction_failure is not None:
                status_code, body = self.transaction_failure
                return httpx.Response(status_code, json=body)
            body = json.loads(request.content)
            self.transactions.append(body)
            return self._ok({"id": f"txn-{len(self.transactions)}", **body}, status_code=201)

        return self._error(404, "NOT_FOUND", f"No route for {request.method} {path}")


@pytest.fixture()
def backend() -> FakeBackend:
    fake = FakeBackend()
    fake.add_product("A", "100.00", 5, name="Basmati Rice 1kg")
    fake.add_product("B", "50.00", 3, name="Toor Dal 500g")
    fake.add_product("Z", "20.00", 0, name="Sold Out Soap")
    fake.add_customer("cust-42", "Asha Verma")
    return fake


@pytest.fixture()
def backend_client(backend: FakeBackend) -> BackendClient:
    return BackendClient(
        token="test-token",
        base_url=BACKEND_URL,
        transport=httpx.MockTransport(backend.handler),
    )


# ─── Draft storage ────────────────────────────────────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """A fresh in-memory database holding only the kv_store table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()
    engine.dispose()


# ─── Terminal API ─────────────────────────────────────────────────────────────


@pytest.fixture()
def checkout_session() -> CheckoutSession:
    return CheckoutSession()


@pytest.fixture()
def client(
    db: Session,
    checkout_session: CheckoutSession,
    backend: FakeBackend,
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test database, session and fake backend."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    def _override_backend_client() -> BackendClient:
        return BackendClient(
            token="test-token",
            base_url=BACKEND_URL,
            transport=httpx.MockTransport(backend.handler),
        )

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_checkout_session] = lambda: checkout_session
    app.dependency_overrides[get_backend_client] = _override_backend_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def cashier_token() -> str:
    return create_access_token("emp-1", "CASHIER", token_type="employee")


@pytest.fixture()
def owner_token() -> str:
    return create_access_token("user-1", "OWNER")


def auth(token: str) -> dict[str, str]:
    """Return Authorization header dict."""
    return {"Authorization": f"Bearer {token}"}
