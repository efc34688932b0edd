"""Shared test fixtures.

Each test runs inside an outer DB transaction that is rolled back after the
test completes; service-level ``commit()``/``rollback()`` calls only touch a
SAVEPOINT, so tests never pollute each other.  Fixtures commit (release
their SAVEPOINT) so their rows survive a service-level rollback.
"""

from __future__ import annotations

import os

# Must be set before the app (and its engine) is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from salesdesk.app.api.v1.endpoints.auth import _login_limiter
from salesdesk.app.core.database import Base, engine, get_db
from salesdesk.app.core.security import create_access_token, get_password_hash
from salesdesk.app.main import app
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product, ProductType
from salesdesk.app.models.user import RoleEnum, User


# ─── Schema ──────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _reset_login_limiter() -> None:
    _login_limiter.reset()


# ─── DB session that rolls back after every test ──────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Yield a DB session bound to an outer transaction; rolled back after the test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the transactional test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Auth helpers ─────────────────────────────────────────────────────────────


def _make_user(db: Session, email: str, role: RoleEnum, password: str = "secret1") -> User:
    user = User(
        name=email.split("@")[0],
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def admin_user(db: Session) -> User:
    return _make_user(db, "admin@test.com", RoleEnum.ADMIN)


@pytest.fixture()
def supervisor_user(db: Session) -> User:
    return _make_user(db, "supervisor@test.com", RoleEnum.SUPERVISOR)


@pytest.fixture()
def other_supervisor(db: Session) -> User:
    return _make_user(db, "other@test.com", RoleEnum.SUPERVISOR)


@pytest.fixture()
def admin_token(admin_user: User) -> str:
    return create_access_token(subject=str(admin_user.id), role=admin_user.role.value)


@pytest.fixture()
def supervisor_token(supervisor_user: User) -> str:
    return create_access_token(
        subject=str(supervisor_user.id), role=supervisor_user.role.value
    )


def auth(token: str) -> dict[str, str]:
    """Return Authorization header dict."""
    return {"Authorization": f"Bearer {token}"}


# ─── Catalog fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def product_type(db: Session) -> ProductType:
    pt = ProductType(name="Hardware", description="Tools and parts")
    db.add(pt)
    db.commit()
    return pt


@pytest.fixture()
def product(db: Session, product_type: ProductType) -> Product:
    """Stock-tracked: price 100, 10 pieces on hand."""
    p = Product(
        name="Hammer",
        price=Decimal("100"),
        unit="piece",
        type_id=product_type.id,
        stock=10,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def service_product(db: Session, product_type: ProductType) -> Product:
    """Not stock-tracked."""
    p = Product(
        name="Installation",
        price=Decimal("50"),
        unit="hour",
        type_id=product_type.id,
        stock=None,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def customer(db: Session) -> Customer:
    c = Customer(name="Acme Ltd", phone="0501234567", address="1 Main St")
    db.add(c)
    db.commit()
    return c
