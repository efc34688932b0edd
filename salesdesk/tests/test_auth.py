"""Tests for registration, login, profile and user activity endpoints."""
from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from salesdesk.app.core.exceptions import AuthenticationFailed, DuplicateKey, PermissionDenied
from salesdesk.app.core.security import verify_password
from salesdesk.app.models.audit import AuditLog
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product
from salesdesk.app.models.user import RoleEnum, User
from salesdesk.app.schemas.invoice import InvoiceItemIn
from salesdesk.app.services.sales import create_invoice
from salesdesk.app.services.user_management import (
    authenticate,
    count_active_users,
    get_user_stats,
    register_user,
)
from salesdesk.tests.conftest import auth


# ─── Service ─────────────────────────────────────────────────────────────────


class TestRegisterUser:
    def test_defaults_to_supervisor(self, db: Session, admin_user: User) -> None:
        user = register_user(db, email="new@test.com", password="secret1")
        assert user.role == RoleEnum.SUPERVISOR
        assert verify_password("secret1", user.hashed_password)

    def test_first_user_may_be_admin(self, db: Session) -> None:
        user = register_user(db, email="boss@test.com", password="secret1", role=RoleEnum.ADMIN)
        assert user.role == RoleEnum.ADMIN

    def test_later_admin_self_registration_is_denied(
        self, db: Session, supervisor_user: User
    ) -> None:
        with pytest.raises(PermissionDenied):
            register_user(db, email="sneaky@test.com", password="secret1", role=RoleEnum.ADMIN)

    def test_duplicate_email(self, db: Session, admin_user: User) -> None:
        with pytest.raises(DuplicateKey, match="Email already used"):
            register_user(db, email="ADMIN@test.com", password="secret1")


class TestAuthenticate:
    def test_success_stamps_last_login(self, db: Session, admin_user: User) -> None:
        user = authenticate(db, email="admin@test.com", password="secret1")
        assert user.id == admin_user.id
        assert user.last_login is not None
        assert db.query(AuditLog).filter(AuditLog.action == "LOGIN_SUCCESS").count() == 1

    def test_wrong_password_is_audited(self, db: Session, admin_user: User) -> None:
        with pytest.raises(AuthenticationFailed, match="Invalid credentials"):
            authenticate(db, email="admin@test.com", password="nope")
        assert db.query(AuditLog).filter(AuditLog.action == "LOGIN_FAILED").count() == 1

    def test_inactive_user(self, db: Session, admin_user: User) -> None:
        admin_user.is_active = False
        db.commit()
        with pytest.raises(PermissionDenied):
            authenticate(db, email="admin@test.com", password="secret1")


class TestUserActivity:
    def test_stats_count_what_the_user_created(
        self,
        db: Session,
        supervisor_user: User,
        customer: Customer,
        product: Product,
    ) -> None:
        customer.created_by = supervisor_user.id
        product.created_by = supervisor_user.id
        db.commit()
        create_invoice(
            db,
            customer_id=customer.id,
            items=[InvoiceItemIn(product=product.id, quantity=1, price=Decimal("5"))],
            created_by=supervisor_user,
        )

        assert get_user_stats(db, supervisor_user.id) == {
            "invoices_created": 1,
            "customers_added": 1,
            "products_managed": 1,
        }

    def test_active_users_counts_todays_logins(self, db: Session, admin_user: User) -> None:
        authenticate(db, email="admin@test.com", password="secret1")
        assert count_active_users(db) >= 1


# ─── API ─────────────────────────────────────────────────────────────────────


class TestAuthAPI:
    def test_register_then_login(self, client: TestClient, admin_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/register",
            json={"name": "Sam", "email": "Sam@Test.com", "password": "hunter22"},
        )
        assert resp.status_code == 201
        assert resp.json() == {"message": "User created"}

        resp = client.post(
            "/api/v1/auth/login", json={"email": "sam@test.com", "password": "hunter22"}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["token"]
        assert body["user"]["email"] == "sam@test.com"
        assert body["user"]["role"] == "supervisor"

    def test_register_duplicate_email(self, client: TestClient, admin_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "admin@test.com", "password": "hunter22"},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email already used"

    def test_register_short_password(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/auth/register", json={"email": "x@test.com", "password": "123"}
        )
        assert resp.status_code == 422

    def test_login_bad_credentials(self, client: TestClient, admin_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/login", json={"email": "admin@test.com", "password": "wrong"}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid credentials"

    def test_login_is_rate_limited(self, client: TestClient, admin_user: User) -> None:
        codes = [
            client.post(
                "/api/v1/auth/login", json={"email": "admin@test.com", "password": "wrong"}
            ).status_code
            for _ in range(11)
        ]
        assert codes[:10] == [400] * 10
        assert codes[10] == 429

    def test_token_form_flow(self, client: TestClient, admin_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/token",
            data={"username": "admin@test.com", "password": "secret1"},
        )
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"

    def test_me(self, client: TestClient, admin_token: str) -> None:
        resp = client.get("/api/v1/auth/me", headers=auth(admin_token))
        assert resp.status_code == 200
        assert resp.json()["email"] == "admin@test.com"
        assert resp.json()["role"] == "admin"

    def test_logout_revokes_token(self, client: TestClient, supervisor_token: str) -> None:
        assert client.post("/api/v1/auth/logout", headers=auth(supervisor_token)).status_code == 200
        assert client.get("/api/v1/auth/me", headers=auth(supervisor_token)).status_code == 401

    def test_garbage_token(self, client: TestClient) -> None:
        assert client.get("/api/v1/auth/me", headers=auth("not-a-jwt")).status_code == 401

    def test_profile_update_name_and_password(
        self, client: TestClient, db: Session, admin_user: User, admin_token: str
    ) -> None:
        resp = client.put(
            "/api/v1/auth/profile",
            json={"name": "Root", "currentPassword": "secret1", "newPassword": "better-pass"},
            headers=auth(admin_token),
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Root"
        db.refresh(admin_user)
        assert verify_password("better-pass", admin_user.hashed_password)

    def test_profile_password_change_needs_current(
        self, client: TestClient, admin_token: str
    ) -> None:
        resp = client.put(
            "/api/v1/auth/profile",
            json={"newPassword": "better-pass"},
            headers=auth(admin_token),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Current password is required"

        resp = client.put(
            "/api/v1/auth/profile",
            json={"currentPassword": "wrong", "newPassword": "better-pass"},
            headers=auth(admin_token),
        )
        assert resp.json()["message"] == "Current password is incorrect"

    def test_profile_email_taken(
        self, client: TestClient, admin_token: str, supervisor_user: User
    ) -> None:
        resp = client.put(
            "/api/v1/auth/profile",
            json={"email": "supervisor@test.com"},
            headers=auth(admin_token),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email already in use"

    def test_user_stats_and_active_users(self, client: TestClient, admin_token: str) -> None:
        stats = client.get("/api/v1/auth/user-stats", headers=auth(admin_token)).json()
        assert stats == {"invoicesCreated": 0, "customersAdded": 0, "productsManaged": 0}

        resp = client.get("/api/v1/auth/active-users", headers=auth(admin_token))
        assert resp.status_code == 200
        assert resp.json()["activeUsers"] >= 1
