"""User accounts: registration, login, profile and activity stats.

Mutations are audit-logged. Functions that change state commit their own
transaction, mirroring the request-per-unit-of-work model of the API.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from salesdesk.app.core.dates import day_window, local_today, utcnow
from salesdesk.app.core.exceptions import (
    AuthenticationFailed,
    DuplicateKey,
    NotFound,
    PermissionDenied,
    SalesError,
)
from salesdesk.app.core.security import get_password_hash, verify_password
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product
from salesdesk.app.models.invoice import Invoice
from salesdesk.app.models.user import RoleEnum, User
from salesdesk.app.services.audit import log_action

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def register_user(
    db: Session,
    *,
    email: str,
    password: str,
    name: str | None = None,
    role: RoleEnum | None = None,
) -> User:
    """Create an account. Defaults to supervisor.

    The admin role can only be self-assigned while no user exists yet; later
    admins are created with ``python -m salesdesk.create_admin``.
    """
    if get_user_by_email(db, email):
        raise DuplicateKey("Email already used")

    role = role or RoleEnum.SUPERVISOR
    if role == RoleEnum.ADMIN and db.query(User.id).first() is not None:
        raise PermissionDenied("Admin accounts cannot be self-registered")

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.flush()

    log_action(
        db,
        user_id=user.id,
        action="USER_REGISTERED",
        resource_type="users",
        resource_id=user.id,
        changes={"email": email, "role": role},
    )
    db.commit()
    db.refresh(user)
    return user


def authenticate(
    db: Session, *, email: str, password: str, ip_address: str | None = None
) -> User:
    """Verify credentials and stamp ``last_login``."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        log_action(
            db,
            user_id=user.id if user else None,
            action="LOGIN_FAILED",
            resource_type="auth",
            resource_id=email,
            ip_address=ip_address,
            changes={"reason": "invalid_credentials"},
        )
        db.commit()
        raise AuthenticationFailed("Invalid credentials")

    if not user.is_active:
        raise PermissionDenied("Inactive user")

    user.last_login = utcnow()
    log_action(
        db,
        user_id=user.id,
        action="LOGIN_SUCCESS",
        resource_type="auth",
        resource_id=user.id,
        ip_address=ip_address,
        changes={"email": user.email, "role": user.role},
    )
    db.commit()
    db.refresh(user)
    return user


def update_profile(
    db: Session,
    *,
    user_id: UUID,
    name: str | None = None,
    email: str | None = None,
    current_password: str | None = None,
    new_password: str | None = None,
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")

    changes: dict[str, object] = {}

    if name:
        changes["name"] = {"old": user.name, "new": name}
        user.name = name

    if email and email != user.email:
        existing = db.query(User).filter(
            func.lower(User.email) == email.lower(),
            User.id != user.id,
        ).first()
        if existing:
            raise DuplicateKey("Email already in use")
        changes["email"] = {"old": user.email, "new": email}
        user.email = email

    if new_password:
        if not current_password:
            raise SalesError("Current password is required")
        if not verify_password(current_password, user.hashed_password):
            raise SalesError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        changes["password"] = "changed"

    if changes:
        log_action(
            db,
            user_id=user.id,
            action="PROFILE_UPDATED",
            resource_type="users",
            resource_id=user.id,
            changes=changes,
        )
    db.commit()
    db.refresh(user)
    return user


def get_user_stats(db: Session, user_id: UUID) -> dict[str, int]:
    """How much the user has created: invoices, customers, products."""

    def _count(model: type) -> int:
        return (
            db.query(func.count(model.id)).filter(model.created_by == user_id).scalar()
            or 0
        )

    return {
        "invoices_created": _count(Invoice),
        "customers_added": _count(Customer),
        "products_managed": _count(Product),
    }


def count_active_users(db: Session, now: datetime | None = None) -> int:
    """Users who logged in, or were created, since the start of today."""
    start, _ = day_window(local_today(now))
    return (
        db.query(func.count(User.id))
        .filter(or_(User.last_login >= start, User.created_at >= start))
        .scalar()
        or 0
    )
