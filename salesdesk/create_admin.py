"""One-time script to create (or reset) an admin user.

Usage:
    python -m salesdesk.create_admin
"""

from __future__ import annotations

import getpass

from salesdesk.app.core.database import SessionLocal
from salesdesk.app.core.security import get_password_hash

# Import all models so SQLAlchemy resolves relationships
import salesdesk.app.models.registry  # noqa: F401

from salesdesk.app.models.user import RoleEnum, User
from salesdesk.app.services.user_management import get_user_by_email

MIN_PASSWORD_LENGTH = 6


def main() -> None:
    email = input("Email [admin@example.com]: ").strip().lower() or "admin@example.com"
    name = input("Name [Administrator]: ").strip() or "Administrator"
    password = getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, email)
        if existing:
            existing.hashed_password = get_password_hash(password)
            existing.role = RoleEnum.ADMIN
            existing.is_active = True
            db.commit()
            print("Admin user already exists, password reset.")
            print(f"  ID:    {existing.id}")
            print(f"  Email: {email}")
            return

        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=RoleEnum.ADMIN,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        print("Admin user created successfully!")
        print(f"  ID:    {user.id}")
        print(f"  Email: {email}")
        print("  Role:  admin")
    finally:
        db.close()


if __name__ == "__main__":
    main()
