"""Role-based access dependencies.

Usage in endpoints::

    @router.post("/")
    def create_product(
        body: ProductCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_role(RoleEnum.ADMIN)),
    ):
        ...
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.models.user import RoleEnum, User


def require_role(*roles: RoleEnum):
    """FastAPI dependency factory: the user must hold **one** of *roles*.

    Returns the authenticated ``User`` so the endpoint can use it::

        current_user = Depends(require_role(RoleEnum.ADMIN, RoleEnum.SUPERVISOR))
    """
    allowed = set(roles)

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return current_user

    return _checker


require_admin = require_role(RoleEnum.ADMIN)
require_staff = require_role(RoleEnum.ADMIN, RoleEnum.SUPERVISOR)
