from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from salesdesk.app.api.deps import get_current_user, oauth2_scheme
from salesdesk.app.core.config import settings
from salesdesk.app.core.database import get_db
from salesdesk.app.core.security import create_access_token, revoke_token
from salesdesk.app.middleware.rate_limit import InMemoryRateLimiter
from salesdesk.app.models.user import User
from salesdesk.app.schemas.auth import (
    ActiveUsersOut,
    LoginRequest,
    LoginResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RegisterRequest,
    UserOut,
    UserStatsOut,
)
from salesdesk.app.schemas.common import MessageOut
from salesdesk.app.services.user_management import (
    authenticate,
    count_active_users,
    get_user_stats,
    register_user,
    update_profile,
)

router = APIRouter()

# ─── Rate Limiting ───────────────────────────────────────────────────────────
# In-memory per-IP rate limiter. For multi-replica, use Redis.
_login_limiter = InMemoryRateLimiter(
    window_seconds=settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
    max_attempts=settings.LOGIN_RATE_LIMIT_ATTEMPTS,
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _issue_token(user: User) -> str:
    return create_access_token(subject=str(user.id), role=user.role.value)


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> dict[str, str]:
    register_user(
        db,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        role=payload.role,
    )
    return {"message": "User created"}


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict[str, object]:
    ip = _client_ip(request)
    _login_limiter.check(ip)
    user = authenticate(db, email=payload.email, password=payload.password, ip_address=ip)
    return {"token": _issue_token(user), "user": user}


@router.post("/token")
def login_access_token(
    request: Request,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> dict[str, str]:
    """OAuth2 password flow for the interactive docs; username is the email."""
    ip = _client_ip(request)
    _login_limiter.check(ip)
    user = authenticate(
        db, email=form_data.username.strip().lower(), password=form_data.password, ip_address=ip
    )
    return {"access_token": _issue_token(user), "token_type": "bearer"}


# ─── Logout ──────────────────────────────────────────────────────────────────


@router.post("/logout", response_model=MessageOut)
def logout(token: str = Depends(oauth2_scheme)) -> dict[str, str]:
    """Invalidate the current access token."""
    revoke_token(token)
    return {"message": "Logged out successfully"}


# ─── Profile ─────────────────────────────────────────────────────────────────


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/profile", response_model=ProfileUpdateResponse)
def profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, object]:
    user = update_profile(
        db,
        user_id=current_user.id,
        name=payload.name,
        email=payload.email,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"message": "Profile updated successfully", "user": user}


@router.get("/user-stats", response_model=UserStatsOut)
def user_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, int]:
    return get_user_stats(db, current_user.id)


@router.get("/active-users", response_model=ActiveUsersOut)
def active_users(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> dict[str, int]:
    return {"active_users": count_active_users(db)}
