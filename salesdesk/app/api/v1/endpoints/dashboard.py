from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.core.database import get_db
from salesdesk.app.models.user import User
from salesdesk.app.schemas.dashboard import DashboardSummaryOut
from salesdesk.app.services.dashboard import get_dashboard_summary

router = APIRouter()


@router.get("/summary", response_model=DashboardSummaryOut)
def summary(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> dict[str, object]:
    return get_dashboard_summary(db)
