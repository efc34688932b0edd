"""Audit trail rows for sign-ins, account changes and invoice creation.

``changes`` may hold domain values (``Decimal`` amounts, ``UUID`` ids,
enums, datetimes); they are stored as JSON strings so the row reads the
same on every database.
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from salesdesk.app.models.audit import AuditLog


def _to_json(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def log_action(
    db: Session,
    *,
    user_id: UUID | None,
    action: str,
    resource_type: str,
    resource_id: UUID | str,
    changes: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction (no commit here)."""
    entry = AuditLog(
        table_name=resource_type,
        record_id=str(resource_id),
        action=action,
        changed_by=user_id,
        new_values=_to_json(changes) if changes else None,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry
