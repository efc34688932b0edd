from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from salesdesk.app.schemas.common import CamelModel


class CustomerCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str | None = None


class CustomerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    address: str | None = None


class CustomerOut(CamelModel):
    id: UUID
    name: str
    phone: str
    address: str | None
    created_by: UUID | None
    created_at: datetime | None
