from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator

from salesdesk.app.schemas.common import CamelModel, Money


class ProductTypeCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None


class ProductTypeUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None


class ProductTypeOut(CamelModel):
    id: UUID
    name: str
    description: str | None
    created_at: datetime | None


class ProductCreate(CamelModel):
    name: str = Field(min_length=1)
    price: Decimal
    unit: str = Field(min_length=1)
    type: UUID
    stock: int | None = None

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price must be non-negative")
        return v

    @field_validator("stock")
    @classmethod
    def stock_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("Stock must be non-negative")
        return v


class ProductUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    price: Decimal | None = None
    unit: str | None = Field(default=None, min_length=1)
    type: UUID | None = None
    stock: int | None = None

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Price must be non-negative")
        return v

    @field_validator("stock")
    @classmethod
    def stock_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("Stock must be non-negative")
        return v


class ProductOut(CamelModel):
    id: UUID
    name: str
    price: Money
    unit: str
    product_type: ProductTypeOut = Field(
        validation_alias="product_type", serialization_alias="type"
    )
    stock: int | None
    created_by: UUID | None
    created_at: datetime | None
