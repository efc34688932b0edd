from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator

from salesdesk.app.models.invoice import DiscountType, Invoice
from salesdesk.app.schemas.auth import UserOut
from salesdesk.app.schemas.common import CamelModel, Money
from salesdesk.app.schemas.customer import CustomerOut


# ─── Request ──────────────────────────────────────────────────────────────────


class InvoiceItemIn(CamelModel):
    product: UUID
    quantity: int = Field(gt=0)
    price: Decimal | None = None

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Price must be non-negative")
        return v


class DiscountIn(CamelModel):
    type: DiscountType = DiscountType.FIXED
    value: Decimal = Decimal("0")

    @field_validator("value")
    @classmethod
    def value_non_negative(cls, v: Decimal) -> Decimal:
        # Percentages above 100 are allowed; the invoice total clamps to 0
        if v < 0:
            raise ValueError("Discount value must be non-negative")
        return v


class InvoiceCreate(CamelModel):
    customer: UUID
    items: list[InvoiceItemIn] = Field(min_length=1)
    discount: DiscountIn | None = None


# ─── Response ─────────────────────────────────────────────────────────────────


class InvoiceItemOut(CamelModel):
    product: UUID | None = Field(validation_alias="product_id", serialization_alias="product")
    name: str
    unit: str | None
    price: Money
    quantity: int


class DiscountOut(CamelModel):
    type: DiscountType
    value: Money


class InvoiceOut(CamelModel):
    id: UUID
    invoice_id: str
    created_at: datetime
    customer: UUID
    items: list[InvoiceItemOut]
    discount: DiscountOut
    subtotal: Money
    discount_amount: Money
    total_amount: Money
    created_by: UUID | None

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceOut":
        return cls(
            id=invoice.id,
            invoice_id=invoice.invoice_id,
            created_at=invoice.created_at,
            customer=invoice.customer_id,
            items=[InvoiceItemOut.model_validate(item) for item in invoice.items],
            discount=DiscountOut(
                type=invoice.discount_type, value=invoice.discount_value
            ),
            subtotal=invoice.subtotal,
            discount_amount=invoice.discount_amount,
            total_amount=invoice.total_amount,
            created_by=invoice.created_by,
        )


class InvoiceDetailOut(InvoiceOut):
    """Invoice with customer and creator expanded to full records."""

    customer: CustomerOut  # type: ignore[assignment]
    created_by: UserOut | None  # type: ignore[assignment]

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceDetailOut":
        base = InvoiceOut.from_invoice(invoice)
        return cls(
            **base.model_dump(exclude={"customer", "created_by", "items", "discount"}),
            items=base.items,
            discount=base.discount,
            customer=CustomerOut.model_validate(invoice.customer),
            created_by=(
                UserOut.model_validate(invoice.creator) if invoice.creator else None
            ),
        )
