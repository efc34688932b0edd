"""Invoice creation workflow and invoice listing.

``create_invoice`` runs every step inside one database transaction:

    1. resolve the customer and every product (InvalidReference)
    2. check availability of stock-tracked products (InsufficientStock)
    3. price each line, then subtotal → discount → total (never negative)
    4. mint ``INV-YYYYMMDD-SEQ`` from the per-day counter
    5. persist the invoice with line snapshots (name, unit, price at sale)
    6. decrement stock with ``UPDATE … WHERE stock >= qty`` per line

Any failure rolls the whole unit back, including the counter increment and
already-applied decrements, so Product and Invoice state never diverge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from salesdesk.app.core.dates import utcnow
from salesdesk.app.core.exceptions import (
    DuplicateKey,
    InsufficientStock,
    InvalidReference,
    ValidationError,
)
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product
from salesdesk.app.models.invoice import DiscountType, Invoice, InvoiceItem
from salesdesk.app.models.user import RoleEnum, User
from salesdesk.app.schemas.invoice import DiscountIn, InvoiceItemIn
from salesdesk.app.services.audit import log_action
from salesdesk.app.services.invoice import generate_invoice_id

logger = logging.getLogger(__name__)

Q = Decimal("0.0001")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass
class _Line:
    product: Product
    price: Decimal
    quantity: int

    @property
    def total(self) -> Decimal:
        return (self.price * self.quantity).quantize(Q, rounding=ROUND_HALF_UP)


def compute_discount_amount(
    subtotal: Decimal, discount_type: DiscountType, value: Decimal
) -> Decimal:
    """Percentage of *subtotal* or a literal amount; zero when *value* is zero."""
    if not value:
        return ZERO
    if discount_type == DiscountType.PERCENTAGE:
        amount = subtotal * value / HUNDRED
    else:
        amount = value
    return amount.quantize(Q, rounding=ROUND_HALF_UP)


def compute_totals(
    line_totals: list[Decimal], discount_type: DiscountType, value: Decimal
) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(subtotal, discount_amount, total_amount)``."""
    subtotal = sum(line_totals, ZERO)
    discount_amount = compute_discount_amount(subtotal, discount_type, value)
    total_amount = max(ZERO, subtotal - discount_amount)
    return subtotal, discount_amount, total_amount


def _resolve_lines(db: Session, items: list[InvoiceItemIn]) -> list[_Line]:
    lines: list[_Line] = []
    for item in items:
        product = db.query(Product).filter(Product.id == item.product).first()
        if not product:
            raise InvalidReference("product", item.product)

        if product.stock is not None and product.stock < item.quantity:
            raise InsufficientStock(product.name, product.stock, item.quantity)

        price = item.price if item.price is not None else Decimal(str(product.price))
        lines.append(_Line(product=product, price=price, quantity=item.quantity))
    return lines


def _decrement_stock(db: Session, product: Product, quantity: int) -> None:
    result = db.execute(
        update(Product)
        .where(
            Product.id == product.id,
            Product.stock.is_not(None),
            Product.stock >= quantity,
        )
        .values(stock=Product.stock - quantity)
    )
    if result.rowcount == 0:
        db.refresh(product, ["stock"])
        raise InsufficientStock(product.name, product.stock or 0, quantity)


def create_invoice(
    db: Session,
    *,
    customer_id: UUID,
    items: list[InvoiceItemIn],
    created_by: User,
    discount: DiscountIn | None = None,
    now: datetime | None = None,
    ip_address: str | None = None,
) -> Invoice:
    """Validate, price, number and persist an invoice; adjust stock.

    Raises ``InvalidReference``, ``InsufficientStock``, ``ValidationError`` or
    ``DuplicateKey``. Nothing is persisted when any of them is raised.
    """
    try:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise InvalidReference("customer", customer_id)

        if not items:
            raise ValidationError("Invoice must have at least one item", field="items")

        lines = _resolve_lines(db, items)

        discount = discount or DiscountIn()
        subtotal, discount_amount, total_amount = compute_totals(
            [line.total for line in lines], discount.type, discount.value
        )

        now = (now or utcnow()).astimezone(timezone.utc)
        invoice = Invoice(
            invoice_id=generate_invoice_id(db, now),
            customer_id=customer.id,
            discount_type=discount.type,
            discount_value=discount.value,
            subtotal=subtotal,
            discount_amount=discount_amount,
            total_amount=total_amount,
            created_by=created_by.id,
            created_at=now,
            items=[
                InvoiceItem(
                    position=position,
                    product_id=line.product.id,
                    name=line.product.name,
                    unit=line.product.unit,
                    price=line.price,
                    quantity=line.quantity,
                )
                for position, line in enumerate(lines)
            ],
        )
        db.add(invoice)
        db.flush()

        for line in lines:
            if line.product.stock is not None:
                _decrement_stock(db, line.product, line.quantity)

        log_action(
            db,
            user_id=created_by.id,
            action="INVOICE_CREATED",
            resource_type="invoices",
            resource_id=invoice.invoice_id,
            ip_address=ip_address,
            changes={
                "customer_id": customer.id,
                "item_count": len(lines),
                "discount": {"type": discount.type, "value": discount.value},
                "subtotal": subtotal,
                "discount_amount": discount_amount,
                "total_amount": total_amount,
            },
        )
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Invoice persistence hit a uniqueness conflict: %s", exc.orig)
        raise DuplicateKey("Invoice could not be saved, please retry") from exc
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(
        "Created invoice %s for customer %s (total %s)",
        invoice.invoice_id,
        customer_id,
        total_amount,
    )
    return invoice


def list_invoices(db: Session, viewer: User) -> list[Invoice]:
    """Admins see every invoice; supervisors only the ones they created."""
    query = db.query(Invoice).options(
        joinedload(Invoice.customer),
        joinedload(Invoice.creator),
        selectinload(Invoice.items),
    )
    if viewer.role == RoleEnum.SUPERVISOR:
        query = query.filter(Invoice.created_by == viewer.id)
    return query.order_by(Invoice.created_at.desc()).all()
