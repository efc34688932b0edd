"""Dashboard aggregations over the invoice ledger.

All windows are computed in the business time zone (see
``salesdesk.app.core.dates``) and queried as UTC half-open intervals.
Every series has a fixed length and is ordered oldest first; empty
windows contribute ``0`` rather than being omitted.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from salesdesk.app.core.dates import (
    add_months,
    business_tz,
    day_window,
    local_today,
    month_window,
)
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product, ProductType
from salesdesk.app.models.invoice import Invoice, InvoiceItem

MONTHS_IN_TREND = 6
DAYS_IN_TREND = 7

Q = Decimal("0.0001")


def _money(value: object) -> Decimal:
    return Decimal(str(value or 0)).quantize(Q, rounding=ROUND_HALF_UP)


def revenue_between(db: Session, start: datetime, end: datetime) -> Decimal:
    """Sum of ``total_amount`` for invoices created in ``[start, end)``."""
    total = (
        db.query(func.coalesce(func.sum(Invoice.total_amount), 0))
        .filter(Invoice.created_at >= start, Invoice.created_at < end)
        .scalar()
    )
    return _money(total)


def todays_revenue(
    db: Session, now: datetime | None = None, tz: tzinfo | None = None
) -> Decimal:
    tz = tz or business_tz()
    return revenue_between(db, *day_window(local_today(now, tz), tz))


def monthly_sales(
    db: Session, now: datetime | None = None, tz: tzinfo | None = None
) -> dict[str, list]:
    """Revenue per calendar month for the last six months, current one included."""
    tz = tz or business_tz()
    today = local_today(now, tz)
    months: list[str] = []
    sales: list[Decimal] = []
    for offset in range(MONTHS_IN_TREND - 1, -1, -1):
        year, month = add_months(today.year, today.month, -offset)
        months.append(calendar.month_abbr[month])
        sales.append(revenue_between(db, *month_window(year, month, tz)))
    return {"months": months, "sales": sales}


def revenue_trend(
    db: Session, now: datetime | None = None, tz: tzinfo | None = None
) -> dict[str, list]:
    """Revenue per day for the last seven days, today included."""
    tz = tz or business_tz()
    today = local_today(now, tz)
    days: list[str] = []
    revenue: list[Decimal] = []
    for offset in range(DAYS_IN_TREND - 1, -1, -1):
        day = today - timedelta(days=offset)
        days.append(calendar.day_abbr[day.weekday()])
        revenue.append(revenue_between(db, *day_window(day, tz)))
    return {"days": days, "revenue": revenue}


def sales_by_product_type(db: Session) -> list[dict[str, object]]:
    """Line revenue (price × quantity) grouped by the product's type.

    Only line items are counted, never whole invoice totals, so a mixed
    invoice contributes to several types. Types without sales report 0;
    with no types configured the result is an empty list.
    """
    rows = (
        db.query(
            ProductType.name,
            func.coalesce(
                func.sum(InvoiceItem.price * InvoiceItem.quantity), 0
            ).label("revenue"),
        )
        .outerjoin(Product, Product.type_id == ProductType.id)
        .outerjoin(InvoiceItem, InvoiceItem.product_id == Product.id)
        .group_by(ProductType.id, ProductType.name)
        .order_by(ProductType.name)
        .all()
    )
    return [{"name": r.name, "value": _money(r.revenue)} for r in rows]


def get_dashboard_summary(
    db: Session, *, now: datetime | None = None, tz: tzinfo | None = None
) -> dict[str, object]:
    tz = tz or business_tz()
    total_products: int = db.query(func.count(Product.id)).scalar() or 0
    total_customers: int = db.query(func.count(Customer.id)).scalar() or 0

    return {
        "total_products": total_products,
        "total_customers": total_customers,
        "todays_sales_revenue": todays_revenue(db, now, tz),
        "monthly_sales": monthly_sales(db, now, tz),
        "sales_by_product_type": sales_by_product_type(db),
        "revenue_trend": revenue_trend(db, now, tz),
    }
