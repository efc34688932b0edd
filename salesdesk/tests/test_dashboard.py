"""Tests for dashboard aggregation: today's revenue, trends and breakdowns."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from salesdesk.app.core.dates import add_months, day_window, month_window
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product, ProductType
from salesdesk.app.models.user import User
from salesdesk.app.schemas.invoice import DiscountIn, InvoiceItemIn
from salesdesk.app.services.dashboard import (
    get_dashboard_summary,
    monthly_sales,
    revenue_trend,
    sales_by_product_type,
    todays_revenue,
)
from salesdesk.app.services.sales import create_invoice
from salesdesk.tests.conftest import auth

UTC = timezone.utc
# Sunday
NOW = datetime(2026, 10, 18, 15, 0, tzinfo=UTC)


def _sell(
    db: Session,
    user: User,
    customer: Customer,
    product: Product,
    quantity: int,
    when: datetime,
    discount: DiscountIn | None = None,
) -> None:
    create_invoice(
        db,
        customer_id=customer.id,
        items=[InvoiceItemIn(product=product.id, quantity=quantity)],
        created_by=user,
        discount=discount,
        now=when,
    )


# ─── Calendar windows ────────────────────────────────────────────────────────


class TestWindows:
    def test_add_months_crosses_year(self) -> None:
        assert add_months(2026, 1, -1) == (2025, 12)
        assert add_months(2026, 11, 2) == (2027, 1)
        assert add_months(2026, 3, -5) == (2025, 10)

    def test_month_window_is_half_open_and_covers_last_day(self) -> None:
        start, end = month_window(2026, 2, UTC)
        assert start == datetime(2026, 2, 1, tzinfo=UTC)
        assert end == datetime(2026, 3, 1, tzinfo=UTC)

    def test_day_window_in_offset_zone(self) -> None:
        plus3 = timezone(timedelta(hours=3))
        start, end = day_window(date(2026, 10, 18), plus3)
        assert start == datetime(2026, 10, 17, 21, 0, tzinfo=UTC)
        assert end - start == timedelta(days=1)


# ─── Revenue ─────────────────────────────────────────────────────────────────


class TestTodaysRevenue:
    def test_sums_todays_invoices(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        service_product: Product,
    ) -> None:
        # 50/unit: 500 + 300 today, 1000 yesterday
        _sell(db, admin_user, customer, service_product, 10, NOW - timedelta(hours=5))
        _sell(db, admin_user, customer, service_product, 6, NOW)
        _sell(db, admin_user, customer, service_product, 20, NOW - timedelta(days=1))

        assert todays_revenue(db, NOW, UTC) == Decimal("800")

    def test_uses_discounted_totals(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        service_product: Product,
    ) -> None:
        _sell(
            db, admin_user, customer, service_product, 2, NOW,
            discount=DiscountIn(value=Decimal("30")),
        )
        assert todays_revenue(db, NOW, UTC) == Decimal("70")

    def test_zero_without_invoices(self, db: Session) -> None:
        assert todays_revenue(db, NOW, UTC) == 0


class TestSeries:
    def test_monthly_has_six_points_oldest_first(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        service_product: Product,
    ) -> None:
        _sell(db, admin_user, customer, service_product, 2, datetime(2026, 8, 31, 23, 30, tzinfo=UTC))
        _sell(db, admin_user, customer, service_product, 1, datetime(2026, 10, 1, 0, 0, tzinfo=UTC))
        # Outside the window
        _sell(db, admin_user, customer, service_product, 9, datetime(2026, 4, 30, 12, 0, tzinfo=UTC))

        result = monthly_sales(db, NOW, UTC)

        assert result["months"] == ["May", "Jun", "Jul", "Aug", "Sep", "Oct"]
        assert result["sales"] == [0, 0, 0, Decimal("100"), 0, Decimal("50")]

    def test_monthly_is_six_zeros_when_empty(self, db: Session) -> None:
        result = monthly_sales(db, NOW, UTC)
        assert len(result["months"]) == 6
        assert result["sales"] == [0] * 6

    def test_weekly_has_seven_points_ending_today(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        service_product: Product,
    ) -> None:
        _sell(db, admin_user, customer, service_product, 1, NOW)
        _sell(db, admin_user, customer, service_product, 3, NOW - timedelta(days=6))
        _sell(db, admin_user, customer, service_product, 5, NOW - timedelta(days=7))

        result = revenue_trend(db, NOW, UTC)

        assert result["days"] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert result["revenue"] == [Decimal("150"), 0, 0, 0, 0, 0, Decimal("50")]


class TestSalesByProductType:
    def test_sums_line_revenue_per_type(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        product: Product,
        service_product: Product,
    ) -> None:
        services = ProductType(name="Services")
        db.add(services)
        db.commit()
        service_product.type_id = services.id
        db.commit()

        create_invoice(
            db,
            customer_id=customer.id,
            items=[
                InvoiceItemIn(product=product.id, quantity=2),
                InvoiceItemIn(product=service_product.id, quantity=3),
            ],
            created_by=admin_user,
            # Discount applies to the invoice total, not the per-type lines
            discount=DiscountIn(value=Decimal("100")),
            now=NOW,
        )

        assert sales_by_product_type(db) == [
            {"name": "Hardware", "value": Decimal("200")},
            {"name": "Services", "value": Decimal("150")},
        ]

    def test_type_without_sales_reports_zero(self, db: Session, product_type: ProductType) -> None:
        assert sales_by_product_type(db) == [{"name": "Hardware", "value": 0}]

    def test_no_types_is_empty(self, db: Session) -> None:
        assert sales_by_product_type(db) == []


# ─── Summary / API ───────────────────────────────────────────────────────────


class TestDashboardSummary:
    def test_counts_and_shape(
        self,
        db: Session,
        admin_user: User,
        customer: Customer,
        product: Product,
        service_product: Product,
    ) -> None:
        _sell(db, admin_user, customer, product, 1, NOW)

        summary = get_dashboard_summary(db, now=NOW, tz=UTC)

        assert summary["total_products"] == 2
        assert summary["total_customers"] == 1
        assert summary["todays_sales_revenue"] == Decimal("100")
        assert len(summary["monthly_sales"]["sales"]) == 6
        assert len(summary["revenue_trend"]["revenue"]) == 7

    def test_api_returns_camel_case(
        self, client: TestClient, supervisor_token: str, product: Product, customer: Customer
    ) -> None:
        resp = client.get("/api/v1/dashboard/summary", headers=auth(supervisor_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["totalProducts"] == 1
        assert body["totalCustomers"] == 1
        assert body["todaysSalesRevenue"] == 0
        assert len(body["monthlySales"]["months"]) == 6
        assert len(body["revenueTrend"]["days"]) == 7
        assert body["salesByProductType"] == [{"name": "Hardware", "value": 0}]

    def test_api_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/api/v1/dashboard/summary").status_code == 401
