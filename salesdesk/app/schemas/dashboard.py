from __future__ import annotations

from salesdesk.app.schemas.common import CamelModel, Money


class MonthlySalesOut(CamelModel):
    months: list[str]
    sales: list[Money]


class RevenueTrendOut(CamelModel):
    days: list[str]
    revenue: list[Money]


class ProductTypeRevenueOut(CamelModel):
    name: str
    value: Money


class DashboardSummaryOut(CamelModel):
    total_products: int
    total_customers: int
    todays_sales_revenue: Money
    monthly_sales: MonthlySalesOut
    sales_by_product_type: list[ProductTypeRevenueOut]
    revenue_trend: RevenueTrendOut
