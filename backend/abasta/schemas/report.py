"""Report payloads: the dashboard counters and the global report."""

from datetime import datetime

from abasta.schemas.common import CamelModel, Money


class DashboardOut(CamelModel):
    period_start: datetime
    period_end: datetime
    total_orders: int
    total_amount: Money
    pending_orders: int


class SupplierSpend(CamelModel):
    supplier_uuid: str
    supplier_name: str
    order_count: int
    total_spend: Money
    percentage: Money


class TopProduct(CamelModel):
    product_uuid: str
    product_name: str
    total_quantity: Money
    total_spend: Money


class GlobalReportOut(CamelModel):
    company_name: str
    period_start: datetime
    period_end: datetime
    total_orders: int
    total_spend: Money
    average_order_value: Money
    spend_by_supplier: list[SupplierSpend]
    top_products: list[TopProduct]
