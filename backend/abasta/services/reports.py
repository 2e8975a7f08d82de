"""Reporting aggregation over a company's orders.

Both reports read orders by created_at inside an inclusive window and
leave DELETED orders out.

  dashboard_info → order count, sum of order totals, PENDING count
                   over the trailing `dashboard_window_days`
  global_info    → spend, average order value, spend per supplier and
                   top products over an explicit window

Top products rank by quantity descending, ties by product name
ascending.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.config import settings
from abasta.models.order import Order, OrderStatus
from abasta.schemas.report import DashboardOut, GlobalReportOut, SupplierSpend, TopProduct
from abasta.services.users import resolve_caller
from abasta.utils.money import ZERO, percentage, round2

logger = logging.getLogger("abasta.reports")


async def _load_orders(
    db: AsyncSession,
    company_id: int,
    start: datetime,
    end: datetime,
) -> list[Order]:
    result = await db.execute(
        select(Order).where(
            Order.company_id == company_id,
            Order.created_at >= start,
            Order.created_at <= end,
            Order.status != OrderStatus.DELETED,
        )
    )
    return list(result.scalars().unique().all())


async def dashboard_info(
    db: AsyncSession,
    caller_email: str,
    now: datetime | None = None,
) -> DashboardOut:
    caller = await resolve_caller(db, caller_email)
    end = now or datetime.utcnow()
    start = end - timedelta(days=settings.dashboard_window_days)

    orders = await _load_orders(db, caller.company_id, start, end)
    total_amount = round2(sum((o.total_amount for o in orders), ZERO))
    pending = sum(1 for o in orders if o.status == OrderStatus.PENDING)

    return DashboardOut(
        period_start=start,
        period_end=end,
        total_orders=len(orders),
        total_amount=total_amount,
        pending_orders=pending,
    )


def average_order_value(total_spend: Decimal, order_count: int) -> Decimal:
    if order_count == 0:
        return ZERO
    return round2(total_spend / order_count)


async def global_info(
    db: AsyncSession,
    caller_email: str,
    start: datetime,
    end: datetime,
) -> GlobalReportOut:
    caller = await resolve_caller(db, caller_email)
    orders = await _load_orders(db, caller.company_id, start, end)

    total_spend = ZERO
    by_supplier: dict[str, dict] = {}
    by_product: dict[str, dict] = defaultdict(
        lambda: {"name": "", "quantity": ZERO, "spend": ZERO}
    )

    for order in orders:
        supplier = by_supplier.setdefault(
            order.supplier.uuid,
            {"name": order.supplier.name, "orders": 0, "spend": ZERO},
        )
        supplier["orders"] += 1

        for item in order.items:
            total_spend += item.subtotal
            supplier["spend"] += item.subtotal

            product = by_product[item.product.uuid]
            product["name"] = item.product.name
            product["quantity"] += item.quantity
            product["spend"] += item.subtotal

    total_spend = round2(total_spend)

    spend_by_supplier = [
        SupplierSpend(
            supplier_uuid=uuid,
            supplier_name=data["name"],
            order_count=data["orders"],
            total_spend=round2(data["spend"]),
            percentage=percentage(data["spend"], total_spend),
        )
        for uuid, data in by_supplier.items()
    ]
    spend_by_supplier.sort(key=lambda s: (-s.total_spend, s.supplier_name))

    ranked = sorted(by_product.items(), key=lambda kv: (-kv[1]["quantity"], kv[1]["name"]))
    top_products = [
        TopProduct(
            product_uuid=uuid,
            product_name=data["name"],
            total_quantity=round2(data["quantity"]),
            total_spend=round2(data["spend"]),
        )
        for uuid, data in ranked[: settings.report_top_products]
    ]

    logger.info(
        "Global report for company %s: %d orders between %s and %s",
        caller.company.uuid, len(orders), start.isoformat(), end.isoformat(),
    )
    return GlobalReportOut(
        company_name=caller.company.name,
        period_start=start,
        period_end=end,
        total_orders=len(orders),
        total_spend=total_spend,
        average_order_value=average_order_value(total_spend, len(orders)),
        spend_by_supplier=spend_by_supplier,
        top_products=top_products,
    )
