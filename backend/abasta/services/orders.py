"""Order lifecycle: create, edit, send to the supplier, soft delete.

Creation is all-or-nothing. Every supplier and product lookup and every
quantity check runs before the first row is added to the session, and
the whole request shares one transaction (abasta.database.get_db), so a
failure on the last item leaves no order behind.

Prices are snapshotted into OrderItem.unit_price when an item is
written. Subtotals and totals round half-up to 2 decimal places.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.middleware.exceptions import (
    BadRequestError,
    IllegalStateError,
    ResourceNotFoundError,
)
from abasta.models.order import Order, OrderItem, OrderStatus
from abasta.models.product import Product
from abasta.models.user import User
from abasta.schemas.order import OrderItemRequest, OrderRequest
from abasta.services.email import Mailer
from abasta.services.filters import ORDER_SORTABLE, OrderFilters, order_predicates
from abasta.services.notifications import send_order_notification
from abasta.services.products import find_product
from abasta.services.suppliers import get_company_supplier
from abasta.services.users import resolve_caller
from abasta.utils.money import ZERO, line_subtotal, round2
from abasta.utils.pagination import Page, PageRequest, paginate

logger = logging.getLogger("abasta.orders")


# ── Helpers ──────────────────────────────────────────────────

async def _resolve_item(
    db: AsyncSession,
    caller: User,
    item: OrderItemRequest,
) -> Product:
    """Validate one requested line and return its product."""
    product = await find_product(db, item.product_uuid)
    if not product or product.supplier.company_id != caller.company_id:
        raise ResourceNotFoundError(f"Product not found with UUID: {item.product_uuid}")
    if item.quantity is None or item.quantity <= 0:
        raise BadRequestError(
            f"Quantity for product {item.product_uuid} must be greater than zero"
        )
    return product


def _fill_item(order_item: OrderItem, product: Product, request: OrderItemRequest) -> None:
    order_item.product = product
    order_item.quantity = request.quantity
    order_item.unit_price = product.price
    order_item.subtotal = line_subtotal(request.quantity, product.price)
    order_item.notes = request.notes


def compute_total(items: list[OrderItem]) -> Decimal:
    return round2(sum((i.subtotal for i in items), ZERO))


async def _find_order(db: AsyncSession, order_uuid: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.uuid == order_uuid))
    return result.scalar_one_or_none()


async def _get_company_order(db: AsyncSession, caller: User, order_uuid: str) -> Order:
    order = await _find_order(db, order_uuid)
    if not order or order.company_id != caller.company_id:
        raise ResourceNotFoundError(f"Order not found with UUID: {order_uuid}")
    return order


# ── Create ───────────────────────────────────────────────────

async def create_order(
    db: AsyncSession,
    caller_email: str,
    body: OrderRequest,
) -> Order:
    """Create a PENDING order with its items for the caller's company.

    Raises:
        ResourceNotFoundError: caller, supplier or any product is unknown
        BadRequestError: any quantity is zero or negative
    """
    caller = await resolve_caller(db, caller_email)
    supplier = await get_company_supplier(db, caller.company_id, body.supplier_uuid)

    # ── Validate every line before writing anything ───────────
    resolved = [(await _resolve_item(db, caller, item), item) for item in body.items]

    items = []
    for product, request in resolved:
        order_item = OrderItem()
        _fill_item(order_item, product, request)
        items.append(order_item)

    order = Order(
        company=caller.company,
        supplier=supplier,
        user=caller,
        name=body.name,
        notes=body.notes,
        delivery_date=body.delivery_date,
        status=OrderStatus.PENDING,
        total_amount=compute_total(items),
        items=items,
    )
    db.add(order)
    await db.flush()

    logger.info(
        "Order %s created by %s with %d item(s), total %s",
        order.uuid, caller.uuid, len(items), order.total_amount,
    )
    return order


# ── Read ─────────────────────────────────────────────────────

async def get_order(db: AsyncSession, caller_email: str, order_uuid: str) -> Order:
    caller = await resolve_caller(db, caller_email)
    return await _get_company_order(db, caller, order_uuid)


async def filter_orders(
    db: AsyncSession,
    caller_email: str,
    filters: OrderFilters,
    page_request: PageRequest,
    order_uuid: str | None = None,
    supplier_uuid: str | None = None,
    user_uuid: str | None = None,
) -> Page:
    """Page of the caller's company orders; UUID filters resolve to ids first."""
    caller = await resolve_caller(db, caller_email)
    filters.company_id = caller.company_id

    if order_uuid:
        filters.order_id = (await _get_company_order(db, caller, order_uuid)).id
    if supplier_uuid:
        filters.supplier_id = (
            await get_company_supplier(db, caller.company_id, supplier_uuid)
        ).id
    if user_uuid:
        result = await db.execute(
            select(User.id).where(
                User.uuid == user_uuid, User.company_id == caller.company_id
            )
        )
        user_id = result.scalar_one_or_none()
        if user_id is None:
            raise ResourceNotFoundError(f"User not found with UUID: {user_uuid}")
        filters.user_id = user_id

    return await paginate(db, Order, order_predicates(filters), page_request, ORDER_SORTABLE)


# ── Update ───────────────────────────────────────────────────

async def update_order(
    db: AsyncSession,
    caller_email: str,
    order_uuid: str,
    body: OrderRequest,
) -> Order:
    """Replace an order's header and lines while it is still PENDING.

    Lines carrying order_item_uuid are updated in place, lines without it
    are added, and existing lines not mentioned are removed.
    """
    caller = await resolve_caller(db, caller_email)
    order = await _get_company_order(db, caller, order_uuid)
    if order.status != OrderStatus.PENDING:
        raise BadRequestError(
            f"Only PENDING orders can be modified. Current status: {order.status.value}"
        )

    supplier = await get_company_supplier(db, caller.company_id, body.supplier_uuid)
    current = {item.uuid: item for item in order.items}

    resolved = []
    seen: set[str] = set()
    for request in body.items:
        if request.order_item_uuid:
            if request.order_item_uuid not in current:
                raise BadRequestError(
                    f"Item {request.order_item_uuid} does not belong to this order"
                )
            if request.order_item_uuid in seen:
                raise BadRequestError(
                    f"Item {request.order_item_uuid} appears more than once"
                )
            seen.add(request.order_item_uuid)
        resolved.append((await _resolve_item(db, caller, request), request))

    items = []
    for product, request in resolved:
        order_item = current.get(request.order_item_uuid) if request.order_item_uuid else None
        if order_item is None:
            order_item = OrderItem()
        _fill_item(order_item, product, request)
        items.append(order_item)

    order.supplier = supplier
    order.name = body.name
    order.notes = body.notes
    order.delivery_date = body.delivery_date
    order.items = items  # delete-orphan removes the lines left out
    order.total_amount = compute_total(items)
    await db.flush()

    logger.info("Order %s updated, %d item(s)", order.uuid, len(items))
    return order


# ── Send ─────────────────────────────────────────────────────

async def send_order(
    db: AsyncSession,
    mailer: Mailer,
    caller_email: str,
    order_uuid: str,
) -> Order:
    """Email the order to its supplier, then mark it SENT.

    The status only changes after the mailer returned without error; a
    NotificationError leaves the order PENDING so it can be sent again.
    """
    caller = await resolve_caller(db, caller_email)
    order = await _get_company_order(db, caller, order_uuid)
    if order.status != OrderStatus.PENDING:
        raise IllegalStateError(
            f"Order {order_uuid} must be PENDING to be sent. "
            f"Current status: {order.status.value}"
        )

    await send_order_notification(mailer, order)

    order.status = OrderStatus.SENT
    await db.flush()
    logger.info("Order %s sent to %s", order.uuid, order.supplier.email)
    return order


# ── Delete ───────────────────────────────────────────────────

async def delete_order(db: AsyncSession, caller_email: str, order_uuid: str) -> Order:
    """Soft delete: the order stays for reporting history with status DELETED."""
    caller = await resolve_caller(db, caller_email)
    order = await _get_company_order(db, caller, order_uuid)
    order.status = OrderStatus.DELETED
    await db.flush()
    logger.info("Order %s deleted", order.uuid)
    return order
