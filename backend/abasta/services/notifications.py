"""Order notification: emails an order's line items to its supplier.

Any failure, including a supplier without an email address, surfaces
as NotificationError so the caller can keep the order PENDING.
"""

import logging
from html import escape

from abasta.middleware.exceptions import NotificationError
from abasta.models.order import Order
from abasta.services.email import Mailer, layout, deliver

logger = logging.getLogger("abasta.notifications")

_CELL = 'style="padding: 12px; border-bottom: 1px solid #eeeeee;"'
_HEAD = 'style="padding: 12px; color: #ffffff; text-align: left;"'


def _fmt(value) -> str:
    return "" if value is None else escape(str(value))


def build_order_items_table(order: Order) -> str:
    rows = []
    for item in order.items:
        notes = (
            f'<br><span style="font-size: 12px; color: #999;">Notes: {escape(item.notes)}</span>'
            if item.notes else ""
        )
        rows.append(
            "<tr>"
            f"<td {_CELL}><strong>{_fmt(item.product.name)}</strong>{notes}</td>"
            f"<td {_CELL}>{_fmt(item.quantity)}</td>"
            f"<td {_CELL}>{_fmt(item.product.volume)}</td>"
            f"<td {_CELL}>{_fmt(item.product.unit)}</td>"
            "</tr>"
        )
    return (
        '<table width="100%" cellpadding="0" cellspacing="0" style="border: 1px solid #e0e0e0;">'
        '<thead><tr style="background-color: #667eea;">'
        f"<th {_HEAD}>Product</th><th {_HEAD}>Quantity</th>"
        f"<th {_HEAD}>Volume</th><th {_HEAD}>Unit</th>"
        "</tr></thead><tbody>"
        + "".join(rows)
        + "</tbody></table>"
    )


def render_order_email(order: Order) -> str:
    company = order.company
    supplier = order.supplier
    greeting = f"Hello {supplier.contact_name or supplier.name},"
    body = (
        f"<p><strong>{_fmt(company.name)}</strong> has placed a new order: "
        f"<strong>{_fmt(order.name)}</strong>.</p>"
    )
    if order.delivery_date:
        body += f"<p>Requested delivery date: {order.delivery_date.isoformat()}</p>"
    body += build_order_items_table(order)
    if order.notes:
        body += f"<p><strong>Order notes:</strong> {_fmt(order.notes)}</p>"
    body += (
        "<p>Contact details:<br>"
        f"{_fmt(company.name)}<br>{_fmt(company.address)}<br>"
        f"{_fmt(company.phone)}<br>{_fmt(company.email)}</p>"
    )
    return layout(greeting, body)


async def send_order_notification(mailer: Mailer, order: Order) -> None:
    supplier = order.supplier
    if not supplier.email:
        logger.error(
            "Supplier %s has no email address; order %s cannot be sent",
            supplier.name,
            order.uuid,
        )
        raise NotificationError(f"Supplier '{supplier.name}' has no email address")

    subject = f"New order from {order.company.name}: {order.name}"
    try:
        await deliver(mailer, supplier.email, subject, render_order_email(order))
    except Exception as e:
        logger.error("Failed to send order %s to %s: %s", order.uuid, supplier.email, e)
        raise NotificationError("Failed to send the order notification", cause=e) from e

    logger.info("Order %s emailed to %s", order.uuid, supplier.email)
