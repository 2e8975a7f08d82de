"""Pydantic schemas for orders and their line items."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from abasta.models.order import Order, OrderItem, OrderStatus
from abasta.schemas.common import CamelModel, Money


class OrderItemRequest(CamelModel):
    # Set when updating an existing line; absent for new lines
    order_item_uuid: str | None = None
    product_uuid: str
    quantity: Decimal = Field(..., max_digits=10, decimal_places=2)
    notes: str | None = None


class OrderRequest(CamelModel):
    supplier_uuid: str
    name: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None
    delivery_date: date | None = None
    items: list[OrderItemRequest] = Field(default_factory=list)


class OrderItemOut(CamelModel):
    uuid: str
    product_uuid: str
    product_name: str
    unit: str | None
    volume: Money | None
    quantity: Money
    unit_price: Money
    subtotal: Money
    notes: str | None

    @classmethod
    def from_item(cls, item: OrderItem) -> "OrderItemOut":
        return cls(
            uuid=item.uuid,
            product_uuid=item.product.uuid,
            product_name=item.product.name,
            unit=item.product.unit,
            volume=item.product.volume,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            notes=item.notes,
        )


class OrderOut(CamelModel):
    uuid: str
    company_uuid: str
    supplier_uuid: str
    supplier_name: str
    user_uuid: str | None
    name: str
    notes: str | None
    total_amount: Money
    status: OrderStatus
    delivery_date: date | None
    items: list[OrderItemOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderOut":
        return cls(
            uuid=order.uuid,
            company_uuid=order.company.uuid,
            supplier_uuid=order.supplier.uuid,
            supplier_name=order.supplier.name,
            user_uuid=order.user.uuid if order.user else None,
            name=order.name,
            notes=order.notes,
            total_amount=order.total_amount,
            status=order.status,
            delivery_date=order.delivery_date,
            items=[OrderItemOut.from_item(i) for i in order.items],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
