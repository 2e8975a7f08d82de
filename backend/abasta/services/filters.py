"""Dynamic filter builder for suppliers, products and orders.

Each `*_predicates()` function turns a filter object whose fields are
all optional into a list of SQLAlchemy predicates, one per supplied
value. The caller ANDs the list (see abasta.utils.pagination.paginate).

Rules shared by every entity:
  - text filters are case-insensitive substring matches; blank = absent
  - numeric and date ranges are inclusive, each bound optional
  - search-text mode ORs the substring test over several columns

Defaults when a flag is absent:
  - Supplier / Product is_active → True
  - Order status                 → anything but DELETED
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func, or_, select

from abasta.middleware.exceptions import BadRequestError
from abasta.models.order import Order, OrderStatus
from abasta.models.product import Product
from abasta.models.supplier import Supplier

LIKE_ESCAPE = "\\"

SUPPLIER_SORTABLE = {
    "name", "contact_name", "email", "phone", "is_active", "created_at", "updated_at",
}
PRODUCT_SORTABLE = {
    "name", "category", "price", "unit", "volume", "is_active", "created_at", "updated_at",
}
ORDER_SORTABLE = {
    "name", "status", "total_amount", "delivery_date", "created_at", "updated_at",
}


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_ignore_case(column, value: str):
    """lower(column) LIKE %value% with the value lowercased in Python."""
    pattern = f"%{_escape_like(value.lower())}%"
    return func.lower(column).like(pattern, escape=LIKE_ESCAPE)


def _text_filters(pairs) -> list:
    predicates = []
    for column, value in pairs:
        value = _clean(value)
        if value is not None:
            predicates.append(contains_ignore_case(column, value))
    return predicates


def _range(column, low, high) -> list:
    predicates = []
    if low is not None:
        predicates.append(column >= low)
    if high is not None:
        predicates.append(column <= high)
    return predicates


def search_any(columns, text: str | None) -> list:
    """One OR predicate across `columns`, or nothing when text is blank."""
    text = _clean(text)
    if text is None:
        return []
    return [or_(*(contains_ignore_case(c, text) for c in columns))]


# ── Supplier ────────────────────────────────────────────────

SUPPLIER_SEARCH_COLUMNS = (
    Supplier.name,
    Supplier.contact_name,
    Supplier.email,
    Supplier.phone,
    Supplier.address,
)


@dataclass
class SupplierFilters:
    name: str | None = None
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    is_active: bool | None = None
    company_id: int | None = None
    search_text: str | None = None


def supplier_predicates(f: SupplierFilters) -> list:
    predicates = []
    if f.company_id is not None:
        predicates.append(Supplier.company_id == f.company_id)
    predicates.append(
        Supplier.is_active == (True if f.is_active is None else f.is_active)
    )
    predicates += search_any(SUPPLIER_SEARCH_COLUMNS, f.search_text)
    predicates += _text_filters([
        (Supplier.name, f.name),
        (Supplier.contact_name, f.contact_name),
        (Supplier.email, f.email),
        (Supplier.phone, f.phone),
        (Supplier.address, f.address),
    ])
    return predicates


# ── Product ─────────────────────────────────────────────────

PRODUCT_SEARCH_COLUMNS = (Product.name, Product.description, Product.category)


@dataclass
class ProductFilters:
    name: str | None = None
    description: str | None = None
    category: str | None = None
    unit: str | None = None
    volume: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    supplier_id: int | None = None
    company_id: int | None = None
    search_text: str | None = None


def product_predicates(f: ProductFilters) -> list:
    predicates = []
    if f.supplier_id is not None:
        predicates.append(Product.supplier_id == f.supplier_id)
    if f.company_id is not None:
        predicates.append(
            Product.supplier_id.in_(
                select(Supplier.id).where(Supplier.company_id == f.company_id)
            )
        )
    predicates.append(
        Product.is_active == (True if f.is_active is None else f.is_active)
    )
    predicates += search_any(PRODUCT_SEARCH_COLUMNS, f.search_text)
    predicates += _text_filters([
        (Product.name, f.name),
        (Product.description, f.description),
        (Product.category, f.category),
    ])
    unit = _clean(f.unit)
    if unit is not None:
        predicates.append(func.lower(Product.unit) == unit.lower())
    if f.volume is not None:
        predicates.append(Product.volume == f.volume)
    predicates += _range(Product.price, f.min_price, f.max_price)
    return predicates


# ── Order ───────────────────────────────────────────────────

ORDER_SEARCH_COLUMNS = (Order.name, Order.notes)


@dataclass
class OrderFilters:
    order_id: int | None = None
    company_id: int | None = None
    supplier_id: int | None = None
    user_id: int | None = None
    search_text: str | None = None
    name: str | None = None
    notes: str | None = None
    status: OrderStatus | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    delivery_date_from: date | None = None
    delivery_date_to: date | None = None
    created_at_from: datetime | None = None
    created_at_to: datetime | None = None
    updated_at_from: datetime | None = None
    updated_at_to: datetime | None = None


def order_predicates(f: OrderFilters) -> list:
    predicates = []
    if f.order_id is not None:
        predicates.append(Order.id == f.order_id)
    if f.company_id is not None:
        predicates.append(Order.company_id == f.company_id)
    if f.supplier_id is not None:
        predicates.append(Order.supplier_id == f.supplier_id)
    if f.user_id is not None:
        predicates.append(Order.user_id == f.user_id)

    predicates += search_any(ORDER_SEARCH_COLUMNS, f.search_text)
    predicates += _text_filters([
        (Order.name, f.name),
        (Order.notes, f.notes),
    ])

    if f.status is None:
        predicates.append(Order.status != OrderStatus.DELETED)
    else:
        predicates.append(Order.status == f.status)

    predicates += _range(Order.total_amount, f.min_amount, f.max_amount)
    predicates += _range(Order.delivery_date, f.delivery_date_from, f.delivery_date_to)
    predicates += _range(Order.created_at, f.created_at_from, f.created_at_to)
    predicates += _range(Order.updated_at, f.updated_at_from, f.updated_at_to)
    return predicates


def parse_order_status(value: str | None) -> OrderStatus | None:
    """Case-insensitive status name → OrderStatus; blank means no filter."""
    value = _clean(value)
    if value is None:
        return None
    try:
        return OrderStatus(value.upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise BadRequestError(f"Invalid order status '{value}'. Allowed: {allowed}")
