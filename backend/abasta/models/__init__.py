"""Aggregate model imports for Alembic auto-detection."""

from abasta.models.company import Company, CompanyStatus  # noqa: F401
from abasta.models.user import User, UserRole  # noqa: F401
from abasta.models.supplier import Supplier  # noqa: F401
from abasta.models.product import Product  # noqa: F401
from abasta.models.order import Order, OrderItem, OrderStatus  # noqa: F401

__all__ = [
    "Company", "CompanyStatus",
    "User", "UserRole",
    "Supplier",
    "Product",
    "Order", "OrderItem", "OrderStatus",
]
