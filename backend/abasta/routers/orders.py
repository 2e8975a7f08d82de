"""Order router.

Endpoints:
    POST  /api/orders/create        Create a PENDING order with its items
    GET   /api/orders               Filter orders (DELETED hidden unless asked for)
    GET   /api/orders/{uuid}        Order detail
    PUT   /api/orders/{uuid}        Edit a PENDING order
    PATCH /api/orders/{uuid}/delete Soft delete
    POST  /api/orders/{uuid}/send   Email the supplier, then mark SENT
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email
from abasta.database import get_db
from abasta.routers.params import page_params
from abasta.schemas.common import ApiResponse, PagedResponse
from abasta.schemas.order import OrderOut, OrderRequest
from abasta.services import orders as order_service
from abasta.services.email import Mailer, get_mailer
from abasta.services.filters import OrderFilters, parse_order_status
from abasta.utils.dates import parse_report_date
from abasta.utils.pagination import PageRequest

router = APIRouter()


@router.post("/create", response_model=ApiResponse[OrderOut], status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    order = await order_service.create_order(db, caller, body)
    return ApiResponse.ok(OrderOut.from_order(order), "Order created")


@router.get("", response_model=ApiResponse[PagedResponse[OrderOut]])
async def filter_orders(
    order_uuid: str | None = Query(None, alias="orderUuid"),
    supplier_uuid: str | None = Query(None, alias="supplierUuid"),
    user_uuid: str | None = Query(None, alias="userUuid"),
    search_text: str | None = Query(None, alias="searchText"),
    name: str | None = None,
    notes: str | None = None,
    order_status: str | None = Query(None, alias="status"),
    min_amount: Decimal | None = Query(None, alias="minAmount"),
    max_amount: Decimal | None = Query(None, alias="maxAmount"),
    delivery_date_from: date | None = Query(None, alias="deliveryDateFrom"),
    delivery_date_to: date | None = Query(None, alias="deliveryDateTo"),
    created_at_from: str | None = Query(None, alias="createdAtFrom"),
    created_at_to: str | None = Query(None, alias="createdAtTo"),
    updated_at_from: str | None = Query(None, alias="updatedAtFrom"),
    updated_at_to: str | None = Query(None, alias="updatedAtTo"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    filters = OrderFilters(
        search_text=search_text,
        name=name,
        notes=notes,
        status=parse_order_status(order_status),
        min_amount=min_amount,
        max_amount=max_amount,
        delivery_date_from=delivery_date_from,
        delivery_date_to=delivery_date_to,
        created_at_from=parse_report_date(created_at_from),
        created_at_to=parse_report_date(created_at_to, end=True),
        updated_at_from=parse_report_date(updated_at_from),
        updated_at_to=parse_report_date(updated_at_to, end=True),
    )
    result = await order_service.filter_orders(
        db,
        caller,
        filters,
        page,
        order_uuid=order_uuid,
        supplier_uuid=supplier_uuid,
        user_uuid=user_uuid,
    )
    return ApiResponse.ok(PagedResponse.from_page(result, OrderOut.from_order))


@router.get("/{order_uuid}", response_model=ApiResponse[OrderOut])
async def get_order(
    order_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    order = await order_service.get_order(db, caller, order_uuid)
    return ApiResponse.ok(OrderOut.from_order(order))


@router.put("/{order_uuid}", response_model=ApiResponse[OrderOut])
async def update_order(
    order_uuid: str,
    body: OrderRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    order = await order_service.update_order(db, caller, order_uuid, body)
    return ApiResponse.ok(OrderOut.from_order(order), "Order updated")


@router.patch("/{order_uuid}/delete", response_model=ApiResponse[OrderOut])
async def delete_order(
    order_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    order = await order_service.delete_order(db, caller, order_uuid)
    return ApiResponse.ok(OrderOut.from_order(order), "Order deleted")


@router.post("/{order_uuid}/send", response_model=ApiResponse[OrderOut])
async def send_order(
    order_uuid: str,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    caller: str = Depends(get_caller_email),
):
    order = await order_service.send_order(db, mailer, caller, order_uuid)
    return ApiResponse.ok(OrderOut.from_order(order), "Order sent to supplier")
