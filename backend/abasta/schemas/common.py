"""Common schemas used across the application.

JSON bodies use camelCase keys; Python attributes stay snake_case.
Both spellings are accepted on input.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from abasta.utils.pagination import Page

T = TypeVar("T")

# Decimals travel as JSON numbers, not strings
Money = Annotated[
    Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")
]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Standard envelope for every JSON response.

    Returns:
        {
            "success": true,
            "message": "Supplier created",
            "data": {...},
            "timestamp": "2025-12-07T14:23:59.123456"
        }
    """
    success: bool = True
    message: str = "OK"
    data: T | None = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def ok(cls, data=None, message: str = "OK") -> "ApiResponse":
        return cls(success=True, message=message, data=data)


class PageInfo(CamelModel):
    page: int
    size: int
    sort: str
    total_pages: int
    total_elements: int
    number_of_elements: int
    first: bool
    last: bool
    empty: bool


class PagedResponse(CamelModel, Generic[T]):
    """Generic paginated response wrapper.

    Usage:
        response_model=ApiResponse[PagedResponse[SupplierOut]]

    Returns:
        {
            "content": [...],
            "pageable": {"page": 0, "size": 10, "sort": "name,asc", ...}
        }
    """
    content: list[T]
    pageable: PageInfo

    @classmethod
    def from_page(cls, page: Page, mapper) -> "PagedResponse":
        content = [mapper(item) for item in page.items]
        return cls(
            content=content,
            pageable=PageInfo(
                page=page.page,
                size=page.size,
                sort=page.sort,
                total_pages=page.total_pages,
                total_elements=page.total_elements,
                number_of_elements=len(content),
                first=page.page == 0,
                last=page.page >= page.total_pages - 1,
                empty=not content,
            ),
        )
