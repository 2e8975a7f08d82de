"""Page requests, sort resolution and the count + slice query pair.

`paginate()` takes a model and a list of predicates (see
abasta.services.filters), ANDs them, and returns one `Page`.
A secondary sort on the primary key keeps page boundaries stable
when the requested sort column has duplicates.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.middleware.exceptions import BadRequestError

MAX_PAGE_SIZE = 100

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass
class PageRequest:
    page: int = 0
    size: int = 10
    sort_by: str = "name"
    sort_dir: str = "asc"

    def __post_init__(self):
        if self.page < 0:
            raise BadRequestError("Page index must not be negative")
        if self.size < 1 or self.size > MAX_PAGE_SIZE:
            raise BadRequestError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
        self.sort_dir = (self.sort_dir or "asc").lower()
        if self.sort_dir not in ("asc", "desc"):
            raise BadRequestError("Sort direction must be 'asc' or 'desc'")

    @property
    def offset(self) -> int:
        return self.page * self.size

    def order_by(self, model, sortable: set[str]) -> list:
        """Resolve sort_by against the model's whitelist of sortable columns."""
        column_name = to_snake(self.sort_by or "name")
        if column_name not in sortable:
            raise BadRequestError(
                f"Cannot sort by '{self.sort_by}'. "
                f"Allowed: {', '.join(sorted(sortable))}"
            )
        column = getattr(model, column_name)
        primary = column.desc() if self.sort_dir == "desc" else column.asc()
        return [primary, model.id.asc()]

    def describe_sort(self) -> str:
        return f"{to_snake(self.sort_by)},{self.sort_dir}" if self.sort_by else "unsorted"


@dataclass
class Page:
    items: list[Any]
    page: int
    size: int
    sort: str
    total_elements: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total_elements / self.size) if self.size else 0


async def paginate(
    db: AsyncSession,
    model,
    predicates: list,
    page_request: PageRequest,
    sortable: set[str],
) -> Page:
    order_by = page_request.order_by(model, sortable)

    total = await db.scalar(
        select(func.count()).select_from(model).where(*predicates)
    )
    result = await db.execute(
        select(model)
        .where(*predicates)
        .order_by(*order_by)
        .offset(page_request.offset)
        .limit(page_request.size)
    )
    items = list(result.scalars().unique().all())

    return Page(
        items=items,
        page=page_request.page,
        size=page_request.size,
        sort=page_request.describe_sort(),
        total_elements=total or 0,
    )
