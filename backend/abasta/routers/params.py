"""Shared query-parameter dependencies."""

from fastapi import Query

from abasta.utils.pagination import MAX_PAGE_SIZE, PageRequest


def page_params(
    page: int = Query(0, ge=0, description="0-based page index"),
    size: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    sort_by: str = Query("name", alias="sortBy"),
    sort_dir: str = Query("asc", alias="sortDir", pattern="(?i)^(asc|desc)$"),
) -> PageRequest:
    return PageRequest(page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
