"""
Pagination Dependency
=====================

Shared ``page``/``page_size`` query parameters for list endpoints.
"""

from dataclasses import dataclass

from fastapi import Query

from app.core.config import settings


@dataclass
class PageParams:
    page: int
    page_size: int


def get_page_params(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Rows per page",
    ),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)
