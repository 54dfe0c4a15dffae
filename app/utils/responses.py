"""
Response envelope and pagination helpers.

Success:  {"success": true, "data": ..., "message": ..., "pagination": {...}}
"""

import math
from typing import Any, Optional

from fastapi import Query

from app.schemas.schemas import Pagination

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PageParams:
    """
    Dependency for `?page=&limit=`.

    Out-of-range values fall back to the defaults instead of failing.
    """

    def __init__(
        self,
        page: Optional[int] = Query(None, description="Page number (1-based)"),
        limit: Optional[int] = Query(None, description="Items per page (1-100)"),
    ):
        self.page = page if page and page > 0 else DEFAULT_PAGE
        self.limit = limit if limit and 0 < limit <= MAX_LIMIT else DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def build_pagination(total: int, params: PageParams) -> Pagination:
    return Pagination(
        page=params.page,
        limit=params.limit,
        total=total,
        totalPages=math.ceil(total / params.limit) if params.limit else 0,
    )


def api_success(data: Any = None, message: Optional[str] = None,
                pagination: Optional[Pagination] = None) -> dict:
    """Build the success envelope. Routes pick the status code."""
    body = {"success": True, "data": data, "message": message}
    if pagination is not None:
        body["pagination"] = pagination.model_dump()
    return body
