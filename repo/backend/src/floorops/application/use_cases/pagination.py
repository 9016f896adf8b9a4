from __future__ import annotations

import math
from dataclasses import dataclass

from floorops.application.dto.responses import PaginationResponse

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _positive_int(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value >= 1 else None


def parse_page_request(page: str | int | None, page_size: str | int | None) -> PageRequest:
    """Invalid values fall back to their defaults instead of failing the request."""
    parsed_page = _positive_int(page) or DEFAULT_PAGE
    parsed_size = _positive_int(page_size)
    if parsed_size is None or parsed_size > MAX_PAGE_SIZE:
        parsed_size = DEFAULT_PAGE_SIZE
    return PageRequest(page=parsed_page, page_size=parsed_size)


def to_pagination_response(page_request: PageRequest, total_items: int) -> PaginationResponse:
    total_pages = math.ceil(total_items / page_request.page_size) if total_items else 0
    return PaginationResponse(
        page=page_request.page,
        pageSize=page_request.page_size,
        totalItems=total_items,
        totalPages=total_pages,
        hasNext=page_request.page < total_pages,
        hasPrev=page_request.page > 1,
    )
