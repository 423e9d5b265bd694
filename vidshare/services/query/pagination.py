"""
Page/limit normalization shared by every paginated listing.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Query

from vidshare.core.errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Offsets are bound as signed 64-bit integers by the store.
MAX_SKIP = 2 ** 63 - 1

RawNumber = Optional[Union[str, int]]


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total else 0


def _to_int(value: RawNumber, default: int) -> Optional[int]:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value.strip(), 10)
    except ValueError:
        return None


def normalize_page(page: RawNumber = None, limit: RawNumber = None) -> PageParams:
    """Parse raw page/limit inputs; page must be >= 1 and limit within [1, 100]."""
    page_number = _to_int(page, DEFAULT_PAGE)
    if page_number is None or page_number < 1:
        raise ValidationError("Invalid page number.")

    limit_number = _to_int(limit, DEFAULT_LIMIT)
    if limit_number is None or not 1 <= limit_number <= MAX_LIMIT:
        raise ValidationError(f"Invalid limit. Must be between 1 and {MAX_LIMIT}.")
    if (page_number - 1) * limit_number > MAX_SKIP:
        raise ValidationError("Invalid page number.")

    return PageParams(page=page_number, limit=limit_number)


def page_params(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
) -> PageParams:
    """FastAPI dependency wrapping ``normalize_page`` for query-string inputs."""
    return normalize_page(page, limit)
