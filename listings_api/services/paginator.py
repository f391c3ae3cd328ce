"""Offset/limit slicing of a channel bucket.

``offset`` is a listing index (not a page index): ``offset=20, limit=10``
returns listings 20..29, reported as page number 2.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..core.utils import parse_int
from ..schemas import Listing, PageResult

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10


def parse_page_params(offset: Optional[str], limit: Optional[str]) -> tuple[int, int]:
    """Raw query values to (offset, limit); anything unusable gets the default."""
    parsed_offset = parse_int(offset, DEFAULT_OFFSET)
    parsed_limit = parse_int(limit, DEFAULT_LIMIT)
    if parsed_offset < 0:
        parsed_offset = DEFAULT_OFFSET
    if parsed_limit <= 0:
        parsed_limit = DEFAULT_LIMIT
    return parsed_offset, parsed_limit


def paginate(bucket: Sequence[Listing], offset: int = DEFAULT_OFFSET, limit: int = DEFAULT_LIMIT) -> PageResult:
    if offset < 0:
        offset = DEFAULT_OFFSET
    if limit <= 0:
        limit = DEFAULT_LIMIT
    total = len(bucket)
    page_number = offset // limit
    if offset > total - 1:
        return PageResult(listings=[], page_number=page_number, page_size=0, total_count=total)

    page = list(bucket[offset:offset + limit])
    return PageResult(listings=page, page_number=page_number, page_size=len(page), total_count=total)
