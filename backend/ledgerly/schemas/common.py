from __future__ import annotations

from typing import Optional

from ledgerly.schemas.base import ORMModel


class PageMeta(ORMModel):
    total: int
    page: int
    page_size: int
    has_more: bool
    next_page: Optional[int] = None
    prev_page: Optional[int] = None


def page_meta(*, total: int, page: int, page_size: int) -> dict:
    offset = (page - 1) * page_size
    has_more = offset + page_size < total
    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "has_more": has_more,
        "next_page": page + 1 if has_more else None,
        "prev_page": page - 1 if page > 1 else None,
    }


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value
