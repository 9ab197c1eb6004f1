from __future__ import annotations

from typing import Any, List, Tuple

from sqlalchemy.orm import Query


def paginate(query: Query, *, page: int, page_size: int) -> Tuple[List[Any], int]:
    """Return one page of rows plus the unpaginated total."""
    total = query.order_by(None).count()
    offset = (page - 1) * page_size
    rows = query.offset(offset).limit(page_size).all()
    return rows, total
