"""Offset pagination over SQLAlchemy queries."""
from __future__ import annotations

from typing import Any, List, Tuple

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, size: int) -> Tuple[List[Any], int]:
    """Return one page of ``query`` and the total number of matching rows.

    ``page`` is zero-based.
    """
    total = query.order_by(None).count()
    items = query.offset(page * size).limit(size).all()
    return items, total
