"""
Offset pagination for list endpoints.
"""

from typing import Iterable, List, Sequence, Tuple
from sqlalchemy.orm import Query


def skip_for(page: int, limit: int) -> int:
    """Rows to skip for a 1-indexed page."""
    return (page - 1) * limit


def paginate(
    query: Query,
    page: int,
    limit: int,
    order_by: Sequence = (),
    options: Iterable = (),
) -> Tuple[List, int]:
    """
    Fetch one page of `query` and the total row count.

    The count runs on the bare filtered query (no ordering or eager loads) in
    the same session, so under concurrent writes it may differ slightly from
    what the page shows.

    Returns:
        (items, total)
    """
    total = query.count()
    items = (
        query.options(*options)
        .order_by(*order_by)
        .offset(skip_for(page, limit))
        .limit(limit)
        .all()
    )
    return items, total
