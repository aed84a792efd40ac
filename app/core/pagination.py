from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Query

from .config import settings
from .exceptions import ValidationError


def page_bounds(page: int, size: Optional[int]) -> Tuple[int, int]:
    """Clamp a 0-based page request to sane values; no size means DEFAULT_PAGE_SIZE."""
    if size is None:
        size = settings.DEFAULT_PAGE_SIZE
    if page < 0:
        raise ValidationError("Page index must not be negative")
    if size < 1:
        raise ValidationError("Page size must be at least 1")
    return page, min(size, settings.MAX_PAGE_SIZE)


def apply_sort(query: Query, columns: Dict[str, object], sort_by: str, sort_dir: str) -> Query:
    """Order a query by one of the whitelisted columns."""
    column = columns.get(sort_by)
    if column is None:
        raise ValidationError(
            f"Invalid sort field: {sort_by}. Allowed: {', '.join(sorted(columns))}"
        )
    if sort_dir.lower() == "asc":
        return query.order_by(column.asc())
    return query.order_by(column.desc())


def paginate(query: Query, page: int, size: int):
    """Return (rows, total) for a 0-based page."""
    total = query.order_by(None).count()
    rows = query.offset(page * size).limit(size).all()
    return rows, total
