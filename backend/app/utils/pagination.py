"""
Pagination Utility Module

Page/limit pagination shared by the customer and admin order listings.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    """Pagination block returned next to a page of results"""
    page: int
    limit: int
    total: int
    total_pages: int


def clamp_page(page: int, limit: int) -> tuple:
    """Normalise 1-indexed page and page size"""
    return max(1, page), max(1, min(MAX_PAGE_SIZE, limit))


def build_pagination(total: int, page: int, limit: int) -> Dict[str, int]:
    total_pages = (total + limit - 1) // limit if total > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 20,
    count_query: Optional[Select] = None
) -> Dict[str, Any]:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base SQLAlchemy query (already ordered)
        page: Page number (1-indexed)
        limit: Items per page
        count_query: Optional custom count query

    Returns:
        Dictionary with ``items`` and a ``pagination`` block
    """
    page, limit = clamp_page(page, limit)

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items: List[Any] = list(result.scalars().unique().all())

    return {
        "items": items,
        "pagination": build_pagination(total, page, limit),
    }
