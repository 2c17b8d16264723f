from __future__ import annotations

from typing import Any

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    to_non_negative_int_or_default,
    to_positive_int_or_default,
)


async def paged_query(
    db: AsyncSession,
    stmt: Select,
    *,
    offset: Any = DEFAULT_OFFSET,
    limit: Any = DEFAULT_LIMIT,
) -> dict[str, Any]:
    """Run ``stmt`` with LIMIT/OFFSET applied; rows keep the statement's order."""

    limit_n = to_positive_int_or_default(limit, DEFAULT_LIMIT)
    offset_n = to_non_negative_int_or_default(offset, DEFAULT_OFFSET)

    result = await db.execute(stmt.limit(limit_n).offset(offset_n))
    return {
        "limit": limit_n,
        "offset": offset_n,
        "items": list(result.scalars().all()),
    }
