from __future__ import annotations

from typing import Any, Type

from pydantic import BaseModel
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import LinkConfig, settings
from app.core.pagination import add_page_metadata
from app.core.validation.pipeline import RequestContext
from app.db.paging import paged_query


async def paged_response(
    db: AsyncSession,
    stmt: Select,
    ctx: RequestContext,
    schema: Type[BaseModel],
    links: LinkConfig,
) -> Any:
    """Run a list query for the request's offset/limit and decorate it with ``_links``."""
    page = await paged_query(
        db,
        stmt,
        offset=ctx.query.get("offset", 0),
        limit=ctx.query.get("limit", settings.PAGE_LIMIT_DEFAULT),
    )
    items = [schema.model_validate(row).model_dump(mode="json") for row in page["items"]]
    envelope = {"limit": page["limit"], "offset": page["offset"], "items": items}
    return add_page_metadata(
        envelope,
        ctx.path,
        offset=page["offset"],
        limit=page["limit"],
        length=len(items),
        links=links,
    )
