from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.validation.pipeline import RequestContext, is_absent
from app.core.validation.rules import to_date, to_int
from app.db.models.season import Season

logger = logging.getLogger(__name__)


def season_values(body: Mapping[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {
        "name": str(body["name"]),
        "number": to_int(body["number"]),
    }
    if not is_absent(body.get("airDate")):
        values["air_date"] = to_date(body["airDate"])
    if not is_absent(body.get("overview")):
        values["overview"] = str(body["overview"])
    return values


class SeasonService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def list_statement(self, serie_id: int) -> Select:
        return select(Season).where(Season.serie_id == serie_id).order_by(Season.number.asc())

    async def get_by_number(
        self, serie_id: int, number: int, *, with_episodes: bool = False
    ) -> Optional[Season]:
        stmt = select(Season).where(Season.serie_id == serie_id, Season.number == number)
        if with_episodes:
            stmt = stmt.options(selectinload(Season.episodes))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_season(self, serie_id: int, values: Mapping[str, Any], *, poster: str) -> Season:
        season = Season(serie_id=serie_id, poster=poster, **dict(values))
        self.db.add(season)
        await self.db.commit()
        await self.db.refresh(season)
        logger.info("seasons.created serie_id=%s number=%s", serie_id, season.number)
        return season

    async def delete_season(self, season_id: int) -> int:
        result = await self.db.execute(delete(Season).where(Season.id == season_id))
        await self.db.commit()
        logger.info("seasons.deleted season_id=%s rows=%s", season_id, result.rowcount)
        return result.rowcount


async def fetch_season(season_number: Any, ctx: RequestContext) -> Optional[Season]:
    """Season ``season_number`` of the serie named by the ``id`` path parameter."""
    serie_id = to_int(ctx.path_params.get("id"))
    number = to_int(season_number)
    if serie_id is None or number is None:
        return None
    async with ctx.session_factory() as db:
        return await SeasonService(db).get_by_number(serie_id, number, with_episodes=True)


async def fetch_season_by_body_number(number: Any, ctx: RequestContext) -> Optional[Season]:
    serie_id = to_int(ctx.path_params.get("id"))
    n = to_int(number)
    if serie_id is None or n is None:
        return None
    async with ctx.session_factory() as db:
        return await SeasonService(db).get_by_number(serie_id, n)
