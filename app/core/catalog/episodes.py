from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation.pipeline import RequestContext, is_absent
from app.core.validation.rules import to_date, to_int
from app.db.models.season import Episode, Season

logger = logging.getLogger(__name__)


def episode_values(body: Mapping[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {
        "name": str(body["name"]),
        "number": to_int(body["number"]),
    }
    if not is_absent(body.get("airDate")):
        values["air_date"] = to_date(body["airDate"])
    if not is_absent(body.get("overview")):
        values["overview"] = str(body["overview"])
    return values


class EpisodeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_number(self, serie_id: int, season_number: int, number: int) -> Optional[Episode]:
        result = await self.db.execute(
            select(Episode)
            .join(Season, Season.id == Episode.season_id)
            .where(
                Season.serie_id == serie_id,
                Season.number == season_number,
                Episode.number == number,
            )
        )
        return result.scalar_one_or_none()

    async def create_episode(self, season: Season, values: Mapping[str, Any]) -> Episode:
        episode = Episode(serie_id=season.serie_id, season_id=season.id, **dict(values))
        self.db.add(episode)
        await self.db.commit()
        await self.db.refresh(episode)
        logger.info(
            "episodes.created serie_id=%s season=%s number=%s",
            season.serie_id,
            season.number,
            episode.number,
        )
        return episode

    async def delete_episode(self, episode_id: int) -> int:
        result = await self.db.execute(delete(Episode).where(Episode.id == episode_id))
        await self.db.commit()
        logger.info("episodes.deleted episode_id=%s rows=%s", episode_id, result.rowcount)
        return result.rowcount


def _path_ints(ctx: RequestContext, *names: str) -> Optional[tuple[int, ...]]:
    values = tuple(to_int(ctx.path_params.get(name)) for name in names)
    if any(v is None for v in values):
        return None
    return values  # type: ignore[return-value]


async def fetch_episode(episode_number: Any, ctx: RequestContext) -> Optional[Episode]:
    ids = _path_ints(ctx, "id", "season")
    number = to_int(episode_number)
    if ids is None or number is None:
        return None
    serie_id, season_number = ids
    async with ctx.session_factory() as db:
        return await EpisodeService(db).get_by_number(serie_id, season_number, number)

