from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.validation.pipeline import RequestContext, is_absent
from app.core.validation.rules import to_bool, to_date, to_int
from app.db.models.series import Serie
from app.db.models.tracking import UserSerieRating, UserSerieState
from app.schemas.catalog import SerieDetail
from app.utils.exceptions import NotFoundException

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


# request field -> (column, coercion)
SERIE_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "name": ("name", _text),
    "airDate": ("air_date", to_date),
    "inProduction": ("in_production", to_bool),
    "tagline": ("tagline", _text),
    "description": ("description", _text),
    "language": ("language", _text),
    "network": ("network", _text),
    "url": ("url", _text),
}


def serie_values(body: Mapping[str, Any]) -> dict[str, Any]:
    """Map request fields to column values, leaving out absent ones."""
    values: dict[str, Any] = {}
    for field, (column, coerce) in SERIE_FIELDS.items():
        raw = body.get(field)
        if is_absent(raw):
            continue
        values[column] = coerce(raw)
    return values


class SerieService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def list_statement(self) -> Select:
        return select(Serie).order_by(Serie.id.asc())

    async def get_serie(self, serie_id: int) -> Optional[Serie]:
        return await self.db.get(Serie, serie_id)

    async def get_serie_detail(self, serie_id: int, *, user_id: Optional[int] = None) -> Optional[SerieDetail]:
        result = await self.db.execute(
            select(Serie)
            .where(Serie.id == serie_id)
            .options(selectinload(Serie.genres), selectinload(Serie.seasons))
        )
        serie = result.scalar_one_or_none()
        if serie is None:
            return None

        average, count = (
            await self.db.execute(
                select(func.avg(UserSerieRating.rating), func.count(UserSerieRating.id)).where(
                    UserSerieRating.serie_id == serie_id
                )
            )
        ).one()

        detail = SerieDetail.model_validate(serie)
        detail.averagerating = round(float(average), 2) if average is not None else None
        detail.ratingcount = int(count or 0)

        if user_id is not None:
            detail.rating = (
                await self.db.execute(
                    select(UserSerieRating.rating).where(
                        UserSerieRating.serie_id == serie_id,
                        UserSerieRating.user_id == user_id,
                    )
                )
            ).scalar_one_or_none()
            detail.state = (
                await self.db.execute(
                    select(UserSerieState.state).where(
                        UserSerieState.serie_id == serie_id,
                        UserSerieState.user_id == user_id,
                    )
                )
            ).scalar_one_or_none()

        return detail

    async def create_serie(self, values: Mapping[str, Any], *, image: str) -> Serie:
        serie = Serie(**dict(values), image=image)
        self.db.add(serie)
        await self.db.commit()
        await self.db.refresh(serie)
        logger.info("series.created serie_id=%s name=%s", serie.id, serie.name)
        return serie

    async def update_serie(
        self, serie_id: int, values: Mapping[str, Any], *, image: Optional[str] = None
    ) -> Serie:
        serie = await self.get_serie(serie_id)
        if serie is None:
            raise NotFoundException()

        for column, value in values.items():
            setattr(serie, column, value)
        if image:
            serie.image = image

        await self.db.commit()
        await self.db.refresh(serie)
        return serie

    async def delete_serie(self, serie_id: int) -> int:
        # Seasons, episodes, genre links, ratings and states go with it (ON DELETE CASCADE).
        result = await self.db.execute(delete(Serie).where(Serie.id == serie_id))
        await self.db.commit()
        logger.info("series.deleted serie_id=%s rows=%s", serie_id, result.rowcount)
        return result.rowcount


async def fetch_serie(serie_id: Any, ctx: RequestContext) -> Optional[Serie]:
    sid = to_int(serie_id)
    if sid is None:
        return None
    async with ctx.session_factory() as db:
        return await SerieService(db).get_serie(sid)


async def fetch_serie_detail(serie_id: Any, ctx: RequestContext) -> Optional[SerieDetail]:
    sid = to_int(serie_id)
    if sid is None:
        return None
    user_id = getattr(ctx.user, "id", None)
    async with ctx.session_factory() as db:
        return await SerieService(db).get_serie_detail(sid, user_id=user_id)
