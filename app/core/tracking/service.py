"""Per-user rating and watch state of a serie."""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation.pipeline import RequestContext
from app.core.validation.rules import to_int
from app.db.models.tracking import UserSerieRating, UserSerieState
from app.utils.exceptions import BadRequestException, NotFoundException

logger = logging.getLogger(__name__)

TrackingRow = Union[UserSerieRating, UserSerieState]


class _TrackingService:
    model: Type[TrackingRow]
    column: str

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int, serie_id: int) -> Optional[TrackingRow]:
        result = await self.db.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self.model.serie_id == serie_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: int, serie_id: int, value: Any) -> TrackingRow:
        row = self.model(user_id=user_id, serie_id=serie_id, **{self.column: value})
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestException("already exists")
        await self.db.refresh(row)
        logger.info(
            "tracking.created kind=%s user_id=%s serie_id=%s value=%s",
            self.column,
            user_id,
            serie_id,
            value,
        )
        return row

    async def update(self, user_id: int, serie_id: int, value: Any) -> TrackingRow:
        row = await self.get(user_id, serie_id)
        if row is None:
            raise NotFoundException()
        setattr(row, self.column, value)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def delete(self, user_id: int, serie_id: int) -> int:
        result = await self.db.execute(
            delete(self.model).where(
                self.model.user_id == user_id,
                self.model.serie_id == serie_id,
            )
        )
        await self.db.commit()
        return result.rowcount


class RatingService(_TrackingService):
    model = UserSerieRating
    column = "rating"


class StateService(_TrackingService):
    model = UserSerieState
    column = "state"


async def _fetch(service_cls: Type[_TrackingService], serie_id: Any, ctx: RequestContext) -> Optional[TrackingRow]:
    sid = to_int(serie_id)
    user_id = getattr(ctx.user, "id", None)
    if sid is None or user_id is None:
        return None
    async with ctx.session_factory() as db:
        return await service_cls(db).get(user_id, sid)


async def fetch_rating(serie_id: Any, ctx: RequestContext) -> Optional[TrackingRow]:
    return await _fetch(RatingService, serie_id, ctx)


async def fetch_state(serie_id: Any, ctx: RequestContext) -> Optional[TrackingRow]:
    return await _fetch(StateService, serie_id, ctx)
