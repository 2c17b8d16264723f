from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation.pipeline import RequestContext
from app.db.models.series import Genre
from app.utils.exceptions import ConflictException

logger = logging.getLogger(__name__)


class GenreService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def list_statement(self) -> Select:
        return select(Genre).order_by(Genre.id.asc())

    async def find_by_name(self, name: str) -> Optional[Genre]:
        result = await self.db.execute(select(Genre).where(Genre.name == name))
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str) -> Genre:
        genre = await self.find_by_name(name)
        if genre is None:
            genre = Genre(name=name)
            self.db.add(genre)
            await self.db.flush()
        return genre

    async def create_genre(self, name: str) -> Genre:
        genre = Genre(name=name)
        self.db.add(genre)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("genre already exists")
        await self.db.refresh(genre)
        logger.info("genres.created genre_id=%s name=%s", genre.id, genre.name)
        return genre


async def fetch_genre_by_name(name: Any, ctx: RequestContext) -> Optional[Genre]:
    async with ctx.session_factory() as db:
        return await GenreService(db).find_by_name(str(name))
