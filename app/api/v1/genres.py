from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.paging import paged_response
from app.api.validation import validated
from app.config import LinkConfig
from app.core.catalog.genres import GenreService
from app.core.validation import validators
from app.core.validation.pipeline import RequestContext
from app.schemas.catalog import Genre

router = APIRouter()


@router.get("")
async def list_genres(
    ctx: RequestContext = Depends(validated(validators.list_rules)),
    db: AsyncSession = Depends(deps.get_db),
    links: LinkConfig = Depends(deps.get_link_config),
):
    return await paged_response(db, GenreService(db).list_statement(), ctx, Genre, links)


@router.post(
    "",
    response_model=Genre,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.require_admin)],
)
async def create_genre(
    ctx: RequestContext = Depends(validated(validators.genre_create_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await GenreService(db).create_genre(str(ctx.body["name"]))
