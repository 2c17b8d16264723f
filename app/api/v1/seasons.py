from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.paging import paged_response
from app.api.validation import validated
from app.config import LinkConfig
from app.core.catalog.episodes import EpisodeService, episode_values
from app.core.catalog.seasons import SeasonService, season_values
from app.core.images import ImageUploader
from app.core.validation import validators
from app.core.validation.pipeline import RequestContext
from app.schemas.catalog import Episode, Season, SeasonDetail

router = APIRouter()


@router.get("/{id}/season")
async def list_seasons(
    ctx: RequestContext = Depends(validated(validators.season_list_rules)),
    db: AsyncSession = Depends(deps.get_db),
    links: LinkConfig = Depends(deps.get_link_config),
):
    return await paged_response(db, SeasonService(db).list_statement(ctx.resource.id), ctx, Season, links)


@router.post(
    "/{id}/season",
    response_model=Season,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.require_admin)],
)
async def create_season(
    ctx: RequestContext = Depends(validated(validators.season_create_rules)),
    uploader: ImageUploader = Depends(deps.get_image_uploader),
    db: AsyncSession = Depends(deps.get_db),
):
    poster = await uploader.upload(ctx.files["image"])
    return await SeasonService(db).create_season(ctx.resource.id, season_values(ctx.body), poster=poster)


@router.get("/{id}/season/{season}", response_model=SeasonDetail)
async def get_season(ctx: RequestContext = Depends(validated(validators.season_rules))):
    return ctx.resource


@router.delete("/{id}/season/{season}", dependencies=[Depends(deps.require_admin)])
async def delete_season(
    ctx: RequestContext = Depends(validated(validators.season_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    await SeasonService(db).delete_season(ctx.resource.id)
    return {}


@router.post(
    "/{id}/season/{season}/episode",
    response_model=Episode,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.require_admin)],
)
async def create_episode(
    ctx: RequestContext = Depends(validated(validators.episode_create_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await EpisodeService(db).create_episode(ctx.resource, episode_values(ctx.body))


@router.get("/{id}/season/{season}/episode/{episode}", response_model=Episode)
async def get_episode(ctx: RequestContext = Depends(validated(validators.episode_rules))):
    return ctx.resource


@router.delete("/{id}/season/{season}/episode/{episode}", dependencies=[Depends(deps.require_admin)])
async def delete_episode(
    ctx: RequestContext = Depends(validated(validators.episode_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    await EpisodeService(db).delete_episode(ctx.resource.id)
    return {}
