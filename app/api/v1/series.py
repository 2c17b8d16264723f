from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.paging import paged_response
from app.api.validation import validated
from app.config import LinkConfig
from app.core.catalog.series import SerieService, serie_values
from app.core.images import ImageUploader
from app.core.validation import validators
from app.core.validation.pipeline import RequestContext
from app.schemas.catalog import Serie, SerieDetail

router = APIRouter()


@router.get("")
async def list_series(
    ctx: RequestContext = Depends(validated(validators.list_rules)),
    db: AsyncSession = Depends(deps.get_db),
    links: LinkConfig = Depends(deps.get_link_config),
):
    return await paged_response(db, SerieService(db).list_statement(), ctx, Serie, links)


@router.post(
    "",
    response_model=Serie,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.require_admin)],
)
async def create_serie(
    ctx: RequestContext = Depends(validated(validators.serie_create_rules)),
    uploader: ImageUploader = Depends(deps.get_image_uploader),
    db: AsyncSession = Depends(deps.get_db),
):
    image = await uploader.upload(ctx.files["image"])
    return await SerieService(db).create_serie(serie_values(ctx.body), image=image)


@router.get("/{id}", response_model=SerieDetail)
async def get_serie(ctx: RequestContext = Depends(validated(validators.serie_detail_rules))):
    return ctx.resource


@router.patch("/{id}", response_model=Serie, dependencies=[Depends(deps.require_admin)])
async def update_serie(
    ctx: RequestContext = Depends(validated(validators.serie_patch_rules)),
    uploader: ImageUploader = Depends(deps.get_image_uploader),
    db: AsyncSession = Depends(deps.get_db),
):
    image = None
    if "image" in ctx.files:
        image = await uploader.upload(ctx.files["image"])
    return await SerieService(db).update_serie(ctx.resource.id, serie_values(ctx.body), image=image)


@router.delete("/{id}", dependencies=[Depends(deps.require_admin)])
async def delete_serie(
    ctx: RequestContext = Depends(validated(validators.serie_exists_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    await SerieService(db).delete_serie(ctx.resource.id)
    return {}
