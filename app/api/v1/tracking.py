"""``/tv/{id}/rate`` and ``/tv/{id}/state``: the current user's take on a serie."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.validation import validated
from app.core.tracking.service import RatingService, StateService
from app.core.validation import validators
from app.core.validation.pipeline import RequestContext
from app.core.validation.rules import to_int
from app.db.models.user import User as UserModel
from app.schemas.tracking import Rating, State

router = APIRouter()


@router.post("/{id}/rate", response_model=Rating, status_code=status.HTTP_201_CREATED)
async def create_rating(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.rating_create_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await RatingService(db).create(current_user.id, ctx.resource.id, to_int(ctx.body["rating"]))


@router.patch("/{id}/rate", response_model=Rating)
async def update_rating(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.rating_update_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await RatingService(db).update(current_user.id, ctx.resource.id, to_int(ctx.body["rating"]))


@router.delete("/{id}/rate")
async def delete_rating(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.rating_delete_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    await RatingService(db).delete(current_user.id, ctx.resource.id)
    return {}


@router.post("/{id}/state", response_model=State, status_code=status.HTTP_201_CREATED)
async def create_state(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.state_create_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await StateService(db).create(current_user.id, ctx.resource.id, str(ctx.body["state"]))


@router.patch("/{id}/state", response_model=State)
async def update_state(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.state_update_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await StateService(db).update(current_user.id, ctx.resource.id, str(ctx.body["state"]))


@router.delete("/{id}/state")
async def delete_state(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.state_delete_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    await StateService(db).delete(current_user.id, ctx.resource.id)
    return {}
