from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.paging import paged_response
from app.api.validation import validated
from app.config import LinkConfig, settings
from app.core.users.service import UserService
from app.core.validation import validators
from app.core.validation.pipeline import RequestContext
from app.core.validation.rules import to_bool
from app.db.models.user import User as UserModel
from app.schemas.user import LoginResponse, User
from app.utils.security import create_access_token

router = APIRouter()


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    ctx: RequestContext = Depends(validated(validators.register_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await UserService(db).register(
        username=ctx.body["username"],
        email=ctx.body["email"],
        password=ctx.body["password"],
    )


@router.post("/login", response_model=LoginResponse)
async def login(ctx: RequestContext = Depends(validated(validators.login_rules))):
    user = ctx.resources["user"]
    return LoginResponse(
        user=User.model_validate(user),
        token=create_access_token(user.id),
        expires_in=settings.JWT_TOKEN_LIFETIME_SECONDS,
    )


@router.get("/me", response_model=User)
async def get_me(current_user: UserModel = Depends(deps.get_current_user)):
    return current_user


@router.patch("/me", response_model=User)
async def update_me(
    current_user: UserModel = Depends(deps.get_current_user),
    ctx: RequestContext = Depends(validated(validators.me_patch_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await UserService(db).update_me(
        current_user.id,
        email=ctx.body.get("email"),
        password=ctx.body.get("password"),
    )


@router.get("", dependencies=[Depends(deps.require_admin)])
async def list_users(
    ctx: RequestContext = Depends(validated(validators.list_rules)),
    db: AsyncSession = Depends(deps.get_db),
    links: LinkConfig = Depends(deps.get_link_config),
):
    return await paged_response(db, UserService(db).list_statement(), ctx, User, links)


@router.get("/{id}", response_model=User, dependencies=[Depends(deps.require_admin)])
async def get_user(ctx: RequestContext = Depends(validated(validators.user_exists_rules))):
    return ctx.resource


@router.patch("/{id}", response_model=User, dependencies=[Depends(deps.require_admin)])
async def update_user(
    ctx: RequestContext = Depends(validated(validators.user_admin_patch_rules)),
    db: AsyncSession = Depends(deps.get_db),
):
    return await UserService(db).set_admin(ctx.resource.id, to_bool(ctx.body["admin"], strict=True))
