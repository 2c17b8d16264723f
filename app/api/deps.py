from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import LinkConfig
from app.core.images import CloudinaryUploader, ImageUploader
from app.db.models.user import User
from app.db.session import AsyncSessionLocal
from app.utils.exceptions import ImageUploadError, UnauthorizedException
from app.utils.security import decode_token

optional_oauth2 = OAuth2PasswordBearer(tokenUrl="/users/login", auto_error=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def get_optional_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[str] = Depends(optional_oauth2),
) -> Optional[User]:
    """User behind the bearer token, or None for anonymous or unusable tokens."""
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    return await db.get(User, user_id)


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise UnauthorizedException("invalid token")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.admin:
        raise UnauthorizedException("insufficient authorization")
    return user


def get_image_uploader() -> ImageUploader:
    try:
        return CloudinaryUploader.from_settings()
    except ValueError as exc:
        raise ImageUploadError("image host is not configured") from exc


def get_link_config() -> LinkConfig:
    return LinkConfig.from_settings()
