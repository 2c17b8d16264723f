from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.validation.pipeline import RequestContext
from app.core.validation.rules import to_int
from app.db.models.user import User
from app.utils.exceptions import ConflictException, NotFoundException
from app.utils.security import hash_password_async, verify_password_async

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def list_statement(self) -> Select:
        return select(User).order_by(User.id.asc())

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, *, username: str, email: str, password: str, admin: bool = False) -> User:
        user = User(
            username=username,
            email=email,
            password=await hash_password_async(password),
            admin=admin,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against the username/email uniqueness checks.
            await self.db.rollback()
            raise ConflictException("username or email already exists")
        await self.db.refresh(user)
        logger.info("users.registered user_id=%s username=%s", user.id, user.username)
        return user

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        user = await self.find_by_username(username)
        if user is None:
            return None
        if not await verify_password_async(password, user.password):
            return None
        return user

    async def update_me(
        self, user_id: int, *, email: Optional[str] = None, password: Optional[str] = None
    ) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFoundException()

        if email:
            user.email = email
        if password:
            user.password = await hash_password_async(password)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("email already exists")
        await self.db.refresh(user)
        return user

    async def set_admin(self, user_id: int, admin: bool) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFoundException()

        user.admin = admin
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("users.admin_changed user_id=%s admin=%s", user.id, admin)
        return user


# Lookup collaborators for the validation pipeline. Each opens its own session,
# because rules for different fields run concurrently.


async def fetch_user(user_id: Any, ctx: RequestContext) -> Optional[User]:
    uid = to_int(user_id)
    if uid is None:
        return None
    async with ctx.session_factory() as db:
        return await UserService(db).get_user(uid)


async def fetch_user_by_username(username: Any, ctx: RequestContext) -> Optional[User]:
    async with ctx.session_factory() as db:
        return await UserService(db).find_by_username(str(username))


async def fetch_user_by_email(email: Any, ctx: RequestContext) -> Optional[User]:
    async with ctx.session_factory() as db:
        return await UserService(db).find_by_email(str(email))


async def verify_credentials(username: str, password: str, ctx: RequestContext) -> bool:
    async with ctx.session_factory() as db:
        user = await UserService(db).authenticate(username, password)
    if user is None:
        return False
    ctx.resources["user"] = user
    return True
