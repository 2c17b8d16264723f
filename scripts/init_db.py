import asyncio
import os
import sys

# Add repo root to import path (so `import app` works when run as a script)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.core.users.service import UserService
from app.db.models import Base  # noqa: F401  (ensures models are registered)
from app.db.session import AsyncSessionLocal, engine


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        service = UserService(session)
        if await service.find_by_username(settings.ADMIN_USERNAME) is None:
            await service.register(
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
                admin=True,
            )
            print(f"Created admin user {settings.ADMIN_USERNAME!r}")

    await engine.dispose()


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    asyncio.run(init_db())
