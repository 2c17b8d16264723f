"""
TV Catalog: pytest fixtures.

Provides:
- A fresh SQLite database file per test, created from the ORM metadata
- An httpx AsyncClient bound to the ASGI app with the session factory,
  image uploader and link config overridden
- Users (plain and admin) with bearer-token headers
"""
import os
from datetime import date

os.environ.setdefault("ENV", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api import deps
from app.config import LinkConfig
from app.core.users.service import UserService
from app.core.validation.pipeline import UploadedFile
from app.db.models import Base, Season, Serie
from app.db.session import create_engine_from_url, create_session_factory
from app.main import app
from app.utils.security import create_access_token

TEST_BASE_URL = "http://test"
PASSWORD = "0123456789"


class FakeUploader:
    """Stands in for the image host; remembers what it was given."""

    def __init__(self):
        self.uploads: list[UploadedFile] = []

    async def upload(self, image: UploadedFile) -> str:
        self.uploads.append(image)
        return f"https://images.test/{len(self.uploads)}/{image.filename}"


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest_asyncio.fixture
async def client(session_factory, uploader):
    app.dependency_overrides[deps.get_session_factory] = lambda: session_factory
    app.dependency_overrides[deps.get_image_uploader] = lambda: uploader
    app.dependency_overrides[deps.get_link_config] = lambda: LinkConfig(base_url=TEST_BASE_URL)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url=TEST_BASE_URL) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def user(db_session):
    return await UserService(db_session).register(
        username="viewer", email="viewer@example.org", password=PASSWORD
    )


@pytest_asyncio.fixture
async def admin(db_session):
    return await UserService(db_session).register(
        username="admin", email="admin@example.org", password=PASSWORD, admin=True
    )


@pytest.fixture
def user_headers(user) -> dict[str, str]:
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin)


@pytest_asyncio.fixture
async def serie(db_session) -> Serie:
    row = Serie(
        name="Breaking Bad",
        air_date=date(2008, 1, 20),
        in_production=False,
        tagline="Remember my name",
        image="https://images.test/bb.jpg",
        description="A chemist turns to crime.",
        language="en",
        network="AMC",
        url="https://www.amc.com/shows/breaking-bad",
    )
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row


@pytest_asyncio.fixture
async def season(db_session, serie) -> Season:
    row = Season(
        serie_id=serie.id,
        name="Season 1",
        number=1,
        air_date=date(2008, 1, 20),
        overview="It begins.",
        poster="https://images.test/bb-s1.jpg",
    )
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row
