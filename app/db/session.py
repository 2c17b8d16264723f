from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import settings


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ships with FK enforcement off; cascading deletes depend on it."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_from_url(url: str, *, echo: bool = False) -> AsyncEngine:
    # SQLite (especially aiosqlite) is not well-served by connection pooling.
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(url, poolclass=NullPool, echo=echo, future=True)
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    db_kwargs = {}
    if make_url(url).get_backend_name() in {"postgresql", "postgres"}:
        db_kwargs["pool_size"] = settings.DB_POOL_SIZE
        db_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

    return create_async_engine(
        url,
        echo=echo,
        future=True,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        **db_kwargs,
    )


def create_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine_from_url(settings.DATABASE_URL, echo=settings.DEBUG)

AsyncSessionLocal = create_session_factory(engine)
