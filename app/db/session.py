from dotenv import load_dotenv
from sqlmodel import SQLModel
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from typing import Optional, AsyncGenerator

from app.core.config import settings
from app.core.logging import get_logger
from app.db import models  # noqa: F401  registers tables on SQLModel.metadata

logger = get_logger(__name__)

load_dotenv()

# asyncpg pool settings for Postgres deployments
POSTGRES_ENGINE_OPTIONS = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 20,
    "pool_recycle": 900,
    "pool_timeout": 30,
    "connect_args": {
        "prepared_statement_cache_size": 0,
        "timeout": 60,
        "command_timeout": 300,
    },
}

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """SQLite gets foreign keys switched on; anything else gets the pooled Postgres options."""
    if make_url(database_url).get_backend_name() == "sqlite":
        engine = create_async_engine(database_url, echo=echo)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(database_url, echo=echo, **POSTGRES_ENGINE_OPTIONS)


def _session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def get_async_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL_ASYNC, echo=settings.DATABASE_ECHO)
        logger.info(f"Async engine created for {make_url(settings.DATABASE_URL_ASYNC).get_backend_name()}")
    return _engine


def get_async_session_maker(force_new: bool = False) -> async_sessionmaker[AsyncSession]:
    """
    Shared session maker for the application.

    Scripts running under their own event loop pass `force_new=True` to get
    a maker bound to a fresh engine.
    """
    global _session_maker

    if force_new:
        return _session_factory(build_engine(settings.DATABASE_URL_ASYNC, echo=settings.DATABASE_ECHO))

    if _session_maker is None:
        _session_maker = _session_factory(get_async_engine())
    return _session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with get_async_session_maker()() as session:
        yield session


async def create_tables(engine: Optional[AsyncEngine] = None):
    engine = engine or get_async_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables created/verified")
