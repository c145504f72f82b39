import logging
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from liveshop.models.orm.base import Base

logger = logging.getLogger(__name__)


def prepare_database_url(url: str) -> tuple[str, dict]:
    """
    Prepare database URL for asyncpg compatibility.
    asyncpg doesn't support the 'sslmode' query parameter, it needs an 'ssl' context.
    """
    if not url:
        return url, {}

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)
    connect_args: dict = {}
    if "sslmode" not in query_params:
        return url, connect_args

    sslmode = query_params.pop("sslmode", [None])[0]
    if sslmode == "require":
        # encrypted, certificate not verified
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context
    elif sslmode in ("verify-ca", "verify-full"):
        connect_args["ssl"] = ssl.create_default_context()
    elif sslmode == "disable":
        connect_args["ssl"] = False

    cleaned_url = urlunparse(parsed._replace(query=urlencode(query_params, doseq=True)))
    return cleaned_url, connect_args


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, db_url: str, echo: bool = False) -> None:
        cleaned_url, connect_args = prepare_database_url(db_url)
        engine_kwargs: dict = {"echo": echo, "connect_args": connect_args}
        if cleaned_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if ":memory:" in cleaned_url:
                # a single shared connection, otherwise every session sees an empty db
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self._engine: AsyncEngine = create_async_engine(cleaned_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_database(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        session = self._session_factory()
        try:
            yield session
        except Exception:
            logger.exception("Session rollback because of exception")
            await session.rollback()
            raise
        finally:
            await session.close()
