# liveshop/repository/live_session_repo.py
"""
Session store: list / create / update over live_sessions rows.

There is no delete and no version column. Two writers updating the same
row race, and the last commit wins.
"""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.core.exceptions import NotFoundError
from liveshop.models.orm.live_session import LiveSession
from liveshop.repository.queries import SessionQuery

logger = logging.getLogger(__name__)


async def list_sessions(
    db: AsyncSession,
    query: SessionQuery,
) -> list[LiveSession]:
    """List sessions matching the query, newest row first."""
    stmt = select(LiveSession)
    if query.seller_id is not None:
        stmt = stmt.where(LiveSession.seller_id == query.seller_id)
    if query.shop_slug is not None:
        stmt = stmt.where(LiveSession.shop_slug == query.shop_slug)
    if query.is_live is not None:
        stmt = stmt.where(LiveSession.is_live == query.is_live)
    stmt = stmt.order_by(LiveSession.id.desc())
    if query.limit is not None:
        stmt = stmt.limit(query.limit)

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_session(
    db: AsyncSession,
    **fields: Any,
) -> LiveSession:
    """Insert a new session row"""
    live_session = LiveSession(**fields)
    db.add(live_session)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(live_session)

    logger.info(f"Live session {live_session.id} created for seller {live_session.seller_id}")
    return live_session


async def update_session(
    db: AsyncSession,
    session_id: int,
    partial: dict[str, Any],
) -> LiveSession:
    """Apply a partial update to one row and return the refreshed row."""
    live_session = await db.get(LiveSession, session_id)
    if live_session is None:
        raise NotFoundError(f"Live session {session_id} not found")

    for key, value in partial.items():
        if not hasattr(LiveSession, key):
            raise AttributeError(f"LiveSession has no column '{key}'")
        setattr(live_session, key, value)

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(live_session)

    logger.debug(f"Live session {session_id} updated: {sorted(partial)}")
    return live_session
