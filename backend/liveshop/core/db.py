from typing import AsyncIterator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.core.container import Container
from liveshop.core.database import Database


@inject
async def get_db(
    database: Database = Depends(Provide[Container.db]),
) -> AsyncIterator[AsyncSession]:
    async with database.session() as session:
        yield session
