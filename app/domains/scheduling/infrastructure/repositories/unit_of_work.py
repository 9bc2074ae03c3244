"""
SQLAlchemy Unit of Work

Commits or rolls back the session shared by the repositories of a request.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.scheduling.application.ports.services import IUnitOfWork

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(IUnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        logger.debug("Rolling back scheduling transaction")
        await self.session.rollback()
