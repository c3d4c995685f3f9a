from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.in_memory_security_session_repository import (
    InMemorySecuritySessionRepository,
)
from src.adapter.repositories.security_session_repository import SecuritySessionRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.security_sessions = SecuritySessionRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()


class InMemoryUnitOfWork(UnitOfWork):
    """
    UnitOfWork over a shared in-memory repository.

    Writes land immediately; commit and rollback are no-ops because the
    repository applies each operation atomically under its own lock.
    """

    def __init__(self, repository: InMemorySecuritySessionRepository):
        self.repository = repository

    async def __aenter__(self):
        self.security_sessions = self.repository
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        pass

    async def rollback(self):
        pass
