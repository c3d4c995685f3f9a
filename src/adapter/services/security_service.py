"""
Security Code Service

Composition root for the security code core: owns the code generator, the
timing policy, the session store and the background sweeper, and hands out
units of work bound to that one store.
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.in_memory_security_session_repository import (
    InMemorySecuritySessionRepository,
)
from src.adapter.services.sweeper import ExpiredSessionSweeper
from src.adapter.services.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.security import SweepExpiredSessionsUseCase
from src.domain.entities import StoreBackend

logger = logging.getLogger(__name__)


class SecurityCodeService:
    """
    One explicitly constructed instance per process.

    Lifecycle: build (validates the secret), startup() (creates tables for
    the SQL backend, starts the sweeper), shutdown() (stops the sweeper,
    disposes the engine).
    """

    def __init__(
        self,
        generator: SecurityCodeGenerator,
        policy: Optional[SecurityCodePolicy] = None,
        repository: Optional[InMemorySecuritySessionRepository] = None,
        db_uri: Optional[str] = None,
        sweep_interval_seconds: float = 0,
    ):
        self.generator = generator
        self.policy = policy or SecurityCodePolicy()
        self.engine = None
        self.session_factory = None
        self.repository = None

        if db_uri:
            self.engine = create_async_engine(db_uri, echo=False, future=True)
            self.session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        else:
            self.repository = repository or InMemorySecuritySessionRepository()

        self.sweeper = None
        if sweep_interval_seconds > 0:
            self.sweeper = ExpiredSessionSweeper(self._sweep_once, sweep_interval_seconds)

    @classmethod
    def from_config(cls, config) -> "SecurityCodeService":
        """Build from ApplicationConfig. Raises MissingSecretError without a secret."""
        backend = StoreBackend(config.STORE_BACKEND)
        return cls(
            generator=SecurityCodeGenerator(config.SECURITY_SECRET),
            policy=SecurityCodePolicy(
                session_duration=timedelta(minutes=config.SESSION_DURATION_MINUTES),
                max_session_id_attempts=config.SESSION_ID_MAX_ATTEMPTS,
            ),
            db_uri=config.DB_URI if backend == StoreBackend.sql else None,
            sweep_interval_seconds=config.SWEEP_INTERVAL_SECONDS,
        )

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[UnitOfWork]:
        if self.session_factory is None:
            yield InMemoryUnitOfWork(self.repository)
            return
        async with self.session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    async def startup(self):
        if self.engine is not None:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        if self.sweeper is not None:
            self.sweeper.start()
        logger.info(
            f"Security code service started "
            f"(store={'sql' if self.engine is not None else 'memory'})"
        )

    async def shutdown(self):
        if self.sweeper is not None:
            await self.sweeper.stop()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("Security code service stopped")

    async def _sweep_once(self) -> int:
        async with self.unit_of_work() as uow:
            result = await SweepExpiredSessionsUseCase(uow, self.policy).execute()
        return result.value.removed_count
