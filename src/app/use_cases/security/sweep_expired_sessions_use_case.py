"""
Sweep Expired Sessions Use Case

Evicts every security session whose window has closed.
"""

import logging
from datetime import datetime

from src.app.repositories.security_session_repository import ISecuritySessionRepository
from src.app.services.security_codes import SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return
from .dtos import SweepResponse

logger = logging.getLogger(__name__)


async def sweep_expired(repository: ISecuritySessionRepository, now: datetime) -> int:
    """Delete expired sessions from `repository`. Idempotent."""
    removed = await repository.delete_expired(now)
    if removed:
        logger.debug(f"Swept {removed} expired security session(s)")
    return removed


class SweepExpiredSessionsUseCase:
    """
    Use case for the periodic expiry sweep.

    Business Rules:
    - Removes sessions with now > expires_at, used or not
    - Safe to run concurrently with lazy deletion on validate
    """

    def __init__(self, uow: UnitOfWork, policy: SecurityCodePolicy):
        self.uow = uow
        self.policy = policy

    async def execute(self) -> Result[SweepResponse]:
        async with self.uow:
            removed = await sweep_expired(self.uow.security_sessions, self.policy.clock())
            await self.uow.commit()
            return Return.ok(SweepResponse(removed_count=removed))
