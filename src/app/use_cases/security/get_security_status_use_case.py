"""
Get Security Status Use Case

Reports how many security sessions are live.
"""

from src.app.services.security_codes import SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return
from .dtos import SecurityStatusResponse
from .sweep_expired_sessions_use_case import sweep_expired


class GetSecurityStatusUseCase:
    """Sweeps expired sessions, then counts what is left"""

    def __init__(self, uow: UnitOfWork, policy: SecurityCodePolicy):
        self.uow = uow
        self.policy = policy

    async def execute(self) -> Result[SecurityStatusResponse]:
        async with self.uow:
            now = self.policy.clock()
            await sweep_expired(self.uow.security_sessions, now)
            await self.uow.commit()

            active = await self.uow.security_sessions.count()

            return Return.ok(
                SecurityStatusResponse(
                    active_sessions=active,
                    session_duration_seconds=int(
                        self.policy.session_duration.total_seconds()
                    ),
                    timestamp=now,
                )
            )
