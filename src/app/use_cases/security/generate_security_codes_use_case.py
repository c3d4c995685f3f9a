"""
Generate Security Codes Use Case

Opens a security session and issues its forward/backward code pair.
"""

import logging

from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecuritySession
from src.libs.result import Error, Result, Return
from .dtos import GenerateSecurityCodesCommand, SecurityCodesResponse
from .sweep_expired_sessions_use_case import sweep_expired

logger = logging.getLogger(__name__)


class GenerateSecurityCodesUseCase:
    """
    Use case for issuing a new code pair.

    Business Rules:
    - Session ID is "<millis>-<random>"; an ID already in the store is never
      overwritten, a fresh one is drawn instead (bounded attempts)
    - Forward and backward codes are derived from distinct seeds
    - Session expires SESSION_DURATION after creation
    - Expired sessions are swept after every generation
    - Codes are returned once; only a refresh issues them again
    """

    def __init__(
        self,
        uow: UnitOfWork,
        generator: SecurityCodeGenerator,
        policy: SecurityCodePolicy,
    ):
        self.uow = uow
        self.generator = generator
        self.policy = policy

    async def execute(
        self, command: GenerateSecurityCodesCommand
    ) -> Result[SecurityCodesResponse]:
        """
        Execute generate use case.

        Args:
            command: Optional user binding plus audit metadata

        Returns:
            Result with SecurityCodesResponse, or Error

        Errors:
            - SESSION_ID_EXHAUSTED: every drawn session ID collided
        """
        async with self.uow:
            session = None
            for _ in range(self.policy.max_session_id_attempts):
                now = self.policy.clock()
                session_id = self.generator.new_session_id(now)
                forward_code, backward_code = self.generator.derive_codes(
                    session_id, now, command.user_id
                )
                candidate = SecuritySession(
                    session_id=session_id,
                    forward_code=forward_code,
                    backward_code=backward_code,
                    user_id=command.user_id,
                    is_used=False,
                    ip_address=command.ip_address or "unknown",
                    user_agent=command.user_agent or "unknown",
                    created_at=now,
                    expires_at=now + self.policy.session_duration,
                )
                if await self.uow.security_sessions.add_if_absent(candidate):
                    session = candidate
                    break
                logger.warning(f"Security session ID collision on {session_id}, retrying")

            if session is None:
                return Return.err(
                    Error(
                        "SESSION_ID_EXHAUSTED",
                        "Could not allocate a unique security session ID",
                    )
                )

            await sweep_expired(self.uow.security_sessions, self.policy.clock())
            await self.uow.commit()

            logger.info(f"Issued security codes for session {session.session_id}")

            return Return.ok(
                SecurityCodesResponse(
                    session_id=session.session_id,
                    forward_code=session.forward_code,
                    backward_code=session.backward_code,
                    expires_at=session.expires_at,
                    expires_in=int(self.policy.session_duration.total_seconds()),
                    user_id=session.user_id,
                )
            )
