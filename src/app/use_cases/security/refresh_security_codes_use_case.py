"""
Refresh Security Codes Use Case

Reissues the code pair of a live, unused session under the same ID.
"""

import logging

from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityCodeFailure
from src.libs.result import Error, Result, Return
from .dtos import SecurityCodesResponse

logger = logging.getLogger(__name__)


class RefreshSecurityCodesUseCase:
    """
    Use case for rotating a session's codes.

    Business Rules:
    - Session must exist, be unused and not be expired
    - New codes use the "-refresh" seeds at the refresh time, so they never
      equal the originally issued pair
    - Expiry moves to now + SESSION_DURATION, is_used resets to False
    - Failure means "cannot refresh"; callers should generate a new session
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

    async def execute(self, session_id: str) -> Result[SecurityCodesResponse]:
        """
        Execute refresh use case.

        Args:
            session_id: Session whose codes should be reissued

        Returns:
            Result with SecurityCodesResponse, or Error

        Errors:
            - RefreshPreconditionFailed: missing, used or expired session
        """
        precondition_failed = Error(
            SecurityCodeFailure.refresh_precondition_failed.value,
            "Session not found or expired",
        )

        async with self.uow:
            sessions = self.uow.security_sessions
            now = self.policy.clock()

            session = await sessions.get_by_id(session_id)
            if session is None or session.is_used or session.is_expired(now):
                return Return.err(precondition_failed)

            forward_code, backward_code = self.generator.derive_codes(
                session_id, now, session.user_id, refresh=True
            )

            # Conditional write: a validation that lands in between wins
            refreshed = await sessions.replace_codes(
                session_id,
                forward_code,
                backward_code,
                expires_at=now + self.policy.session_duration,
                now=now,
            )
            if refreshed is None:
                return Return.err(precondition_failed)

            await self.uow.commit()

            logger.info(f"Refreshed security codes for session {session_id}")

            return Return.ok(
                SecurityCodesResponse(
                    session_id=refreshed.session_id,
                    forward_code=refreshed.forward_code,
                    backward_code=refreshed.backward_code,
                    expires_at=refreshed.expires_at,
                    expires_in=int(self.policy.session_duration.total_seconds()),
                    user_id=refreshed.user_id,
                )
            )
