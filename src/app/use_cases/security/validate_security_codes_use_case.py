"""
Validate Security Codes Use Case

Checks a presented code pair and consumes the session on success.
"""

import logging
from datetime import datetime
from typing import Optional

from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityCodeFailure
from src.libs.result import Error, Result, Return
from .dtos import ValidateSecurityCodesCommand, ValidateSecurityCodesResponse

logger = logging.getLogger(__name__)


def _reject(failure: SecurityCodeFailure, message: str) -> Result:
    return Return.err(Error(failure.value, message))


class ValidateSecurityCodesUseCase:
    """
    Use case for one-time validation of a code pair.

    Business Rules (evaluated in order, first failure wins):
    - Session must exist                          -> NotFound
    - Session must not be used                    -> AlreadyUsed
    - Session must not be expired (deleted if so) -> Expired
    - Both codes must match                       -> CodeMismatch
    - Bound user must match the caller's user     -> UserMismatch
    - Success flips is_used with a compare-and-set over the same predicate
      (unused, unexpired, same code pair); when it loses, the session is
      re-read and the rules above pick the reason

    The user check only applies when both the session and the caller carry
    a user_id. An anonymous caller can consume a user-bound session, and an
    anonymous session accepts any caller user_id.
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
        self, command: ValidateSecurityCodesCommand
    ) -> Result[ValidateSecurityCodesResponse]:
        """
        Execute validate use case.

        Args:
            command: Session ID, both codes, optional caller user_id

        Returns:
            Result with ValidateSecurityCodesResponse, or Error whose code is
            one of NotFound, AlreadyUsed, Expired, CodeMismatch, UserMismatch
        """
        async with self.uow:
            sessions = self.uow.security_sessions
            now = self.policy.clock()

            rejection = await self._check(command, now)
            if rejection is not None:
                return rejection

            consumed = await sessions.mark_used(
                command.session_id, command.forward_code, command.backward_code, now
            )
            if not consumed:
                # Session changed since it was read (used, refreshed or removed)
                rejection = await self._check(command, now)
                return rejection or _reject(
                    SecurityCodeFailure.already_used, "Security codes already used"
                )

            await self.uow.commit()

            logger.info(f"Consumed security session {command.session_id}")

            return Return.ok(
                ValidateSecurityCodesResponse(
                    valid=True,
                    session_id=command.session_id,
                    message="Security codes validated successfully",
                )
            )

    async def _check(
        self, command: ValidateSecurityCodesCommand, now: datetime
    ) -> Optional[Result]:
        """Read the session and apply the ordered rules; None means acceptable"""
        sessions = self.uow.security_sessions
        session = await sessions.get_by_id(command.session_id)

        if session is None:
            return _reject(SecurityCodeFailure.not_found, "Session not found")

        if session.is_used:
            return _reject(
                SecurityCodeFailure.already_used, "Security codes already used"
            )

        if session.is_expired(now):
            await sessions.delete(command.session_id)
            await self.uow.commit()
            logger.info(f"Removed expired security session {command.session_id}")
            return _reject(SecurityCodeFailure.expired, "Security codes expired")

        if not self.generator.codes_match(
            session.forward_code,
            session.backward_code,
            command.forward_code,
            command.backward_code,
        ):
            return _reject(SecurityCodeFailure.code_mismatch, "Invalid security codes")

        if (
            command.user_id
            and session.user_id
            and command.user_id != session.user_id
        ):
            return _reject(SecurityCodeFailure.user_mismatch, "User mismatch")

        return None
