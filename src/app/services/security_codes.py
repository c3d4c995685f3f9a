"""
Security Code Derivation

Session IDs and keyed forward/backward codes. Codes are HMAC-SHA256 digests
over a seed that names the session, the issue time, the bound user and the
direction, so the two codes of a pair never coincide.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional, Tuple

ANONYMOUS = "anonymous"
FORWARD = "forward"
BACKWARD = "backward"
REFRESH_SUFFIX = "refresh"

EPOCH = datetime(1970, 1, 1)


class MissingSecretError(RuntimeError):
    """Raised at startup when no signing secret is configured"""


def utcnow() -> datetime:
    """Naive UTC now; all stored timestamps are naive UTC"""
    return datetime.now(UTC).replace(tzinfo=None)


def epoch_millis(moment: datetime) -> int:
    return (moment - EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class SecurityCodePolicy:
    """Timing knobs shared by the security use cases"""

    session_duration: timedelta = timedelta(minutes=30)
    max_session_id_attempts: int = 5
    clock: Callable[[], datetime] = utcnow


class SecurityCodeGenerator:
    """
    Derives session IDs and code pairs.

    Args:
        secret: Signing key. Empty or missing secrets are rejected so codes
            can never be derived from a predictable key.
        random_bytes: Entropy in the random part of a session ID
    """

    def __init__(self, secret: Optional[str], random_bytes: int = 8):
        if secret is None or not secret.strip():
            raise MissingSecretError(
                "SECURITY_SECRET is not configured; refusing to issue security codes"
            )
        self._key = secret.encode()
        self._random_bytes = random_bytes

    def new_session_id(self, now: datetime) -> str:
        return f"{epoch_millis(now)}-{secrets.token_hex(self._random_bytes)}"

    def keyed_hash(self, seed: str) -> str:
        return hmac.new(self._key, seed.encode(), hashlib.sha256).hexdigest()

    def derive_codes(
        self,
        session_id: str,
        issued_at: datetime,
        user_id: Optional[str],
        refresh: bool = False,
    ) -> Tuple[str, str]:
        """
        Derive the (forward, backward) pair.

        Seed layout: "<session_id>-<millis>-<user or anonymous>-<direction>",
        with "-refresh" appended for reissued codes.
        """
        base = f"{session_id}-{epoch_millis(issued_at)}-{user_id or ANONYMOUS}"
        suffix = f"-{REFRESH_SUFFIX}" if refresh else ""
        forward_code = self.keyed_hash(f"{base}-{FORWARD}{suffix}")
        backward_code = self.keyed_hash(f"{base}-{BACKWARD}{suffix}")
        return forward_code, backward_code

    @staticmethod
    def codes_match(
        expected_forward: str,
        expected_backward: str,
        forward_code: str,
        backward_code: str,
    ) -> bool:
        # Both comparisons always run, constant time
        forward_ok = hmac.compare_digest(expected_forward.encode(), forward_code.encode())
        backward_ok = hmac.compare_digest(expected_backward.encode(), backward_code.encode())
        return forward_ok and backward_ok
