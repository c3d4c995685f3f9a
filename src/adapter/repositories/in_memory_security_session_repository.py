import hmac
import threading
from datetime import datetime
from typing import Dict, List, Optional

from src.app.repositories.security_session_repository import ISecuritySessionRepository
from src.domain.entities import SecuritySession


class InMemorySecuritySessionRepository(ISecuritySessionRepository):
    """
    Security session repository kept in process memory.

    One lock guards the whole map, so every check-then-write below is atomic
    with respect to other request handlers (threads or tasks). State lives
    only as long as the instance; run a single authoritative process.
    """

    def __init__(self):
        self._sessions: Dict[str, SecuritySession] = {}
        self._lock = threading.Lock()

    async def get_by_id(self, session_id: str) -> Optional[SecuritySession]:
        with self._lock:
            return self._sessions.get(session_id)

    async def add_if_absent(self, session: SecuritySession) -> bool:
        with self._lock:
            if session.session_id in self._sessions:
                return False
            self._sessions[session.session_id] = session
            return True

    async def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    async def mark_used(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        now: datetime,
    ) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_used or session.is_expired(now):
                return False
            forward_ok = hmac.compare_digest(session.forward_code.encode(), forward_code.encode())
            backward_ok = hmac.compare_digest(session.backward_code.encode(), backward_code.encode())
            if not (forward_ok and backward_ok):
                return False
            session.is_used = True
            return True

    async def replace_codes(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        expires_at: datetime,
        now: datetime,
    ) -> Optional[SecuritySession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_used or session.is_expired(now):
                return None
            session.forward_code = forward_code
            session.backward_code = backward_code
            session.expires_at = expires_at
            session.is_used = False
            return session

    async def list_all(self) -> List[SecuritySession]:
        with self._lock:
            return list(self._sessions.values())

    async def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired_ids = [
                session_id
                for session_id, session in self._sessions.items()
                if session.is_expired(now)
            ]
            for session_id in expired_ids:
                del self._sessions[session_id]
            return len(expired_ids)

    async def count(self) -> int:
        with self._lock:
            return len(self._sessions)
