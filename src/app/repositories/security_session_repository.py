from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import SecuritySession


class ISecuritySessionRepository(ABC):
    """Security session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[SecuritySession]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def add_if_absent(self, session: SecuritySession) -> bool:
        """Insert a new session. Returns False (and stores nothing) if the ID is taken."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed."""
        pass

    @abstractmethod
    async def mark_used(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        now: datetime,
    ) -> bool:
        """
        Atomically flip is_used from False to True.

        The flip happens only while the session is unused, unexpired at `now`
        and still holds exactly this code pair. Returns True only for the
        caller that performed the flip.
        """
        pass

    @abstractmethod
    async def replace_codes(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        expires_at: datetime,
        now: datetime,
    ) -> Optional[SecuritySession]:
        """
        Swap in new codes and expiry, reset is_used.

        Applied only if the session exists, is unused and is not expired at
        `now`; returns the updated session, or None when the condition fails.
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[SecuritySession]:
        """Get all stored sessions"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete every session with expires_at < now. Returns count removed."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count stored sessions"""
        pass
