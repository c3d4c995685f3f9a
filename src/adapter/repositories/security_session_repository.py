from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.security_session_repository import ISecuritySessionRepository
from src.domain.entities import SecuritySession


class SecuritySessionRepository(ISecuritySessionRepository):
    """Security session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: str) -> Optional[SecuritySession]:
        """Get session by ID, reloading any copy already in the identity map"""
        stmt = (
            select(SecuritySession)
            .where(SecuritySession.session_id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_if_absent(self, session_obj: SecuritySession) -> bool:
        """Insert a new session unless the ID already exists"""
        existing = await self.session.get(SecuritySession, session_obj.session_id)
        if existing is not None:
            return False
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return True

    async def delete(self, session_id: str) -> bool:
        """Delete a session by ID"""
        stmt = delete(SecuritySession).where(SecuritySession.session_id == session_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def mark_used(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        now: datetime,
    ) -> bool:
        """Compare-and-set is_used; the WHERE clause makes the flip single-winner"""
        stmt = (
            update(SecuritySession)
            .where(
                SecuritySession.session_id == session_id,
                SecuritySession.is_used == False,
                SecuritySession.forward_code == forward_code,
                SecuritySession.backward_code == backward_code,
                SecuritySession.expires_at >= now,
            )
            .values(is_used=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def replace_codes(
        self,
        session_id: str,
        forward_code: str,
        backward_code: str,
        expires_at: datetime,
        now: datetime,
    ) -> Optional[SecuritySession]:
        """Conditionally rotate codes for an unused, unexpired session"""
        stmt = (
            update(SecuritySession)
            .where(
                SecuritySession.session_id == session_id,
                SecuritySession.is_used == False,
                SecuritySession.expires_at >= now,
            )
            .values(
                forward_code=forward_code,
                backward_code=backward_code,
                expires_at=expires_at,
                is_used=False,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount == 0:
            return None

        session_obj = await self.get_by_id(session_id)
        if session_obj is not None:
            await self.session.refresh(session_obj)
        return session_obj

    async def list_all(self) -> List[SecuritySession]:
        """Get all stored sessions"""
        stmt = select(SecuritySession)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions past their expiry"""
        stmt = delete(SecuritySession).where(SecuritySession.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count(self) -> int:
        """Count stored sessions"""
        stmt = select(func.count()).select_from(SecuritySession)
        result = await self.session.execute(stmt)
        return result.scalar_one()
