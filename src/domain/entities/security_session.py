"""
Security Session Entity

Holds a pair of one-time security codes bound to a short-lived session.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

IP_ADDRESS_MAX_LENGTH = 64
USER_AGENT_MAX_LENGTH = 512


class SecuritySession(SQLModel, table=True):
    """
    Security session - a forward/backward code pair with a time window.

    Business Rules:
    - Codes are keyed digests and differ from each other
    - Single use: is_used flips to True once, on successful validation
    - Only a refresh resets is_used and moves expires_at
    - Expires 30 minutes after creation (or after the last refresh)
    """

    __tablename__ = "security_sessions"

    session_id: str = Field(primary_key=True, max_length=64)

    forward_code: str = Field(max_length=64)  # HMAC-SHA256 hex
    backward_code: str = Field(max_length=64)

    user_id: Optional[str] = Field(default=None, max_length=255)
    is_used: bool = Field(default=False)

    # Audit metadata, not part of validation
    ip_address: str = Field(default="unknown", max_length=IP_ADDRESS_MAX_LENGTH)
    user_agent: str = Field(default="unknown", max_length=USER_AGENT_MAX_LENGTH)

    # Timestamps (naive UTC)
    created_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (Index("idx_security_session_expires_at", "expires_at"),)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
