"""
Security Code Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the security code domain.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from src.domain.entities import IP_ADDRESS_MAX_LENGTH, USER_AGENT_MAX_LENGTH


# ============================================================================
# Command DTOs
# ============================================================================


class GenerateSecurityCodesCommand(BaseModel):
    """
    Intent to open a new security session

    Audit metadata is clipped to the stored column sizes; it comes from
    request headers and is never rejected.
    """

    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("ip_address")
    @classmethod
    def clip_ip_address(cls, value: Optional[str]) -> Optional[str]:
        return value[:IP_ADDRESS_MAX_LENGTH] if value else value

    @field_validator("user_agent")
    @classmethod
    def clip_user_agent(cls, value: Optional[str]) -> Optional[str]:
        return value[:USER_AGENT_MAX_LENGTH] if value else value


class ValidateSecurityCodesCommand(BaseModel):
    """Codes presented by a caller for one-time validation"""

    session_id: str
    forward_code: str
    backward_code: str
    user_id: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class SecurityCodesResponse(BaseModel):
    """Issued code pair - returned by generate and refresh"""

    session_id: str
    forward_code: str
    backward_code: str
    expires_at: datetime
    expires_in: int
    user_id: Optional[str] = None


class ValidateSecurityCodesResponse(BaseModel):
    """Response for a successful validation"""

    valid: bool
    session_id: str
    message: str


class SweepResponse(BaseModel):
    """Response for an expiry sweep"""

    removed_count: int


class SecurityStatusResponse(BaseModel):
    """Response for the status use case"""

    active_sessions: int
    session_duration_seconds: int
    timestamp: datetime
