"""
Security Domain Entities

All domain entities organized by model.
"""

from .enums import SecurityCodeFailure, StoreBackend
from .security_session import (
    IP_ADDRESS_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
    SecuritySession,
)

__all__ = [
    # Enums
    "SecurityCodeFailure",
    "StoreBackend",
    # Entities
    "SecuritySession",
    # Column limits
    "IP_ADDRESS_MAX_LENGTH",
    "USER_AGENT_MAX_LENGTH",
]
