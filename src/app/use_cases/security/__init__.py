"""
Security Code Use Cases

Issuance, validation, refresh and expiry of one-time security code pairs.
"""

from .generate_security_codes_use_case import GenerateSecurityCodesUseCase
from .validate_security_codes_use_case import ValidateSecurityCodesUseCase
from .refresh_security_codes_use_case import RefreshSecurityCodesUseCase
from .sweep_expired_sessions_use_case import SweepExpiredSessionsUseCase, sweep_expired
from .get_security_status_use_case import GetSecurityStatusUseCase
from .dtos import (
    GenerateSecurityCodesCommand,
    ValidateSecurityCodesCommand,
    SecurityCodesResponse,
    ValidateSecurityCodesResponse,
    SweepResponse,
    SecurityStatusResponse,
)

__all__ = [
    # Use Cases
    "GenerateSecurityCodesUseCase",
    "ValidateSecurityCodesUseCase",
    "RefreshSecurityCodesUseCase",
    "SweepExpiredSessionsUseCase",
    "GetSecurityStatusUseCase",
    "sweep_expired",
    # DTOs - Commands
    "GenerateSecurityCodesCommand",
    "ValidateSecurityCodesCommand",
    # DTOs - Responses
    "SecurityCodesResponse",
    "ValidateSecurityCodesResponse",
    "SweepResponse",
    "SecurityStatusResponse",
]
