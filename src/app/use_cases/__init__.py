"""
Use Cases

Organized into domain folders:
- security/: Security code issuance, validation, refresh and expiry
"""

from .security import (
    GenerateSecurityCodesUseCase,
    ValidateSecurityCodesUseCase,
    RefreshSecurityCodesUseCase,
    SweepExpiredSessionsUseCase,
    GetSecurityStatusUseCase,
)

__all__ = [
    "GenerateSecurityCodesUseCase",
    "ValidateSecurityCodesUseCase",
    "RefreshSecurityCodesUseCase",
    "SweepExpiredSessionsUseCase",
    "GetSecurityStatusUseCase",
]
