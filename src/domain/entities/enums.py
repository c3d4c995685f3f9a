"""
Security Domain Enums

Enumeration types used across the security code domain.
"""

from enum import Enum


class SecurityCodeFailure(str, Enum):
    """Business outcome codes for rejected validate/refresh calls"""

    not_found = "NotFound"
    already_used = "AlreadyUsed"
    expired = "Expired"
    code_mismatch = "CodeMismatch"
    user_mismatch = "UserMismatch"
    refresh_precondition_failed = "RefreshPreconditionFailed"


class StoreBackend(str, Enum):
    """Where security sessions are kept"""

    memory = "memory"
    sql = "sql"
