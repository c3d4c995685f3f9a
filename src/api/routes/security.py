import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.adapter.services.security_service import SecurityCodeService
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.security import (
    GenerateSecurityCodesCommand,
    GenerateSecurityCodesUseCase,
    GetSecurityStatusUseCase,
    RefreshSecurityCodesUseCase,
    SecurityCodesResponse,
    SecurityStatusResponse,
    ValidateSecurityCodesCommand,
    ValidateSecurityCodesResponse,
    ValidateSecurityCodesUseCase,
)
from src.depends import get_security_service, get_unit_of_work
from src.domain.entities import SecurityCodeFailure

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/security", tags=["Security"])


class GenerateRequest(BaseModel):
    """Request to open a security session"""

    user_id: Optional[str] = Field(
        None, max_length=255, description="Bind the codes to this user"
    )


class ValidateRequest(BaseModel):
    """Codes presented for one-time validation"""

    session_id: str = Field(..., min_length=1, description="Session ID from generate")
    forward_code: str = Field(..., min_length=1, description="Forward security code")
    backward_code: str = Field(..., min_length=1, description="Backward security code")
    user_id: Optional[str] = Field(None, description="Caller's user ID, if any")


class RefreshRequest(BaseModel):
    """Request to reissue codes for an open session"""

    session_id: str = Field(..., min_length=1, description="Session ID from generate")


class ValidationFailedResponse(BaseModel):
    """Body returned with 401 when validation is rejected"""

    valid: bool
    reason: SecurityCodeFailure
    message: str


@router.post(
    "/generate",
    status_code=status.HTTP_200_OK,
    response_model=SecurityCodesResponse,
)
async def generate_security_codes(
    request: GenerateRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    service: SecurityCodeService = Depends(get_security_service),
):
    """
    Generate Security Codes

    Opens a 30-minute security session and returns its forward/backward
    code pair. The codes are shown once; use the refresh endpoint to reissue.

    Raises:
        - 500 Internal Server Error: no unique session ID could be drawn
    """
    command = GenerateSecurityCodesCommand(
        user_id=request.user_id,
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )

    use_case = GenerateSecurityCodesUseCase(uow, service.generator, service.policy)
    result = await use_case.execute(command)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post(
    "/validate",
    status_code=status.HTTP_200_OK,
    response_model=ValidateSecurityCodesResponse,
    responses={401: {"model": ValidationFailedResponse}},
)
async def validate_security_codes(
    request: ValidateRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    service: SecurityCodeService = Depends(get_security_service),
):
    """
    Validate Security Codes

    Accepts a code pair exactly once. Rejections carry a reason:
    NotFound, AlreadyUsed, Expired, CodeMismatch or UserMismatch.

    Raises:
        - 401 Unauthorized: codes rejected (see reason)
        - 422 Unprocessable Entity: session_id or a code is missing
    """
    command = ValidateSecurityCodesCommand(
        session_id=request.session_id,
        forward_code=request.forward_code,
        backward_code=request.backward_code,
        user_id=request.user_id,
    )

    use_case = ValidateSecurityCodesUseCase(uow, service.generator, service.policy)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        logger.warning(f"Security code validation rejected: {error.code}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"valid": False, "reason": error.code, "message": error.message},
        )

    return result.value


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=SecurityCodesResponse,
)
async def refresh_security_codes(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    service: SecurityCodeService = Depends(get_security_service),
):
    """
    Refresh Security Codes

    Reissues both codes of an unused, unexpired session and restarts its
    30-minute window. On failure, generate a new session instead.

    Raises:
        - 404 Not Found: session missing, already used or expired
    """
    use_case = RefreshSecurityCodesUseCase(uow, service.generator, service.policy)
    result = await use_case.execute(request.session_id)

    if result.is_err():
        error = result.error
        if error.code == SecurityCodeFailure.refresh_precondition_failed.value:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.get(
    "/status",
    status_code=status.HTTP_200_OK,
    response_model=SecurityStatusResponse,
)
async def security_status(
    uow: UnitOfWork = Depends(get_unit_of_work),
    service: SecurityCodeService = Depends(get_security_service),
):
    """
    Security Status

    Sweeps expired sessions, then reports how many remain.
    """
    use_case = GetSecurityStatusUseCase(uow, service.policy)
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
