from typing import AsyncIterator

from fastapi import Depends, Request

from src.adapter.services.security_service import SecurityCodeService
from src.app.services.unit_of_work import UnitOfWork


def get_security_service(request: Request) -> SecurityCodeService:
    """The process-wide service built in the app lifespan"""
    return request.app.state.security


async def get_unit_of_work(
    service: SecurityCodeService = Depends(get_security_service),
) -> AsyncIterator[UnitOfWork]:
    async with service.unit_of_work() as uow:
        yield uow
