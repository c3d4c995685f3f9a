from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from src.adapter.services.security_service import SecurityCodeService
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(
    ApplicationConfig, service: Optional[SecurityCodeService] = None
) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    # Built eagerly so a missing secret stops the process before it serves
    security_service = service or SecurityCodeService.from_config(ApplicationConfig)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.security = security_service
        await security_service.startup()
        try:
            yield
        finally:
            await security_service.shutdown()

    app = FastAPI(title="Security Code API", version="0.1.0", lifespan=lifespan)
    app.state.security = security_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, security

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(
        security.router, prefix=ApplicationConfig.API_PREFIX, tags=["Security"]
    )

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
