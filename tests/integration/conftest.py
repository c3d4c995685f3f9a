import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from src.adapter.services.security_service import SecurityCodeService
from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from tests.fixtures.clock import FakeClock


class IntegrationConfig(ApplicationConfig):
    SECURITY_SECRET = "integration-test-secret"
    API_PREFIX = "/api"
    STORE_BACKEND = "memory"
    SWEEP_INTERVAL_SECONDS = 0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return SecurityCodeService(
        generator=SecurityCodeGenerator(IntegrationConfig.SECURITY_SECRET),
        policy=SecurityCodePolicy(clock=clock),
    )


@pytest_asyncio.fixture
async def sql_service(tmp_path, clock):
    service = SecurityCodeService(
        generator=SecurityCodeGenerator(IntegrationConfig.SECURITY_SECRET),
        policy=SecurityCodePolicy(clock=clock),
        db_uri=f"sqlite+aiosqlite:///{tmp_path / 'security.db'}",
    )
    await service.startup()
    yield service
    await service.shutdown()


@pytest_asyncio.fixture
async def client(service):
    from src.api.app import create_app

    app = create_app(IntegrationConfig, service=service)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
