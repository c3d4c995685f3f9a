import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.repositories.in_memory_security_session_repository import (
    InMemorySecuritySessionRepository,
)
from src.adapter.services.unit_of_work import InMemoryUnitOfWork
from src.app.services.security_codes import SecurityCodeGenerator, SecurityCodePolicy
from tests.fixtures.clock import FakeClock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def generator():
    return SecurityCodeGenerator("unit-test-secret")


@pytest.fixture
def policy(clock):
    return SecurityCodePolicy(clock=clock)


@pytest.fixture
def repository():
    return InMemorySecuritySessionRepository()


@pytest.fixture
def uow(repository):
    return InMemoryUnitOfWork(repository)
