"""
Security code flows against the SQLModel-backed store
"""

import asyncio

import pytest

from src.adapter.repositories.security_session_repository import SecuritySessionRepository
from src.app.use_cases.security import (
    GenerateSecurityCodesCommand,
    GenerateSecurityCodesUseCase,
    GetSecurityStatusUseCase,
    RefreshSecurityCodesUseCase,
    ValidateSecurityCodesCommand,
    ValidateSecurityCodesUseCase,
)


async def _generate(service, user_id=None):
    async with service.unit_of_work() as uow:
        result = await GenerateSecurityCodesUseCase(
            uow, service.generator, service.policy
        ).execute(GenerateSecurityCodesCommand(user_id=user_id))
    return result.value


async def _validate(service, codes, **overrides):
    fields = {
        "session_id": codes.session_id,
        "forward_code": codes.forward_code,
        "backward_code": codes.backward_code,
    }
    fields.update(overrides)
    async with service.unit_of_work() as uow:
        return await ValidateSecurityCodesUseCase(
            uow, service.generator, service.policy
        ).execute(ValidateSecurityCodesCommand(**fields))


async def _refresh(service, session_id):
    async with service.unit_of_work() as uow:
        return await RefreshSecurityCodesUseCase(
            uow, service.generator, service.policy
        ).execute(session_id)


@pytest.mark.asyncio
async def test_sql_generate_and_validate_once(sql_service):
    codes = await _generate(sql_service, user_id="u1")

    first = await _validate(sql_service, codes, user_id="u1")
    assert first.is_ok()

    replay = await _validate(sql_service, codes, user_id="u1")
    assert replay.error.code == "AlreadyUsed"


@pytest.mark.asyncio
async def test_sql_expired_session_is_deleted(sql_service, clock):
    codes = await _generate(sql_service)
    clock.advance(minutes=31)

    assert (await _validate(sql_service, codes)).error.code == "Expired"
    assert (await _validate(sql_service, codes)).error.code == "NotFound"


@pytest.mark.asyncio
async def test_sql_refresh_then_validate(sql_service, clock):
    codes = await _generate(sql_service)
    clock.advance(minutes=5)

    refreshed = await _refresh(sql_service, codes.session_id)
    assert refreshed.is_ok()
    assert refreshed.value.forward_code != codes.forward_code
    assert refreshed.value.expires_at == clock.now + sql_service.policy.session_duration

    assert (await _validate(sql_service, codes)).error.code == "CodeMismatch"
    assert (await _validate(sql_service, refreshed.value)).is_ok()

    used = await _refresh(sql_service, codes.session_id)
    assert used.error.code == "RefreshPreconditionFailed"


@pytest.mark.asyncio
async def test_sql_mark_used_is_compare_and_set(sql_service):
    codes = await _generate(sql_service)

    now = sql_service.policy.clock()

    async with sql_service.unit_of_work() as uow:
        async with uow:
            repo = uow.security_sessions
            assert await repo.mark_used(codes.session_id, codes.forward_code, "stale", now) is False
            assert await repo.mark_used(
                codes.session_id, codes.forward_code, codes.backward_code, now
            ) is True
            assert await repo.mark_used(
                codes.session_id, codes.forward_code, codes.backward_code, now
            ) is False
            await uow.commit()


@pytest.mark.asyncio
async def test_sql_concurrent_validations_accept_exactly_once(sql_service):
    codes = await _generate(sql_service)

    results = await asyncio.gather(*(_validate(sql_service, codes) for _ in range(10)))

    assert sum(1 for r in results if r.is_ok()) == 1
    assert all(r.error.code == "AlreadyUsed" for r in results if r.is_err())


@pytest.mark.asyncio
async def test_sql_status_sweeps_expired(sql_service, clock):
    await _generate(sql_service)
    clock.advance(minutes=20)
    await _generate(sql_service)
    clock.advance(minutes=15)

    async with sql_service.unit_of_work() as uow:
        status = (await GetSecurityStatusUseCase(uow, sql_service.policy).execute()).value

    assert status.active_sessions == 1


@pytest.mark.asyncio
async def test_sql_refresh_between_check_and_consume_rejects_stale_codes(
    sql_service, monkeypatch
):
    """Codes rotated by a committed refresh cannot consume the session afterwards"""
    codes = await _generate(sql_service)
    consume = SecuritySessionRepository.mark_used
    refreshed = {}

    async def refresh_then_consume(self, *args, **kwargs):
        if "codes" not in refreshed:
            result = await _refresh(sql_service, codes.session_id)
            refreshed["codes"] = result.value
        return await consume(self, *args, **kwargs)

    monkeypatch.setattr(SecuritySessionRepository, "mark_used", refresh_then_consume)

    stale = await _validate(sql_service, codes)
    assert stale.is_err()
    assert stale.error.code == "CodeMismatch"

    monkeypatch.setattr(SecuritySessionRepository, "mark_used", consume)
    assert (await _validate(sql_service, refreshed["codes"])).is_ok()


@pytest.mark.asyncio
async def test_sql_generate_with_oversized_user_agent(sql_service):
    async with sql_service.unit_of_work() as uow:
        result = await GenerateSecurityCodesUseCase(
            uow, sql_service.generator, sql_service.policy
        ).execute(GenerateSecurityCodesCommand(user_agent="Mozilla/5.0 " * 200))

    assert result.is_ok()

    async with sql_service.unit_of_work() as uow:
        async with uow:
            stored = await uow.security_sessions.get_by_id(result.value.session_id)
            assert len(stored.user_agent) == 512
            assert stored.user_agent.startswith("Mozilla/5.0 ")
