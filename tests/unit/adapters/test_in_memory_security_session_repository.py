"""
Unit tests for the in-memory security session repository
"""

from datetime import datetime, timedelta

import pytest

from src.domain.entities import SecuritySession

NOW = datetime(2024, 1, 1, 12, 0, 0)


def _session(session_id="sid", minutes=30, **overrides):
    fields = dict(
        session_id=session_id,
        forward_code="f",
        backward_code="b",
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return SecuritySession(**fields)


@pytest.mark.asyncio
async def test_add_if_absent_keeps_existing(repository):
    assert await repository.add_if_absent(_session(forward_code="first")) is True
    assert await repository.add_if_absent(_session(forward_code="second")) is False

    assert (await repository.get_by_id("sid")).forward_code == "first"


@pytest.mark.asyncio
async def test_mark_used_single_winner(repository):
    await repository.add_if_absent(_session())

    assert await repository.mark_used("sid", "f", "b", NOW) is True
    assert await repository.mark_used("sid", "f", "b", NOW) is False
    assert await repository.mark_used("missing", "f", "b", NOW) is False


@pytest.mark.asyncio
async def test_mark_used_requires_current_codes(repository):
    """Test the flip is refused for codes the session no longer holds"""
    await repository.add_if_absent(_session())

    assert await repository.mark_used("sid", "f", "stale", NOW) is False
    assert await repository.mark_used("sid", "stale", "b", NOW) is False
    assert (await repository.get_by_id("sid")).is_used is False


@pytest.mark.asyncio
async def test_mark_used_refuses_expired_session(repository):
    await repository.add_if_absent(_session(minutes=-1))

    assert await repository.mark_used("sid", "f", "b", NOW) is False
    assert (await repository.get_by_id("sid")).is_used is False


@pytest.mark.asyncio
async def test_replace_codes_on_live_session(repository):
    await repository.add_if_absent(_session())
    new_expiry = NOW + timedelta(hours=1)

    updated = await repository.replace_codes("sid", "f2", "b2", new_expiry, NOW)

    assert updated.forward_code == "f2"
    assert updated.backward_code == "b2"
    assert updated.expires_at == new_expiry
    assert updated.is_used is False


@pytest.mark.asyncio
async def test_replace_codes_rejects_used_expired_or_missing(repository):
    await repository.add_if_absent(_session("used", is_used=True))
    await repository.add_if_absent(_session("stale", minutes=-1))

    assert await repository.replace_codes("used", "x", "y", NOW, NOW) is None
    assert await repository.replace_codes("stale", "x", "y", NOW, NOW) is None
    assert await repository.replace_codes("missing", "x", "y", NOW, NOW) is None
    assert (await repository.get_by_id("used")).forward_code == "f"


@pytest.mark.asyncio
async def test_delete_and_count(repository):
    await repository.add_if_absent(_session("a"))
    await repository.add_if_absent(_session("b"))

    assert await repository.count() == 2
    assert await repository.delete("a") is True
    assert await repository.delete("a") is False
    assert [s.session_id for s in await repository.list_all()] == ["b"]


@pytest.mark.asyncio
async def test_delete_expired(repository):
    await repository.add_if_absent(_session("live", minutes=5))
    await repository.add_if_absent(_session("boundary", minutes=0))
    await repository.add_if_absent(_session("gone", minutes=-5))

    assert await repository.delete_expired(NOW) == 1
    assert {s.session_id for s in await repository.list_all()} == {"live", "boundary"}
