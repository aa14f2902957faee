import pytest

from agora.infra import rate_limit


@pytest.mark.asyncio
async def test_budget_exhausts_within_window(fake_redis):
	now = 1_800_000_030.0
	results = [await rate_limit.consume("search", "viewer-1", limit=2, now=now) for _ in range(3)]

	assert [r.allowed for r in results] == [True, True, False]
	assert results[-1].used == 3
	assert results[0].reset_in == 30
	ttl = await fake_redis.ttl(rate_limit.window_key("search", "viewer-1", 60, now))
	assert 0 < ttl <= 60


@pytest.mark.asyncio
async def test_windows_and_actors_are_independent():
	now = 1_800_000_030.0
	assert (await rate_limit.consume("search", "viewer-1", limit=1, now=now)).allowed
	assert (await rate_limit.consume("search", "viewer-2", limit=1, now=now)).allowed
	assert (await rate_limit.consume("suggestions", "viewer-1", limit=1, now=now)).allowed
	assert (await rate_limit.consume("search", "viewer-1", limit=1, now=now + 60)).allowed


@pytest.mark.asyncio
async def test_zero_limit_always_denies():
	budget = await rate_limit.consume("search", "viewer-1", limit=0)
	assert budget.allowed is False
