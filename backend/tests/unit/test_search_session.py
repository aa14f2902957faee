import asyncio

import pytest

from agora.client import errors
from agora.client.handles import HandleChecker
from agora.client.live import SearchPage
from agora.client.mock import UserSearchClientMock
from agora.client.session import SearchSession, SessionState
from agora.domain.handles.policy import HandleFormatValidation
from agora.domain.search.schemas import SearchUserOut

DEBOUNCE = 0.01


def _user(handle, followers=0):
	return SearchUserOut(user_id=f"id-{handle}", handle=handle, display_name=handle.title(), followers_count=followers)


class _SlowFirstClient:
	"""Answers each query after a per-query delay."""

	def __init__(self, delays):
		self.delays = delays
		self.completed: list[str] = []

	async def search(self, q, limit=20, after=None):
		await asyncio.sleep(self.delays.get(q, 0.0))
		self.completed.append(q)
		return SearchPage(items=[_user(q)], query=q)

	async def suggested_creators(self, limit=10):
		return []


@pytest.mark.asyncio
async def test_newer_query_wins_over_slower_older_one():
	client = _SlowFirstClient({"ro": 0.2, "rocky": 0.0})
	session = SearchSession(client, debounce_seconds=DEBOUNCE)

	session.submit("ro")
	await asyncio.sleep(0.05)
	assert session.state is SessionState.IN_FLIGHT
	session.submit("rocky")
	await session.wait()
	await asyncio.sleep(0.25)

	assert session.state is SessionState.RESULTS_READY
	assert [item.handle for item in session.results] == ["rocky"]
	assert client.completed == ["rocky"]


@pytest.mark.asyncio
async def test_rapid_typing_is_debounced_to_last_query():
	client = UserSearchClientMock.instant()
	session = SearchSession(client, debounce_seconds=0.05)

	for partial in ("r", "ro", "roc", "rock"):
		session.submit(partial)
		await asyncio.sleep(0.005)
	await session.wait()

	assert client.calls == [("search", "rock")]
	assert [item.handle for item in session.results] == ["rocky.evans"]
	assert session.generation == 4


@pytest.mark.asyncio
async def test_empty_query_loads_suggested_creators():
	client = UserSearchClientMock.instant()
	session = SearchSession(client, debounce_seconds=DEBOUNCE)

	session.submit("  ")
	await session.wait()

	counts = [item.followers_count for item in session.results]
	assert counts == sorted(counts, reverse=True)
	assert client.calls[0][0] == "suggested_creators"
	assert session.has_more is False


@pytest.mark.asyncio
async def test_failure_moves_to_failed_state():
	session = SearchSession(UserSearchClientMock(delay=0.0, should_fail=True), debounce_seconds=DEBOUNCE)

	session.submit("rock")
	await session.wait()

	assert session.state is SessionState.FAILED
	assert isinstance(session.error, errors.ServerError)
	assert session.results == []


@pytest.mark.asyncio
async def test_cancel_leaves_results_untouched():
	client = UserSearchClientMock(delay=0.2)
	session = SearchSession(client, debounce_seconds=DEBOUNCE)

	session.submit("rock")
	await asyncio.sleep(0.05)
	session.cancel()
	await session.wait()

	assert session.state is SessionState.CANCELED
	assert session.results == []


@pytest.mark.asyncio
async def test_load_more_appends_next_page():
	users = [_user(f"tester{idx:02d}") for idx in range(7)]
	client = UserSearchClientMock.instant(users)
	session = SearchSession(client, debounce_seconds=DEBOUNCE, limit=5)

	session.submit("tester")
	await session.wait()
	assert session.has_more is True
	assert session.next_cursor == "tester04"

	assert await session.load_more() is True
	assert [item.handle for item in session.results] == [u.handle for u in users]
	assert session.has_more is False
	assert await session.load_more() is False


@pytest.mark.asyncio
async def test_load_more_is_dropped_when_a_new_query_starts():
	users = [_user(f"tester{idx:02d}") for idx in range(7)]
	client = UserSearchClientMock(users, delay=0.05)
	session = SearchSession(client, debounce_seconds=DEBOUNCE, limit=5)

	session.submit("tester")
	await session.wait()
	loading = asyncio.create_task(session.load_more())
	await asyncio.sleep(0)
	assert session.is_loading_more is True
	session.submit("tester06")

	assert await loading is False
	await session.wait()
	assert [item.handle for item in session.results] == ["tester06"]


@pytest.mark.asyncio
async def test_handle_checker_validates_locally_first():
	client = UserSearchClientMock.instant()
	checker = HandleChecker(client, debounce_seconds=DEBOUNCE)

	short = await checker.check("ab")
	reserved = await checker.check("admin")

	assert short.validation is HandleFormatValidation.TOO_SHORT
	assert short.message == "Handle must be at least 3 characters"
	assert reserved.validation is HandleFormatValidation.RESERVED
	assert reserved.suggestions
	assert client.calls == []


@pytest.mark.asyncio
async def test_handle_checker_only_sends_latest_handle():
	client = UserSearchClientMock.instant()
	checker = HandleChecker(client, debounce_seconds=0.05)

	first = asyncio.create_task(checker.check("rocky.ev"))
	await asyncio.sleep(0.01)
	second = asyncio.create_task(checker.check("Rocky.Evans"))

	assert await first is None
	result = await second
	assert client.calls == [("check_handle", "rocky.evans")]
	assert result.available is False
	assert "rocky.evans1" in result.suggestions
