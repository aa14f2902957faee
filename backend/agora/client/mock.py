"""In-memory stand-in for :class:`agora.client.live.UserSearchClient`."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from agora.client import errors
from agora.client.live import SearchPage
from agora.domain.handles import policy as handle_policy
from agora.domain.handles.schemas import HandleCheckResponse
from agora.domain.search.schemas import SearchUserOut

PREVIEW_USERS: tuple[SearchUserOut, ...] = (
	SearchUserOut(user_id="preview-1", handle="rocky.evans", display_handle="Rocky.Evans", display_name="Rocky Evans", trust_level=2, verified=True, followers_count=15420),
	SearchUserOut(user_id="preview-2", handle="sarah_chen", display_name="Sarah Chen", trust_level=1, followers_count=8930),
	SearchUserOut(user_id="preview-3", handle="mike.jones", display_name="Mike Jones", followers_count=342),
	SearchUserOut(user_id="preview-4", handle="emma.wilson", display_name="Emma Wilson", trust_level=2, verified=True, followers_count=45200),
	SearchUserOut(user_id="preview-5", handle="alex.dev", display_name="Alex Developer", trust_level=1, followers_count=1250),
)


class UserSearchClientMock:
	"""Serves canned users with an optional simulated delay or forced failure."""

	def __init__(
		self,
		users: Optional[Sequence[SearchUserOut]] = None,
		*,
		delay: float = 0.1,
		should_fail: bool = False,
	) -> None:
		self.users = list(PREVIEW_USERS if users is None else users)
		self.delay = delay
		self.should_fail = should_fail
		self.calls: list[tuple[str, str]] = []

	@classmethod
	def empty(cls) -> "UserSearchClientMock":
		return cls(users=[])

	@classmethod
	def failing(cls) -> "UserSearchClientMock":
		return cls(should_fail=True)

	@classmethod
	def instant(cls, users: Optional[Sequence[SearchUserOut]] = None) -> "UserSearchClientMock":
		return cls(users=users, delay=0.0)

	async def _simulate(self, operation: str, argument: str) -> None:
		self.calls.append((operation, argument))
		if self.delay > 0:
			await asyncio.sleep(self.delay)
		if self.should_fail:
			raise errors.ServerError(500)

	async def search(self, q: str, limit: int = 20, after: Optional[str] = None) -> SearchPage:
		await self._simulate("search", q)
		needle = q.strip().lower().replace("@", "")
		matches = sorted(
			(u for u in self.users if needle in u.handle.lower() or needle in u.display_name.lower()),
			key=lambda u: u.handle,
		)
		if after:
			matches = [u for u in matches if u.handle > after]
		items = matches[:limit]
		has_more = len(matches) > limit
		return SearchPage(
			items=items,
			has_more=has_more,
			next_cursor=items[-1].handle if has_more and items else None,
			query=needle,
		)

	async def suggested_creators(self, limit: int = 10) -> list[SearchUserOut]:
		await self._simulate("suggested_creators", str(limit))
		ranked = sorted(self.users, key=lambda u: (-u.followers_count, u.handle))
		return ranked[:limit]

	async def lookup_by_handle(self, handle: str) -> Optional[SearchUserOut]:
		await self._simulate("lookup_by_handle", handle)
		clean = handle.strip().lower().replace("@", "")
		return next((u for u in self.users if u.handle.lower() == clean), None)

	async def check_handle(self, handle: str) -> HandleCheckResponse:
		await self._simulate("check_handle", handle)
		canonical = handle_policy.normalise_handle(handle)
		taken = {u.handle.lower() for u in self.users}
		if canonical not in taken:
			return HandleCheckResponse(available=True)
		suggestions = [s for s in handle_policy.suggest_alternatives(canonical) if s not in taken]
		return HandleCheckResponse(available=False, suggestions=suggestions)
