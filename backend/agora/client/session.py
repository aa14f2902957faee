"""Debounced, cancellable search session driving a search client.

A session holds the transient result list for one search box. Each call to
:meth:`SearchSession.submit` cancels whatever is debouncing or in flight and
starts a new generation; results are applied only while their generation is
still current, so a slow response for an old query never overwrites a newer
one.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from contextlib import suppress
from typing import Callable, Optional, Protocol

from agora.client import errors
from agora.client.live import SearchPage
from agora.domain.search.schemas import SearchUserOut

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3


class SearchClient(Protocol):
	async def search(self, q: str, limit: int = 20, after: Optional[str] = None) -> SearchPage:
		...

	async def suggested_creators(self, limit: int = 10) -> list[SearchUserOut]:
		...


class SessionState(str, enum.Enum):
	IDLE = "idle"
	DEBOUNCING = "debouncing"
	IN_FLIGHT = "in_flight"
	RESULTS_READY = "results_ready"
	FAILED = "failed"
	CANCELED = "canceled"


class SearchSession:
	def __init__(
		self,
		client: SearchClient,
		*,
		debounce_seconds: float = DEBOUNCE_SECONDS,
		limit: int = 20,
		suggestions_limit: int = 10,
		on_change: Optional[Callable[["SearchSession"], None]] = None,
	) -> None:
		self._client = client
		self._debounce = debounce_seconds
		self._limit = limit
		self._suggestions_limit = suggestions_limit
		self._on_change = on_change
		self._generation = 0
		self._task: Optional[asyncio.Task] = None
		self._loading_more = False

		self.state = SessionState.IDLE
		self.query = ""
		self.results: list[SearchUserOut] = []
		self.has_more = False
		self.next_cursor: Optional[str] = None
		self.error: Optional[errors.UserSearchError] = None

	@property
	def generation(self) -> int:
		return self._generation

	@property
	def is_loading_more(self) -> bool:
		return self._loading_more

	def _set_state(self, state: SessionState) -> None:
		self.state = state
		if self._on_change is not None:
			self._on_change(self)

	def submit(self, query: str) -> asyncio.Task:
		"""Start a new generation for ``query``, cancelling the previous one."""

		if self._task is not None and not self._task.done():
			self._task.cancel()
		self._generation += 1
		self.query = query
		self.error = None
		self._set_state(SessionState.DEBOUNCING)
		self._task = asyncio.create_task(self._run(self._generation, query))
		return self._task

	def cancel(self) -> None:
		if self._task is None or self._task.done():
			return
		self._generation += 1
		self._task.cancel()
		self._set_state(SessionState.CANCELED)

	async def wait(self) -> None:
		"""Wait for the current generation to settle."""

		task = self._task
		if task is None:
			return
		with suppress(asyncio.CancelledError):
			await task

	async def _fetch(self, query: str) -> SearchPage:
		if not query.strip():
			items = await self._client.suggested_creators(limit=self._suggestions_limit)
			return SearchPage(items=list(items))
		return await self._client.search(query, limit=self._limit)

	async def _run(self, generation: int, query: str) -> None:
		try:
			await asyncio.sleep(self._debounce)
			if generation != self._generation:
				return
			self._set_state(SessionState.IN_FLIGHT)
			page = await self._fetch(query)
		except asyncio.CancelledError:
			# superseded or cancelled; the newer generation owns the state
			return
		except errors.UserSearchError as exc:
			if generation == self._generation:
				logger.info("search session failed generation=%d error=%s", generation, exc.__class__.__name__)
				self.error = exc
				self._set_state(SessionState.FAILED)
			return

		if generation != self._generation:
			return
		self.results = list(page.items)
		self.has_more = page.has_more
		self.next_cursor = page.next_cursor
		self._set_state(SessionState.RESULTS_READY)

	async def load_more(self) -> bool:
		"""Append the next page; returns False when there was nothing to load."""

		if self._loading_more or not self.has_more or not self.next_cursor:
			return False
		if self.state is not SessionState.RESULTS_READY:
			return False
		generation = self._generation
		self._loading_more = True
		try:
			page = await self._client.search(self.query, limit=self._limit, after=self.next_cursor)
		except errors.UserSearchError as exc:
			if generation == self._generation:
				self.error = exc
			return False
		finally:
			self._loading_more = False

		if generation != self._generation:
			return False
		seen = {item.handle for item in self.results}
		self.results.extend(item for item in page.items if item.handle not in seen)
		self.has_more = page.has_more
		self.next_cursor = page.next_cursor
		if self._on_change is not None:
			self._on_change(self)
		return True
