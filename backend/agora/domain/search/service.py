"""Service layer for user search and suggested creators."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from agora.domain.search import normalizer, pagination, policy, ranking, schemas
from agora.domain.search.models import UserCandidate
from agora.domain.search.store import SearchStore
from agora.obs import metrics as obs_metrics
from agora.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchService:
	"""Ranks and paginates candidates supplied by a :class:`SearchStore`.

	One instance is built per application and handed to request handlers
	through dependency injection; it keeps no per-request state.
	"""

	def __init__(
		self,
		store: SearchStore,
		*,
		candidate_cap: Optional[int] = None,
		config_ttl_seconds: Optional[float] = None,
		clock: Callable[[], datetime] | None = None,
	) -> None:
		self._store = store
		self._candidate_cap = candidate_cap or settings.search_candidate_cap
		self._config_ttl = settings.search_config_ttl_seconds if config_ttl_seconds is None else config_ttl_seconds
		self._clock = clock or (lambda: datetime.now(timezone.utc))
		self._config_cache: Optional[tuple[float, ranking.RankingConfig]] = None

	async def _call_store(self, operation: str, awaitable: Awaitable[T]) -> T:
		try:
			return await awaitable
		except Exception as exc:
			logger.exception("search.store_failed operation=%s", operation)
			raise policy.StoreUnavailable() from exc

	async def ranking_config(self) -> ranking.RankingConfig:
		now = time.monotonic()
		cached = self._config_cache
		if cached and now - cached[0] < self._config_ttl:
			return cached[1]
		payload: Optional[dict[str, Any]] = await self._call_store("config", self._store.load_ranking_config())
		config = ranking.RankingConfig.from_mapping(payload)
		self._config_cache = (now, config)
		return config

	def invalidate_ranking_config(self) -> None:
		self._config_cache = None

	def _rank(
		self,
		candidates: Iterable[UserCandidate],
		query: normalizer.NormalizedQuery,
		config: ranking.RankingConfig,
		*,
		viewer_id: str,
	) -> list[UserCandidate]:
		now = self._clock()
		ranked: list[UserCandidate] = []
		dropped = 0
		for candidate in candidates:
			if not policy.is_well_formed(candidate):
				dropped += 1
				continue
			if not policy.allow_user_search(candidate, viewer_id=viewer_id):
				continue
			candidate.score_hint = ranking.score_candidate(candidate, query, config, now=now).score
			ranked.append(candidate)
		if dropped:
			obs_metrics.inc_candidates_dropped(dropped)
			logger.warning("search.candidates_dropped count=%d", dropped)
		ranked.sort(key=pagination.search_order)
		return ranked

	async def _suggestions(self, viewer_id: str, limit: int) -> list[UserCandidate]:
		candidates = await self._call_store(
			"suggestions",
			self._store.suggestion_candidates(viewer_id=viewer_id, limit=limit),
		)
		visible: list[UserCandidate] = []
		dropped = 0
		for candidate in candidates:
			if not policy.is_well_formed(candidate):
				dropped += 1
				continue
			if policy.allow_suggestion(candidate, viewer_id=viewer_id):
				visible.append(candidate)
		if dropped:
			obs_metrics.inc_candidates_dropped(dropped)
		visible.sort(key=pagination.suggestion_order)
		return visible[:limit]

	async def search_users(
		self,
		viewer_id: str,
		text: Optional[str],
		*,
		limit: Any = None,
		after: Optional[str] = None,
		suggest_on_empty: bool = False,
	) -> schemas.SearchResponse:
		"""Rank users matching ``text`` for ``viewer_id`` and return one page.

		With ``suggest_on_empty`` an empty query returns the suggested-creators
		set instead of raising :class:`policy.EmptyQuery`.
		"""

		start = time.perf_counter()
		try:
			await policy.enforce_rate_limit(viewer_id, kind="search", limit=settings.search_per_minute)
			query = normalizer.normalize_query(text, limit, after, allow_empty=suggest_on_empty)
			if query.is_empty:
				suggested = await self._suggestions(viewer_id, query.limit)
				obs_metrics.inc_search_query("users_fallback")
				return schemas.SearchResponse(
					items=[schemas.SearchUserOut.from_candidate(c, with_score=False) for c in suggested],
					query="",
					count=len(suggested),
					has_more=False,
					next_cursor=None,
				)

			config = await self.ranking_config()
			candidates = await self._call_store(
				"search",
				self._store.search_candidates(
					viewer_id=viewer_id,
					query=query,
					cap=self._candidate_cap,
					config=config,
				),
			)
			ranked = self._rank(candidates, query, config, viewer_id=viewer_id)
			page = pagination.paginate(ranked, limit=query.limit, after=query.after)
			obs_metrics.inc_search_query("users")
			obs_metrics.observe_search_results("users", len(page.items))
			logger.info(
				"search.users len=%d exact=%s ranked=%d page=%d has_more=%s",
				len(query.text),
				query.is_exact_handle_query,
				len(ranked),
				len(page.items),
				page.has_more,
			)
			return schemas.SearchResponse(
				items=[schemas.SearchUserOut.from_candidate(c) for c in page.items],
				query=query.text,
				count=len(page.items),
				has_more=page.has_more,
				next_cursor=page.next_cursor,
			)
		finally:
			obs_metrics.observe_search_latency("users", time.perf_counter() - start)

	async def suggested_creators(self, viewer_id: str, *, limit: Any = None) -> schemas.SuggestedCreatorsResponse:
		start = time.perf_counter()
		try:
			await policy.enforce_rate_limit(viewer_id, kind="suggestions", limit=settings.suggestions_per_minute)
			page_limit = normalizer.clamp_limit(limit, default=normalizer.DEFAULT_SUGGESTIONS_LIMIT)
			suggested = await self._suggestions(viewer_id, page_limit)
			obs_metrics.inc_search_query("suggested_creators")
			obs_metrics.observe_search_results("suggested_creators", len(suggested))
			logger.info("search.suggested_creators results=%d", len(suggested))
			return schemas.SuggestedCreatorsResponse(
				items=[schemas.SearchUserOut.from_candidate(c, with_score=False) for c in suggested],
				count=len(suggested),
			)
		finally:
			obs_metrics.observe_search_latency("suggested_creators", time.perf_counter() - start)

	async def lookup_by_handle(self, viewer_id: str, handle: str) -> Optional[schemas.SearchUserOut]:
		"""Return the user whose handle equals ``handle`` (case-insensitive), if visible."""

		clean = (handle or "").strip().lstrip("@").strip().lower()
		if not clean:
			return None
		response = await self.search_users(viewer_id, f"@{clean}", limit=1)
		for item in response.items:
			if item.handle.lower() == clean:
				return item
		return None
