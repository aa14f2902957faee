"""Candidate stores feeding the search service.

Stores return candidates together with their raw text features and viewer
relationship flags; ranking and pagination happen in the service. Both stores
apply viewer exclusions before the candidate cap, so the cap is spent on
visible rows only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional, Protocol

import asyncpg

from agora.domain.search import models, policy
from agora.domain.search.normalizer import NormalizedQuery
from agora.domain.search.ranking import RankingConfig, trigram_similarity

logger = logging.getLogger(__name__)


class SearchStore(Protocol):
	async def search_candidates(
		self,
		*,
		viewer_id: str,
		query: NormalizedQuery,
		cap: int,
		config: RankingConfig,
	) -> list[models.UserCandidate]:
		...

	async def suggestion_candidates(self, *, viewer_id: str, limit: int) -> list[models.UserCandidate]:
		...

	async def taken_handles(self, handles: Iterable[str]) -> set[str]:
		...

	async def load_ranking_config(self) -> Optional[dict[str, Any]]:
		...


class MemorySearchStore:
	"""In-process store used for local development and tests."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self.users: list[models.MemoryUser] = []
		self.graph = models.ViewerGraph()
		self.config: Optional[dict[str, Any]] = None

	async def reset(self) -> None:
		async with self._lock:
			self.users = []
			self.graph = models.ViewerGraph()
			self.config = None

	async def seed(
		self,
		*,
		users: Iterable[models.MemoryUser] | None = None,
		blocks: Iterable[tuple[str, str]] | None = None,
		mutes: Iterable[tuple[str, str]] | None = None,
		follows: Iterable[tuple[str, str]] | None = None,
		config: Optional[dict[str, Any]] = None,
	) -> None:
		async with self._lock:
			self.users = list(users or [])
			self.graph = models.ViewerGraph(
				blocks=set(blocks or []),
				mutes=set(mutes or []),
				follows=set(follows or []),
			)
			self.config = dict(config) if config else None

	def _candidate(self, user: models.MemoryUser, viewer_id: str) -> models.UserCandidate:
		user_id = user.user_id or ""
		return models.UserCandidate(
			user_id=user_id,
			handle=(user.handle or "").lower(),
			display_name=user.display_name,
			display_handle=user.display_handle or user.handle,
			avatar_url=user.avatar_url,
			trust_level=user.trust_level,
			verified=user.verified,
			followers_count=user.followers_count,
			last_active_at=user.last_active_at,
			is_active=user.is_active,
			banned=user.banned,
			blocked=(viewer_id, user_id) in self.graph.blocks or (user_id, viewer_id) in self.graph.blocks,
			muted=(viewer_id, user_id) in self.graph.mutes,
			followed=(viewer_id, user_id) in self.graph.follows,
		)

	async def search_candidates(
		self,
		*,
		viewer_id: str,
		query: NormalizedQuery,
		cap: int,
		config: RankingConfig,
	) -> list[models.UserCandidate]:
		needle = query.text
		async with self._lock:
			results: list[models.UserCandidate] = []
			for user in self.users:
				candidate = self._candidate(user, viewer_id)
				if not policy.allow_user_search(candidate, viewer_id=viewer_id):
					continue
				handle = candidate.handle
				display = candidate.display_name.lower()
				candidate.similarity_handle = trigram_similarity(handle, needle)
				candidate.similarity_display = trigram_similarity(display, needle)
				candidate.display_substring = bool(display) and needle in display
				matched = (
					(bool(handle) and needle in handle)
					or candidate.display_substring
					or candidate.similarity_handle > config.sim_handle_threshold
					or candidate.similarity_display > config.sim_name_threshold
				)
				if matched:
					results.append(candidate)
		results.sort(key=lambda c: (-max(c.similarity_handle, c.similarity_display), c.handle))
		return results[:cap]

	async def suggestion_candidates(self, *, viewer_id: str, limit: int) -> list[models.UserCandidate]:
		async with self._lock:
			return [self._candidate(user, viewer_id) for user in self.users]

	async def taken_handles(self, handles: Iterable[str]) -> set[str]:
		wanted = {handle.lower() for handle in handles}
		async with self._lock:
			return {user.handle.lower() for user in self.users if user.handle and user.handle.lower() in wanted}

	async def load_ranking_config(self) -> Optional[dict[str, Any]]:
		async with self._lock:
			return dict(self.config) if self.config else None


_VISIBLE_TO_VIEWER = """
	u.is_active = TRUE
	AND u.id <> $1::uuid
	AND NOT EXISTS (SELECT 1 FROM banned_users b WHERE b.user_id = u.id)
	AND NOT EXISTS (
		SELECT 1 FROM blocks bl
		WHERE (bl.blocker_id = $1::uuid AND bl.blocked_id = u.id)
			OR (bl.blocker_id = u.id AND bl.blocked_id = $1::uuid)
	)
	AND NOT EXISTS (SELECT 1 FROM mutes m WHERE m.muter_id = $1::uuid AND m.muted_id = u.id)
"""


class PostgresSearchStore:
	"""Candidate expansion over the users table using pg_trgm."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	@staticmethod
	def _from_row(row: asyncpg.Record) -> models.UserCandidate:
		user_id = row["id"]
		return models.UserCandidate(
			user_id=str(user_id) if user_id is not None else "",
			handle=row["handle"] or "",
			display_name=row["display_name"] or "",
			display_handle=row["display_handle"],
			avatar_url=row["avatar_url"],
			trust_level=int(row["trust_level"] or 0),
			verified=bool(row["verified"]),
			followers_count=int(row["followers_count"] or 0),
			last_active_at=row["last_active_at"],
		)

	async def search_candidates(
		self,
		*,
		viewer_id: str,
		query: NormalizedQuery,
		cap: int,
		config: RankingConfig,
	) -> list[models.UserCandidate]:
		async with self._pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT
					u.id,
					u.handle,
					u.display_handle,
					u.display_name,
					u.avatar_url,
					u.trust_level,
					u.verified,
					u.followers_count,
					u.last_active_at,
					similarity(lower(u.handle), $2) AS sim_handle,
					similarity(lower(coalesce(u.display_name, '')), $2) AS sim_display,
					strpos(lower(coalesce(u.display_name, '')), $2) > 0 AS display_substring
				FROM users u
				WHERE {_VISIBLE_TO_VIEWER}
					AND (
						strpos(lower(u.handle), $2) > 0
						OR strpos(lower(coalesce(u.display_name, '')), $2) > 0
						OR similarity(lower(u.handle), $2) > $3
						OR similarity(lower(coalesce(u.display_name, '')), $2) > $4
					)
				ORDER BY
					GREATEST(similarity(lower(u.handle), $2), similarity(lower(coalesce(u.display_name, '')), $2)) DESC,
					u.handle
				LIMIT $5
				""",
				viewer_id,
				query.text,
				config.sim_handle_threshold,
				config.sim_name_threshold,
				cap,
			)
		candidates: list[models.UserCandidate] = []
		for row in rows:
			candidate = self._from_row(row)
			candidate.similarity_handle = float(row["sim_handle"] or 0.0)
			candidate.similarity_display = float(row["sim_display"] or 0.0)
			candidate.display_substring = bool(row["display_substring"])
			candidates.append(candidate)
		return candidates

	async def suggestion_candidates(self, *, viewer_id: str, limit: int) -> list[models.UserCandidate]:
		async with self._pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT
					u.id,
					u.handle,
					u.display_handle,
					u.display_name,
					u.avatar_url,
					u.trust_level,
					u.verified,
					u.followers_count,
					u.last_active_at
				FROM users u
				WHERE {_VISIBLE_TO_VIEWER}
					AND NOT EXISTS (
						SELECT 1 FROM follows f
						WHERE f.follower_id = $1::uuid AND f.followee_id = u.id
					)
				ORDER BY u.followers_count DESC, u.handle
				LIMIT $2
				""",
				viewer_id,
				limit,
			)
		return [self._from_row(row) for row in rows]

	async def taken_handles(self, handles: Iterable[str]) -> set[str]:
		wanted = sorted({handle.lower() for handle in handles})
		if not wanted:
			return set()
		async with self._pool.acquire() as conn:
			rows = await conn.fetch("SELECT handle FROM users WHERE handle = ANY($1::text[])", wanted)
		return {str(row["handle"]) for row in rows}

	async def load_ranking_config(self) -> Optional[dict[str, Any]]:
		try:
			async with self._pool.acquire() as conn:
				row = await conn.fetchrow("SELECT * FROM get_active_search_config()")
		except asyncpg.UndefinedFunctionError:
			logger.warning("search.config function missing; using built-in ranking defaults")
			return None
		return dict(row) if row else None
