"""Liveness and readiness probes for the search service."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Tuple

from agora.infra import postgres
from agora.infra.redis import redis_client
from agora.obs import metrics
from agora.settings import settings

LOGGER = logging.getLogger(__name__)


async def _timed(name: str, probe: Callable[[], Awaitable[Any]], timeout: float) -> Dict[str, Any]:
	started = perf_counter()
	try:
		detail = await asyncio.wait_for(probe(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		LOGGER.warning("readiness probe failed", extra={"probe": name}, exc_info=True)
		return {"ok": False, "error": exc.__class__.__name__}
	state: Dict[str, Any] = {"ok": True, "latency_ms": round((perf_counter() - started) * 1000, 2)}
	if isinstance(detail, dict):
		state.update(detail)
	return state


async def _probe_postgres() -> Dict[str, Any]:
	pool = await postgres.get_pool()
	async with pool.acquire() as conn:
		has_trgm = await conn.fetchval("SELECT EXISTS (SELECT 1 FROM pg_extension WHERE extname = 'pg_trgm')")
	return {"pg_trgm": bool(has_trgm)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	"""Redis backs rate limiting; Postgres backs candidates unless the memory store is active."""

	redis_state = await _timed("redis", redis_client.ping, timeout=0.2)
	metrics.mark_redis(redis_state["ok"])
	if settings.uses_memory_store():
		postgres_state: Dict[str, Any] = {"ok": True, "skipped": "memory_store"}
	else:
		postgres_state = await _timed("postgres", _probe_postgres, timeout=0.5)
		# similarity() is unavailable without the extension
		postgres_state["ok"] = postgres_state["ok"] and postgres_state.get("pg_trgm", False)
		metrics.mark_postgres(postgres_state["ok"])
	ok = redis_state["ok"] and postgres_state["ok"]
	payload = {
		"status": "ok" if ok else "degraded",
		"store": settings.search_backend,
		"redis": redis_state,
		"postgres": postgres_state,
	}
	return (200 if ok else 503), payload
