"""Fixed-window request budgets kept in Redis."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from agora.infra.redis import redis_client

KEY_PREFIX = "agora:rl"


@dataclass(slots=True, frozen=True)
class Budget:
	allowed: bool
	used: int
	limit: int
	reset_in: int


def window_key(kind: str, actor_id: str, window_seconds: int, now: float) -> str:
	return f"{KEY_PREFIX}:{kind}:{actor_id}:{int(now // window_seconds)}"


async def consume(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> Budget:
	"""Count one request against ``actor_id``'s budget for ``kind``."""

	window = max(1, int(window_seconds))
	moment = time.time() if now is None else now
	reset_in = window - int(moment % window)
	if limit <= 0:
		return Budget(allowed=False, used=0, limit=limit, reset_in=reset_in)
	key = window_key(kind, actor_id, window, moment)
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		used, _ = await pipe.execute()
	return Budget(allowed=int(used) <= limit, used=int(used), limit=limit, reset_in=reset_in)
