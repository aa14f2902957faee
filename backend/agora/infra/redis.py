"""Shared Redis handle.

Modules import ``redis_client`` once; the connection behind it can be replaced
(fakeredis in tests) without touching those imports.
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as redis

from agora.settings import settings


class RedisProxy:
	"""Forwards attribute access to whichever client is currently installed."""

	__slots__ = ("_target",)

	def __init__(self, target: redis.Redis) -> None:
		self._target = target

	@property
	def client(self) -> redis.Redis:
		return self._target

	def swap(self, target: redis.Redis) -> redis.Redis:
		previous, self._target = self._target, target
		return previous

	def __getattr__(self, name: str) -> Any:
		return getattr(self._target, name)


redis_client = RedisProxy(redis.from_url(settings.redis_url, decode_responses=True))


def set_redis_client(client: redis.Redis) -> redis.Redis:
	"""Install ``client`` and return the one it replaced."""

	return redis_client.swap(client)
