"""asyncpg pool lifecycle for the Postgres candidate store."""

from __future__ import annotations

import logging
from typing import Optional

import asyncpg

from agora.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def init_pool() -> asyncpg.Pool:
	"""Create the shared pool on first use; later calls return the same pool."""

	global _pool
	if _pool is not None:
		return _pool
	_pool = await asyncpg.create_pool(
		dsn=settings.postgres_url,
		min_size=settings.postgres_min_pool_size,
		max_size=settings.postgres_max_pool_size,
		server_settings={"application_name": settings.service_name},
	)
	logger.info("postgres pool ready max_size=%d", settings.postgres_max_pool_size)
	return _pool


async def get_pool() -> asyncpg.Pool:
	return _pool if _pool is not None else await init_pool()


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
