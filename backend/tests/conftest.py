import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Settings are read at import time; pin a test environment before importing agora.
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789-abcdefghijklmnopqrstuv")
os.environ.setdefault("SEARCH_BACKEND", "memory")
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("OBS_ADMIN_TOKEN", "ops-test-token")

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from agora.domain.search.store import MemorySearchStore
from agora.infra import jwt as jwt_helper
from agora.infra.redis import redis_client, set_redis_client
from agora.main import app, build_services


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def memory_store():
	return MemorySearchStore()


@pytest.fixture
def wired_app(memory_store):
	"""The FastAPI app with services bound to a fresh memory store.

	ASGITransport does not run the lifespan, so services are attached directly.
	"""
	build_services(app, memory_store)
	return app


@pytest_asyncio.fixture
async def api_client(wired_app):
	transport = ASGITransport(app=wired_app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


@pytest.fixture
def auth_headers():
	def _headers(user_id: str, **claims) -> dict[str, str]:
		token = jwt_helper.encode_access({"sub": user_id, **claims})
		return {"Authorization": f"Bearer {token}"}

	return _headers
