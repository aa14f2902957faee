"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agora.api import handles, ops, search
from agora.api.errors import install_error_handlers
from agora.domain.handles.service import HandleService
from agora.domain.search.service import SearchService
from agora.domain.search.store import MemorySearchStore, PostgresSearchStore, SearchStore
from agora.infra import postgres
from agora.obs import init as obs_init
from agora.settings import settings

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, store: SearchStore) -> None:
	"""Attach the request-independent services handlers resolve through ``agora.api.deps``."""

	app.state.search_service = SearchService(store)
	app.state.handle_service = HandleService(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
	if settings.uses_memory_store():
		logger.warning("search backend is the in-memory store; results are not persisted")
		store: SearchStore = MemorySearchStore()
	else:
		pool = await postgres.init_pool()
		store = PostgresSearchStore(pool)
	build_services(app, store)
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="Agora Search", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True.
if "*" in allow_origins:
	allow_origins = ["http://localhost:3000", "http://127.0.0.1:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["GET"],
	allow_headers=["*"],
)
obs_init(app)

app.include_router(search.router, tags=["search"])
app.include_router(handles.router, tags=["handles"])
app.include_router(ops.router, tags=["ops"])
