"""Request-scoped access to the services built in the application lifespan."""

from __future__ import annotations

from fastapi import Request

from agora.domain.handles.service import HandleService
from agora.domain.search.service import SearchService


def get_search_service(request: Request) -> SearchService:
	return request.app.state.search_service


def get_handle_service(request: Request) -> HandleService:
	return request.app.state.handle_service
