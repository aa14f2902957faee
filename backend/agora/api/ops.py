"""Operations endpoints providing health checks, metrics and ranking config controls."""

from __future__ import annotations

import dataclasses
import secrets
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from agora.api.deps import get_search_service
from agora.domain.search.service import SearchService
from agora.obs import health
from agora.settings import settings

router = APIRouter(tags=["ops"])

ADMIN_HEADER = "X-Admin-Token"


def _presented_token(request: Request) -> Optional[str]:
	token = request.headers.get(ADMIN_HEADER)
	if token:
		return token
	scheme, _, credentials = (request.headers.get("Authorization") or "").partition(" ")
	if scheme.lower() != "bearer":
		return None
	return credentials.strip() or None


async def require_admin(request: Request) -> None:
	expected = settings.obs_admin_token
	if not expected:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	presented = _presented_token(request) or ""
	if not secrets.compare_digest(presented.encode(), expected.encode()):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


async def require_metrics_access(request: Request) -> None:
	if not settings.obs_metrics_public:
		await require_admin(request)


@router.get("/health/live")
async def health_live() -> dict[str, Any]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> Response:
	status_code, payload = await health.readiness()
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def prometheus_metrics(_: None = Depends(require_metrics_access)) -> Response:
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


@router.get("/ops/search-config")
async def active_search_config(
	reload: bool = False,
	_: None = Depends(require_admin),
	service: SearchService = Depends(get_search_service),
) -> dict[str, Any]:
	if reload:
		service.invalidate_ranking_config()
	config = await service.ranking_config()
	return {"config": dataclasses.asdict(config)}
