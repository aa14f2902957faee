"""REST endpoints for user search and suggested creators."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from agora.api.deps import get_search_service
from agora.domain.search import policy, schemas
from agora.domain.search.service import SearchService
from agora.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["search"])


def _as_http_error(exc: policy.SearchPolicyError) -> HTTPException:
	headers = None
	if isinstance(exc, policy.SearchRateLimitError):
		headers = {"Retry-After": str(exc.retry_after)}
	return HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers)


@router.get("/search/users", response_model=schemas.SearchResponse, response_model_by_alias=True)
async def search_users_endpoint(
	q: Optional[str] = Query(default=None),
	limit: Optional[str] = Query(default=None),
	after: Optional[str] = Query(default=None),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SearchService = Depends(get_search_service),
) -> schemas.SearchResponse:
	try:
		return await service.search_users(auth_user.id, q, limit=limit, after=after)
	except policy.SearchPolicyError as exc:
		raise _as_http_error(exc) from exc


@router.get(
	"/search/suggested-creators",
	response_model=schemas.SuggestedCreatorsResponse,
	response_model_by_alias=True,
)
async def suggested_creators_endpoint(
	limit: Optional[str] = Query(default=None),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SearchService = Depends(get_search_service),
) -> schemas.SuggestedCreatorsResponse:
	try:
		return await service.suggested_creators(auth_user.id, limit=limit)
	except policy.SearchPolicyError as exc:
		raise _as_http_error(exc) from exc
