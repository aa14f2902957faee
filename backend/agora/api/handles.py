"""Public handle availability endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from agora.api.deps import get_handle_service
from agora.domain.handles import policy
from agora.domain.handles.schemas import HandleCheckResponse
from agora.domain.handles.service import HandleService
from agora.domain.search.policy import SearchPolicyError

router = APIRouter(tags=["handles"])


@router.get("/handles/check", response_model=HandleCheckResponse)
async def check_handle_endpoint(
	handle: Optional[str] = Query(default=None),
	service: HandleService = Depends(get_handle_service),
) -> HandleCheckResponse:
	if not handle or not handle.strip():
		raise HTTPException(status_code=400, detail="handle_required")
	try:
		return await service.check(handle)
	except policy.HandleFormatError as exc:
		raise HTTPException(status_code=400, detail=exc.detail) from exc
	except SearchPolicyError as exc:
		raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
