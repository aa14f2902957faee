"""Rate limits, errors and visibility guards for user search."""

from __future__ import annotations

from dataclasses import dataclass

from agora.domain.search import models
from agora.infra import rate_limit
from agora.obs import metrics as obs_metrics


@dataclass(slots=True)
class SearchPolicyError(Exception):
	detail: str
	status_code: int = 400

	def __str__(self) -> str:  # pragma: no cover - debugging aid
		return self.detail


class EmptyQuery(SearchPolicyError):
	def __init__(self) -> None:
		super().__init__(detail="query_required", status_code=400)


class SearchRateLimitError(SearchPolicyError):
	def __init__(self, retry_after: int = 60) -> None:
		super().__init__(detail="rate_limit", status_code=429)
		self.retry_after = retry_after


class StoreUnavailable(SearchPolicyError):
	def __init__(self) -> None:
		super().__init__(detail="search_unavailable", status_code=503)


async def enforce_rate_limit(user_id: str, *, kind: str, limit: int) -> None:
	"""Ensure the viewer remains within the configured per-minute budget."""

	budget = await rate_limit.consume(kind, user_id, limit=limit)
	if not budget.allowed:
		obs_metrics.inc_rate_limited(kind)
		raise SearchRateLimitError(retry_after=budget.reset_in)


def is_well_formed(candidate: models.UserCandidate) -> bool:
	"""Candidates without an id or handle cannot be ranked or paginated."""

	return bool(candidate.user_id) and bool(candidate.handle)


def allow_user_search(candidate: models.UserCandidate, *, viewer_id: str) -> bool:
	"""Visibility guard applied to every search candidate before pagination."""

	if candidate.user_id == viewer_id:
		return False
	if not candidate.is_active or candidate.banned:
		return False
	if candidate.blocked or candidate.muted:
		return False
	return True


def allow_suggestion(candidate: models.UserCandidate, *, viewer_id: str) -> bool:
	"""Suggested creators additionally skip accounts the viewer already follows."""

	if not allow_user_search(candidate, viewer_id=viewer_id):
		return False
	return not candidate.followed
