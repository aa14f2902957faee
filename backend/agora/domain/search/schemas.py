"""Pydantic schemas for the search APIs.

Wire payloads use camelCase keys; Python code uses the snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agora.domain.search import models


class _CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchUserOut(_CamelModel):
	user_id: str
	handle: str
	display_handle: Optional[str] = None
	display_name: str = ""
	avatar_url: Optional[str] = None
	trust_level: int = 0
	verified: bool = False
	followers_count: int = Field(default=0, ge=0)
	last_active_at: Optional[datetime] = None
	score: Optional[float] = None

	@classmethod
	def from_candidate(cls, candidate: models.UserCandidate, *, with_score: bool = True) -> "SearchUserOut":
		return cls(
			user_id=candidate.user_id,
			handle=candidate.handle,
			display_handle=candidate.display_handle or candidate.handle,
			display_name=candidate.display_name,
			avatar_url=candidate.avatar_url,
			trust_level=candidate.trust_level,
			verified=candidate.verified,
			followers_count=max(candidate.followers_count, 0),
			last_active_at=candidate.last_active_at,
			score=round(candidate.score_hint or 0.0, 6) if with_score else None,
		)


class SearchResponse(_CamelModel):
	items: list[SearchUserOut]
	query: str
	count: int
	has_more: bool
	next_cursor: Optional[str] = None


class SuggestedCreatorsResponse(_CamelModel):
	items: list[SearchUserOut]
	count: int
