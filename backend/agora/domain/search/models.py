"""Domain models backing user search and suggested creators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class UserCandidate:
	"""Normalized representation of a user returned from the store layer.

	The similarity fields are raw text features (0..1); weighting them into a
	relevance signal is the scorer's job. ``score_hint`` is filled per query.
	"""

	user_id: str
	handle: str
	display_name: str = ""
	display_handle: Optional[str] = None
	avatar_url: Optional[str] = None
	trust_level: int = 0
	verified: bool = False
	followers_count: int = 0
	last_active_at: Optional[datetime] = None
	similarity_handle: float = 0.0
	similarity_display: float = 0.0
	display_substring: bool = False
	is_active: bool = True
	banned: bool = False
	blocked: bool = False
	muted: bool = False
	followed: bool = False
	score_hint: Optional[float] = None


@dataclass(slots=True)
class MemoryUser:
	"""In-memory seed structure used by the memory store and tests."""

	user_id: Optional[str]
	handle: Optional[str]
	display_name: str = ""
	display_handle: Optional[str] = None
	avatar_url: Optional[str] = None
	trust_level: int = 0
	verified: bool = False
	followers_count: int = 0
	last_active_at: Optional[datetime] = None
	is_active: bool = True
	banned: bool = False


@dataclass(slots=True)
class ViewerGraph:
	"""Directional relationships seeded into the memory store."""

	blocks: set[tuple[str, str]] = field(default_factory=set)
	mutes: set[tuple[str, str]] = field(default_factory=set)
	follows: set[tuple[str, str]] = field(default_factory=set)
