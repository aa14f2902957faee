"""Query normalization for user search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from agora.domain.search.policy import EmptyQuery

MIN_LIMIT = 5
MAX_LIMIT = 50
DEFAULT_LIMIT = 20
DEFAULT_SUGGESTIONS_LIMIT = 10


@dataclass(slots=True, frozen=True)
class NormalizedQuery:
	"""Normalized descriptor of a raw search request."""

	text: str
	is_exact_handle_query: bool
	limit: int
	after: Optional[str] = None

	@property
	def is_empty(self) -> bool:
		return not self.text


def clamp_limit(value: Any, *, default: int = DEFAULT_LIMIT) -> int:
	"""Clamp ``value`` into [MIN_LIMIT, MAX_LIMIT]; invalid input yields ``default``."""

	if value is None or isinstance(value, bool):
		return default
	try:
		limit = int(value)
	except (TypeError, ValueError):
		return default
	return max(MIN_LIMIT, min(MAX_LIMIT, limit))


def normalize_query(
	text: Optional[str],
	limit: Any = None,
	after: Optional[str] = None,
	*,
	allow_empty: bool = False,
) -> NormalizedQuery:
	"""Trim and lower-case ``text`` and detect exact-handle intent.

	A leading ``@`` flags the query as an exact-handle lookup and is stripped.
	Raises :class:`EmptyQuery` when nothing is left, unless ``allow_empty`` is set
	(the suggested-creators fallback).
	"""

	cleaned = (text or "").strip().lower()
	exact = cleaned.startswith("@")
	if exact:
		cleaned = cleaned[1:].strip()
	if not cleaned and not allow_empty:
		raise EmptyQuery()

	cursor = (after or "").strip() or None
	return NormalizedQuery(
		text=cleaned,
		is_exact_handle_query=exact,
		limit=clamp_limit(limit),
		after=cursor,
	)
