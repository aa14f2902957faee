"""Ordering and handle-cursor pagination for ranked search results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from agora.domain.search import models


@dataclass(slots=True)
class Page:
	items: list[models.UserCandidate]
	has_more: bool
	next_cursor: Optional[str]


def search_order(candidate: models.UserCandidate) -> tuple[float, str]:
	"""Score descending, handle ascending: a total order because handles are unique."""

	return (-(candidate.score_hint or 0.0), candidate.handle)


def suggestion_order(candidate: models.UserCandidate) -> tuple[int, str]:
	return (-max(candidate.followers_count, 0), candidate.handle)


def _after_cursor(
	ranked: Sequence[models.UserCandidate],
	after: Optional[str],
) -> Iterable[models.UserCandidate]:
	if not after:
		return ranked
	for idx, candidate in enumerate(ranked):
		if candidate.handle == after:
			return ranked[idx + 1 :]
	# Cursor row left the result set (blocked, deactivated); resume by handle.
	return [candidate for candidate in ranked if candidate.handle > after]


def paginate(
	ranked: Sequence[models.UserCandidate],
	*,
	limit: int,
	after: Optional[str] = None,
) -> Page:
	"""Slice ``ranked`` after the cursor handle.

	One extra row is inspected so ``has_more`` is exact rather than guessed from
	a full page.
	"""

	items: list[models.UserCandidate] = []
	has_more = False
	for candidate in _after_cursor(ranked, after):
		if len(items) < limit:
			items.append(candidate)
		else:
			has_more = True
			break

	next_cursor = items[-1].handle if has_more and items else None
	return Page(items=items, has_more=has_more, next_cursor=next_cursor)
