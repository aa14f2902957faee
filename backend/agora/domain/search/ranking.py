"""Ranking helpers for user search.

Scores blend three signals: text relevance, popularity and recency. The blend
weight depends on how strong the text match is, so exact handle matches are
never displaced by a popular but unrelated account.
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from agora.domain.search import models
from agora.domain.search.normalizer import NormalizedQuery

_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)


@dataclass(slots=True, frozen=True)
class RankingConfig:
	"""Tunable ranking constants; defaults match the shipped search_config row."""

	alpha_strong: float = 0.10
	alpha_weak: float = 0.25
	strong_threshold: float = 0.60
	handle_weight: float = 0.60
	handle_weight_at_prefix: float = 0.75
	display_weight: float = 0.50
	sim_handle_threshold: float = 0.20
	sim_name_threshold: float = 0.25
	verified_boost: float = 0.08
	trust_boost_threshold: int = 2
	trust_boost: float = 0.04
	recency_center_days: float = 14.0
	recency_steepness: float = 4.0
	recency_base: float = 0.7
	recency_max_boost: float = 0.3
	recency_unknown: float = 0.85
	pop_log_divisor: float = 10.0

	@classmethod
	def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> "RankingConfig":
		"""Build a config from a search_config row, ignoring unknown or null columns."""

		if not payload:
			return cls()
		overrides: dict[str, Any] = {}
		for column in fields(cls):
			value = payload.get(column.name)
			if value is None:
				continue
			try:
				overrides[column.name] = int(value) if column.type in ("int", int) else float(value)
			except (TypeError, ValueError):
				continue
		return cls(**overrides)


class MatchStrength(enum.Enum):
	EXACT = "exact"
	STRONG = "strong"
	WEAK = "weak"


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
	text: float
	popularity: float
	recency: float
	strength: MatchStrength
	score: float


def _trigrams(value: str) -> set[str]:
	grams: set[str] = set()
	for word in _WORD_RE.findall(value.lower()):
		padded = f"  {word} "
		for idx in range(len(padded) - 2):
			grams.add(padded[idx : idx + 3])
	return grams


def trigram_similarity(a: str, b: str) -> float:
	"""Trigram similarity with pg_trgm ``similarity()`` semantics."""

	if not a or not b:
		return 0.0
	left = _trigrams(a)
	right = _trigrams(b)
	if not left or not right:
		return 0.0
	shared = len(left & right)
	return shared / float(len(left | right))


def text_relevance(
	candidate: models.UserCandidate,
	query: NormalizedQuery,
	config: RankingConfig,
) -> tuple[float, bool]:
	"""Return (relevance, exact_handle_match) for ``candidate``."""

	if candidate.handle.lower() == query.text:
		return 1.0, True
	weight = config.handle_weight_at_prefix if query.is_exact_handle_query else config.handle_weight
	handle_signal = weight * max(candidate.similarity_handle, 0.0)
	display_similarity = 1.0 if candidate.display_substring else max(candidate.similarity_display, 0.0)
	display_signal = config.display_weight * display_similarity
	return max(handle_signal, display_signal), False


def popularity(candidate: models.UserCandidate, config: RankingConfig) -> float:
	raw = math.log1p(max(candidate.followers_count, 0)) / config.pop_log_divisor
	if candidate.verified:
		raw += config.verified_boost
	if candidate.trust_level >= config.trust_boost_threshold:
		raw += config.trust_boost
	return min(1.0, raw)


def _decay(x: float) -> float:
	# 1 / (1 + e^x) without overflowing for long-dormant accounts
	if x >= 0:
		z = math.exp(-x)
		return z / (1.0 + z)
	return 1.0 / (1.0 + math.exp(x))


def recency_multiplier(
	last_active_at: Optional[datetime],
	config: RankingConfig,
	*,
	now: Optional[datetime] = None,
) -> float:
	"""Sigmoid centred on ``recency_center_days`` of inactivity, in [base, base + max_boost]."""

	if last_active_at is None:
		return config.recency_unknown
	now = now or datetime.now(timezone.utc)
	if last_active_at.tzinfo is None:
		last_active_at = last_active_at.replace(tzinfo=timezone.utc)
	days = max(0.0, (now - last_active_at).total_seconds() / 86400.0)
	x = (days - config.recency_center_days) / config.recency_steepness
	return config.recency_base + config.recency_max_boost * _decay(x)


def classify(text: float, exact: bool, config: RankingConfig) -> MatchStrength:
	if exact:
		return MatchStrength.EXACT
	if text >= config.strong_threshold:
		return MatchStrength.STRONG
	return MatchStrength.WEAK


def blend(
	strength: MatchStrength,
	text: float,
	pop: float,
	recency: float,
	config: RankingConfig,
) -> float:
	"""Combine signals with the weight policy selected by ``strength``."""

	if strength is MatchStrength.EXACT:
		return text
	if strength is MatchStrength.STRONG:
		alpha = config.alpha_strong
	else:
		alpha = config.alpha_weak
	return ((1.0 - alpha) * text + alpha * pop) * recency


def score_candidate(
	candidate: models.UserCandidate,
	query: NormalizedQuery,
	config: RankingConfig,
	*,
	now: Optional[datetime] = None,
) -> ScoreBreakdown:
	text, exact = text_relevance(candidate, query, config)
	pop = popularity(candidate, config)
	recency = recency_multiplier(candidate.last_active_at, config, now=now)
	strength = classify(text, exact, config)
	return ScoreBreakdown(
		text=text,
		popularity=pop,
		recency=recency,
		strength=strength,
		score=blend(strength, text, pop, recency, config),
	)
