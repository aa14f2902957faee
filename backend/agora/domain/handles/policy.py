"""Format rules and alternative suggestions for user handles."""

from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from typing import Optional

HANDLE_MIN_LEN = 3
HANDLE_MAX_LEN = 30
HANDLE_CHARSET = re.compile(r"^[A-Za-z0-9._]+$")
RESERVED_HANDLES = frozenset(
	{
		"admin",
		"root",
		"system",
		"agora",
		"support",
		"help",
		"moderator",
		"mod",
		"official",
		"team",
		"staff",
	}
)


class HandleFormatValidation(str, enum.Enum):
	VALID = "valid"
	TOO_SHORT = "too_short"
	TOO_LONG = "too_long"
	RESERVED = "reserved"
	STARTS_WITH_UNDERSCORE = "starts_with_underscore"
	ALL_NUMBERS = "all_numbers"
	CONSECUTIVE_PERIODS = "consecutive_periods"
	INVALID_CHARACTERS = "invalid_characters"

	@property
	def message(self) -> Optional[str]:
		return _MESSAGES.get(self)

	@property
	def is_valid(self) -> bool:
		return self is HandleFormatValidation.VALID


_MESSAGES = {
	HandleFormatValidation.TOO_SHORT: f"Handle must be at least {HANDLE_MIN_LEN} characters",
	HandleFormatValidation.TOO_LONG: f"Handle must be {HANDLE_MAX_LEN} characters or less",
	HandleFormatValidation.RESERVED: "This handle is reserved",
	HandleFormatValidation.STARTS_WITH_UNDERSCORE: "Handle cannot start with an underscore",
	HandleFormatValidation.ALL_NUMBERS: "Handle must contain at least one letter",
	HandleFormatValidation.CONSECUTIVE_PERIODS: "Handle cannot contain consecutive periods",
	HandleFormatValidation.INVALID_CHARACTERS: "Use only letters, numbers, periods and underscores",
}


class HandleFormatError(ValueError):
	"""Raised when a handle fails format validation."""

	def __init__(self, validation: HandleFormatValidation, suggestions: Optional[list[str]] = None):
		super().__init__(validation.value)
		self.validation = validation
		self.reason = validation.value
		self.suggestions = list(suggestions or [])

	@property
	def detail(self) -> dict[str, object]:
		payload: dict[str, object] = {"reason": self.reason, "message": self.validation.message}
		if self.suggestions:
			payload["suggestions"] = self.suggestions
		return payload


def normalise_handle(handle: str) -> str:
	return handle.strip().lower()


def validate_format(handle: str) -> HandleFormatValidation:
	"""Check ``handle`` against the handle rules without touching storage.

	Length wins over everything else, then the reserved list; the character
	set is checked last.
	"""

	if len(handle) < HANDLE_MIN_LEN:
		return HandleFormatValidation.TOO_SHORT
	if len(handle) > HANDLE_MAX_LEN:
		return HandleFormatValidation.TOO_LONG
	if handle.lower() in RESERVED_HANDLES:
		return HandleFormatValidation.RESERVED
	if handle.startswith("_"):
		return HandleFormatValidation.STARTS_WITH_UNDERSCORE
	if not any(ch.isalpha() for ch in handle):
		return HandleFormatValidation.ALL_NUMBERS
	if ".." in handle:
		return HandleFormatValidation.CONSECUTIVE_PERIODS
	if not HANDLE_CHARSET.match(handle):
		return HandleFormatValidation.INVALID_CHARACTERS
	return HandleFormatValidation.VALID


def suggest_alternatives(handle: str, *, year: Optional[int] = None) -> list[str]:
	"""Five alternatives: numeric suffixes, underscore suffix, year suffix."""

	base = normalise_handle(handle)
	year = year or datetime.now(timezone.utc).year
	candidates = [f"{base}1", f"{base}2", f"{base}_", f"{base}{year}", f"{base}123"]
	suggestions: list[str] = []
	for candidate in candidates:
		if len(candidate) > HANDLE_MAX_LEN:
			# keep the suffix, shorten the stem
			suffix = candidate[len(base) :]
			candidate = base[: HANDLE_MAX_LEN - len(suffix)] + suffix
		if candidate not in suggestions:
			suggestions.append(candidate)
	return suggestions
