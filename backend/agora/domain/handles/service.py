"""Handle availability checks backed by the search store."""

from __future__ import annotations

import logging
from typing import Optional

from agora.domain.handles import policy
from agora.domain.handles.schemas import HandleCheckResponse
from agora.domain.search.policy import StoreUnavailable
from agora.domain.search.store import SearchStore
from agora.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class HandleService:
	def __init__(self, store: SearchStore) -> None:
		self._store = store

	async def _taken(self, handles: list[str]) -> set[str]:
		try:
			return await self._store.taken_handles(handles)
		except Exception as exc:
			logger.exception("handles.lookup_failed")
			raise StoreUnavailable() from exc

	async def _free_suggestions(self, handle: str, *, year: Optional[int] = None) -> list[str]:
		suggestions = policy.suggest_alternatives(handle, year=year)
		taken = await self._taken(suggestions)
		return [candidate for candidate in suggestions if candidate not in taken]

	async def check(self, handle: str, *, year: Optional[int] = None) -> HandleCheckResponse:
		"""Validate ``handle`` and report whether it is free.

		Raises :class:`policy.HandleFormatError` for format violations; reserved
		handles carry alternatives that are not already registered.
		"""

		raw = handle.strip()
		validation = policy.validate_format(raw)
		if validation is policy.HandleFormatValidation.RESERVED:
			obs_metrics.inc_handle_check(validation.value)
			raise policy.HandleFormatError(validation, await self._free_suggestions(raw, year=year))
		if not validation.is_valid:
			obs_metrics.inc_handle_check(validation.value)
			raise policy.HandleFormatError(validation)

		canonical = policy.normalise_handle(raw)
		taken = await self._taken([canonical])
		if canonical not in taken:
			obs_metrics.inc_handle_check("available")
			return HandleCheckResponse(available=True, suggestions=[])

		obs_metrics.inc_handle_check("taken")
		suggestions = await self._free_suggestions(canonical, year=year)
		logger.info("handles.taken suggestions=%d", len(suggestions))
		return HandleCheckResponse(available=False, suggestions=suggestions)
