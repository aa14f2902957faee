"""Client-side handle availability checking with debounce."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

from agora.client.session import DEBOUNCE_SECONDS
from agora.domain.handles import policy
from agora.domain.handles.schemas import HandleCheckResponse


class HandleClient(Protocol):
	async def check_handle(self, handle: str) -> HandleCheckResponse:
		...


@dataclass(slots=True)
class HandleCheckResult:
	handle: str
	validation: policy.HandleFormatValidation
	available: bool = False
	suggestions: list[str] = field(default_factory=list)

	@property
	def message(self) -> Optional[str]:
		return self.validation.message


class HandleChecker:
	"""Validates locally, then asks the server after a debounce.

	Only the most recent :meth:`check` reaches the network; earlier calls that
	are superseded while waiting return ``None``.
	"""

	def __init__(self, client: HandleClient, *, debounce_seconds: float = DEBOUNCE_SECONDS) -> None:
		self._client = client
		self._debounce = debounce_seconds
		self._task: Optional[asyncio.Task] = None

	@staticmethod
	def validate(handle: str) -> policy.HandleFormatValidation:
		return policy.validate_format(handle.strip())

	async def _lookup(self, handle: str) -> HandleCheckResponse:
		await asyncio.sleep(self._debounce)
		return await self._client.check_handle(handle)

	async def check(self, handle: str) -> Optional[HandleCheckResult]:
		clean = handle.strip()
		validation = policy.validate_format(clean)
		if validation is policy.HandleFormatValidation.RESERVED:
			return HandleCheckResult(clean, validation, suggestions=policy.suggest_alternatives(clean))
		if not validation.is_valid:
			return HandleCheckResult(clean, validation)

		if self._task is not None and not self._task.done():
			self._task.cancel()
		task = asyncio.create_task(self._lookup(policy.normalise_handle(clean)))
		self._task = task
		try:
			response = await task
		except asyncio.CancelledError:
			current = asyncio.current_task()
			if self._task is task or (current is not None and current.cancelling()):
				raise
			return None
		return HandleCheckResult(
			clean,
			validation,
			available=response.available,
			suggestions=list(response.suggestions),
		)

	def cancel(self) -> None:
		if self._task is not None and not self._task.done():
			self._task.cancel()
		self._task = None
