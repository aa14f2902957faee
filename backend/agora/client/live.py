"""HTTP client for the search and handle endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from agora.client import errors
from agora.domain.handles.schemas import HandleCheckResponse
from agora.domain.search.schemas import SearchResponse, SearchUserOut, SuggestedCreatorsResponse

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]

DEFAULT_TIMEOUT = 10.0


@dataclass(slots=True)
class SearchPage:
	items: list[SearchUserOut] = field(default_factory=list)
	has_more: bool = False
	next_cursor: Optional[str] = None
	query: str = ""


class UserSearchClient:
	"""Async client over ``httpx.AsyncClient``.

	Every request carries a bounded timeout. Non-200 responses map onto the
	:mod:`agora.client.errors` taxonomy; payloads that fail to decode raise
	:class:`errors.InvalidResponse` and nothing partial is returned.
	"""

	def __init__(
		self,
		base_url: str,
		token_provider: TokenProvider,
		*,
		timeout: float = DEFAULT_TIMEOUT,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		try:
			url = httpx.URL(base_url)
		except (httpx.InvalidURL, TypeError) as exc:
			raise errors.InvalidURL() from exc
		if url.scheme not in ("http", "https") or not url.host:
			raise errors.InvalidURL()
		self._token_provider = token_provider
		self._http = httpx.AsyncClient(base_url=url, timeout=timeout, transport=transport)

	async def __aenter__(self) -> "UserSearchClient":
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()

	async def aclose(self) -> None:
		await self._http.aclose()

	async def _auth_headers(self) -> dict[str, str]:
		token = await self._token_provider()
		if not token:
			raise errors.Unauthorized()
		return {"Authorization": f"Bearer {token}"}

	async def _get(self, path: str, params: dict[str, Any], *, headers: Optional[dict[str, str]] = None) -> Any:
		try:
			response = await self._http.get(path, params=params, headers=headers)
		except httpx.InvalidURL as exc:
			raise errors.InvalidURL() from exc
		except httpx.HTTPError as exc:
			logger.warning("search client transport failure path=%s error=%s", path, exc.__class__.__name__)
			raise errors.ServerError(-1) from exc
		if response.status_code == 401:
			raise errors.Unauthorized()
		if response.status_code == 400:
			raise errors.BadRequest()
		if response.status_code != 200:
			raise errors.ServerError(response.status_code)
		try:
			return response.json()
		except ValueError as exc:
			raise errors.InvalidResponse() from exc

	async def search(self, q: str, limit: int = 20, after: Optional[str] = None) -> SearchPage:
		params: dict[str, Any] = {"q": q, "limit": limit}
		if after:
			params["after"] = after
		payload = await self._get("/search/users", params, headers=await self._auth_headers())
		try:
			decoded = SearchResponse.model_validate(payload)
		except ValidationError as exc:
			raise errors.InvalidResponse() from exc
		return SearchPage(
			items=list(decoded.items),
			has_more=decoded.has_more,
			next_cursor=decoded.next_cursor,
			query=decoded.query,
		)

	async def suggested_creators(self, limit: int = 10) -> list[SearchUserOut]:
		payload = await self._get(
			"/search/suggested-creators",
			{"limit": limit},
			headers=await self._auth_headers(),
		)
		try:
			decoded = SuggestedCreatorsResponse.model_validate(payload)
		except ValidationError as exc:
			raise errors.InvalidResponse() from exc
		return list(decoded.items)

	async def lookup_by_handle(self, handle: str) -> Optional[SearchUserOut]:
		clean = handle.strip().lstrip("@").strip().lower()
		if not clean:
			return None
		page = await self.search(f"@{clean}", limit=1)
		for item in page.items:
			if item.handle.lower() == clean:
				return item
		return None

	async def check_handle(self, handle: str) -> HandleCheckResponse:
		payload = await self._get("/handles/check", {"handle": handle})
		try:
			return HandleCheckResponse.model_validate(payload)
		except ValidationError as exc:
			raise errors.InvalidResponse() from exc
