"""Errors raised by the user search client."""

from __future__ import annotations


class UserSearchError(Exception):
	"""Base class for client-side search failures."""

	message = "Search failed"

	def __str__(self) -> str:
		return self.message


class InvalidURL(UserSearchError):
	message = "Invalid search URL"


class Unauthorized(UserSearchError):
	message = "Authentication required for search"


class BadRequest(UserSearchError):
	message = "Invalid search query"


class InvalidResponse(UserSearchError):
	message = "Invalid server response"


class ServerError(UserSearchError):
	def __init__(self, status_code: int):
		super().__init__(status_code)
		self.status_code = status_code

	def __str__(self) -> str:
		return f"Server error ({self.status_code})"
