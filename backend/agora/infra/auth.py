"""Bearer token resolution for the search routers.

The handle availability check is public and never depends on this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError

from agora.infra import jwt as jwt_helper
from agora.obs import logging as obs_logging

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(slots=True)
class AuthenticatedUser:
	"""The viewer on whose behalf a search runs."""

	id: str
	handle: Optional[str] = None
	session_id: Optional[str] = None

	@classmethod
	def from_claims(cls, claims: Mapping[str, Any]) -> "AuthenticatedUser":
		handle = claims.get("handle")
		sid = claims.get("sid")
		return cls(
			id=str(claims["sub"]).strip(),
			handle=str(handle) if handle is not None else None,
			session_id=str(sid).strip() if sid is not None else None,
		)


def _rejected() -> HTTPException:
	return HTTPException(
		status_code=status.HTTP_401_UNAUTHORIZED,
		detail="invalid_token",
		headers={"WWW-Authenticate": "Bearer"},
	)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	try:
		claims = jwt_helper.decode_access(token)
	except InvalidTokenError as exc:
		raise _rejected() from exc
	user = AuthenticatedUser.from_claims(claims)
	if not user.id:
		raise _rejected()
	return user


async def get_current_user(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise _rejected()
	user = verify_access_jwt(credentials.credentials)
	obs_logging.bind_context(user_id=user.id)
	return user
