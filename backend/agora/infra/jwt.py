"""Access tokens accepted by the search API.

Tokens are HS256, signed with ``SECRET_KEY`` and scoped to a fixed issuer and
audience. Only ``sub`` (the viewer id) is read by the routers; ``handle`` and
``sid`` are carried through when present.
"""

from __future__ import annotations

import time
from typing import Any, Mapping

import jwt

from agora.settings import settings

ISSUER = "agora-api"
AUDIENCE = "agora-app"
ALGORITHM = "HS256"
# tolerated clock skew between the token issuer and this service
LEEWAY_SECONDS = 5

_REQUIRED_CLAIMS = ("sub", "exp", "iat", "iss", "aud")


def encode_access(claims: Mapping[str, Any], *, ttl_seconds: int | None = None) -> str:
	issued_at = int(time.time())
	ttl = settings.access_ttl_minutes * 60 if ttl_seconds is None else ttl_seconds
	body = {"iss": ISSUER, "aud": AUDIENCE, "iat": issued_at, "exp": issued_at + ttl, **claims}
	return jwt.encode(body, settings.secret_key, algorithm=ALGORITHM)


def decode_access(token: str) -> dict[str, Any]:
	"""Return the verified claims; any failure raises ``jwt.InvalidTokenError``."""

	return jwt.decode(
		token,
		settings.secret_key,
		algorithms=[ALGORITHM],
		audience=AUDIENCE,
		issuer=ISSUER,
		leeway=LEEWAY_SECONDS,
		options={"require": list(_REQUIRED_CLAIMS)},
	)
