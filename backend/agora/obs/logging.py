"""Structured JSON logging with request-scoped context."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from agora.settings import settings

_LOGGER_NAME = "agora"

# Field name in the JSON payload -> context variable holding it.
_CONTEXT: Dict[str, ContextVar[Optional[str]]] = {
	"request_id": ContextVar("agora_request_id", default=None),
	"route": ContextVar("agora_route", default=None),
	"user_id": ContextVar("agora_user_id", default=None),
	"ip": ContextVar("agora_client_ip", default=None),
}

# Search text and handles typed by users stay out of structured fields.
_REDACTED_KEYS = ("token", "secret", "authorization", "password", "query", "q")

_MAX_STRING_LENGTH = 200
_MAX_ITEMS = 10

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	user_id: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Dict[str, Token]:
	"""Bind fields for the current request; pass the result to :func:`reset_context`."""

	values = {"request_id": request_id, "route": route, "user_id": user_id, "ip": client_ip}
	return {name: _CONTEXT[name].set(value) for name, value in values.items() if value is not None}


def reset_context(tokens: Mapping[str, Token]) -> None:
	for name, token in tokens.items():
		_CONTEXT[name].reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT["request_id"].get()


def _scrub(key: str, value: Any) -> Any:
	if any(marker == key.lower() or key.lower().endswith(f"_{marker}") for marker in _REDACTED_KEYS):
		return "[redacted]"
	if isinstance(value, str) and len(value) > _MAX_STRING_LENGTH:
		return value[:_MAX_STRING_LENGTH] + "…"
	if isinstance(value, Mapping):
		return {k: _scrub(str(k), v) for k, v in list(value.items())[:_MAX_ITEMS]}
	if isinstance(value, (list, tuple, set)):
		items = list(value)
		return [_scrub(key, item) for item in items[:_MAX_ITEMS]] + (["…"] if len(items) > _MAX_ITEMS else [])
	return value


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record, tagged with service metadata and request context."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for name, var in _CONTEXT.items():
			value = var.get()
			if value:
				payload[name] = value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key not in _RECORD_ATTRS and not key.startswith("_"):
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Sample INFO records at ``LOG_SAMPLING_RATE_INFO``; other levels always pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = min(1.0, max(0.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	"""Route the root logger through a single JSON stream handler."""

	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers = [handler]
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
