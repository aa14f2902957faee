"""Request instrumentation: request ids, access logs and HTTP metrics."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from agora.obs import logging as obs_logging
from agora.obs import metrics

REQUEST_ID_HEADER = "X-Request-Id"

# Probe and scrape traffic is counted but not access-logged.
_QUIET_PREFIXES = ("/health", "/metrics")


def _route_template(request: Request) -> str:
	route = request.scope.get("route")
	path = getattr(route, "path", None)
	return path if isinstance(path, str) else request.url.path


def _incoming_request_id(request: Request) -> str:
	supplied = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
	if supplied and len(supplied) <= 128:
		return supplied
	return uuid4().hex


class ObservabilityMiddleware(BaseHTTPMiddleware):
	def __init__(self, app) -> None:
		super().__init__(app)
		self._logger = obs_logging.get_logger("agora.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		request_id = _incoming_request_id(request)
		request.state.request_id = request_id
		client_ip = request.client.host if request.client else None
		tokens = obs_logging.bind_context(request_id=request_id, route=request.url.path, client_ip=client_ip)
		started = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
			response.headers.setdefault(REQUEST_ID_HEADER, request_id)
			return response
		except Exception:
			self._logger.exception("http_request_failed", extra={"method": request.method})
			raise
		finally:
			elapsed = time.perf_counter() - started
			metrics.observe_request(_route_template(request), request.method, status_code, elapsed)
			if not request.url.path.startswith(_QUIET_PREFIXES):
				self._logger.info(
					"http_request",
					extra={
						"method": request.method,
						"status": status_code,
						"latency_ms": round(elapsed * 1000, 3),
					},
				)
			obs_logging.reset_context(tokens)


def install(app: FastAPI) -> None:
	app.add_middleware(ObservabilityMiddleware)
