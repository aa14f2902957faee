"""Observability bootstrap: JSON logging and request instrumentation."""

from __future__ import annotations

from fastapi import FastAPI

from agora.obs import logging as obs_logging
from agora.obs import middleware
from agora.settings import settings


def init(app: FastAPI) -> bool:
	"""Instrument ``app`` once; returns False when observability is disabled."""

	if not settings.obs_enabled:
		return False
	if getattr(app.state, "obs_installed", False):
		return True
	obs_logging.configure_logging()
	middleware.install(app)
	app.state.obs_installed = True
	return True


__all__ = ["init"]
