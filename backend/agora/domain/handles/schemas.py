"""Wire schemas for the handle availability check."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HandleCheckResponse(BaseModel):
	available: bool
	suggestions: list[str] = Field(default_factory=list)
