from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiEnvelope(BaseModel):
    """``{success, data | error}`` wrapper used by both backends."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    data: Any = None
    error: str | None = None
