from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InvokeRequest(BaseModel):
    """Envelope posted by the caller for a single function call."""

    model_config = ConfigDict(extra="ignore")

    fnname: str
    accountability: dict[str, Any] | None = None
    trigger: dict[str, Any] | None = None
    payload: Any = None


class ErrorResponse(BaseModel):
    error: str


class Accountability(BaseModel):
    """Who triggered the call, as reported by Directus."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    user: str | None = None
    role: str | None = None
    admin: bool | None = False
    app: bool | None = False
    ip: str | None = None
    user_agent: str | None = Field(default=None, alias="userAgent")
    origin: str | None = None
