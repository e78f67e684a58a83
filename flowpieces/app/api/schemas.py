"""Request bodies for the host adapter API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AuthRequest(BaseModel):
    """Connection value to validate."""

    auth: Any = None


class InvocationRequest(BaseModel):
    """Connection plus property values for an action or trigger call."""

    auth: Any = None
    props: dict[str, Any] = Field(default_factory=dict)
