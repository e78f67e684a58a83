"""
Pydantic schemas for the Zagomail API.

Zagomail answers every call with HTTP 200 and reports the outcome in the
body envelope ``{"status": "success" | "error", "data", "message", "error"}``.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from flowpieces.framework.errors import ConfigurationError

# Logical error text Zagomail returns for an unknown list/subscriber pair
SUBSCRIBER_NOT_FOUND = "The subscriber does not exist in this list"

# Event types accepted by webhooks/create
WEBHOOK_EVENTS = ("subscriber-activate", "subscriber-unsubscribe", "tag-added")


class ZagomailAuth(BaseModel):
    """
    API key pair for a Zagomail account.

    Only the public key is sent on data calls; the private key is
    collected at connection time but unused by the API today.
    """

    model_config = ConfigDict(extra="ignore")

    public_key: str = Field(..., min_length=1)
    private_key: SecretStr = SecretStr("")

    @classmethod
    def from_connection(cls, value: Any) -> ZagomailAuth:
        """Parse a host connection value (``publicKey``/``privateKey``)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise ConfigurationError("Zagomail connection is missing or malformed.")
        public_key = value.get("publicKey") or value.get("public_key")
        if not public_key:
            raise ConfigurationError("Zagomail public key is missing from connection.")
        return cls(
            public_key=public_key,
            private_key=value.get("privateKey") or value.get("private_key") or "",
        )


class ZagomailResponse(BaseModel):
    """Response envelope. Extra top-level fields are kept."""

    model_config = ConfigDict(extra="allow")

    status: Literal["success", "error"]
    data: Any = None
    message: Any = None
    error: Any = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def error_message(self) -> str:
        """Describe a logical error: ``error`` (JSON if structured), else ``message``."""
        for value in (self.error, self.message):
            if not value:
                continue
            if isinstance(value, (dict, list)):
                return json.dumps(value)
            return str(value)
        return "Operation failed with status: error"

    def extra_field(self, name: str) -> Any:
        """Top-level field outside the standard envelope."""
        return (self.model_extra or {}).get(name)


class MailList(BaseModel):
    """Email list (for dropdowns)."""

    model_config = ConfigDict(extra="allow")

    uid: str
    name: str

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> MailList | None:
        """
        Read a list record in either the nested ``general`` form or flat form.

        Returns None for records without a uid.
        """
        general = record.get("general") if isinstance(record.get("general"), dict) else record
        uid = general.get("list_uid") or general.get("uid")
        if not uid:
            return None
        return cls(uid=str(uid), name=str(general.get("name") or general.get("display_name") or uid))
