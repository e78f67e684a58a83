"""
Pydantic schemas for the Kommo API.

Request models implement the optional-field policy: a field is sent only
when present (non-None, and non-empty for text and collections). Related
entities travel in Kommo's ``_embedded`` envelope.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from flowpieces.framework.errors import ConfigurationError, InputValidationError

# Event keys accepted by POST /api/v4/webhooks "settings"
WEBHOOK_EVENTS = ("add_lead", "status_lead", "add_contact", "update_task")


# =============================================================================
# Auth
# =============================================================================


class KommoAuth(BaseModel):
    """
    OAuth2 connection for a Kommo account.

    The host stores the connection as
    ``{"access_token": "...", "props": {"account_subdomain": "acme"}}``.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: SecretStr
    account_subdomain: str | None = None

    @classmethod
    def from_connection(cls, value: Any) -> KommoAuth:
        """Parse a host connection value (or pass an instance through)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise ConfigurationError("Kommo connection is missing or malformed.")
        props = value.get("props") or {}
        return cls(
            access_token=value.get("access_token") or "",
            account_subdomain=props.get("account_subdomain") or value.get("account_subdomain"),
        )

    def require_subdomain(self) -> str:
        if not self.account_subdomain:
            raise ConfigurationError(
                "Account subdomain is missing from connection. Please reconfigure the connection."
            )
        return self.account_subdomain


# =============================================================================
# Helpers
# =============================================================================


def _present(value: Any) -> bool:
    """Whether a value counts as supplied for the optional-field policy."""
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return False
    return True


def coerce_custom_fields(value: Any) -> list[dict[str, Any]] | None:
    """
    Normalize a custom fields input.

    Accepts a list, a JSON string encoding a list, or nothing.

    Raises:
        InputValidationError: If the value is not a list of objects
    """
    if not _present(value):
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise InputValidationError(f"Custom fields must be valid JSON: {e}") from e
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise InputValidationError(
            'Custom fields must be a JSON array, e.g. [{"field_id": 123, "values": [{"value": "data"}]}]'
        )
    return value or None


def embedded_items(body: Any, key: str) -> list[Any]:
    """Return ``body["_embedded"][key]``, or [] if the envelope is absent."""
    if not isinstance(body, dict):
        return []
    embedded = body.get("_embedded")
    if not isinstance(embedded, dict):
        return []
    items = embedded.get(key)
    return items if isinstance(items, list) else []


# =============================================================================
# Request Schemas
# =============================================================================


class TagRef(BaseModel):
    """Tag reference: an existing tag by id, or a tag by name."""

    id: int | None = None
    name: str | None = None

    @classmethod
    def parse(cls, value: Any) -> TagRef:
        if isinstance(value, TagRef):
            return value
        if isinstance(value, str):
            return cls(name=value)
        if isinstance(value, int):
            return cls(id=value)
        return cls.model_validate(value)

    def to_api_dict(self) -> dict[str, Any]:
        """Prefer the id reference; {} when neither is set."""
        if self.id is not None:
            return {"id": self.id}
        if self.name:
            return {"name": self.name}
        return {}


def normalize_tags(tags: Iterable[Any] | None) -> list[dict[str, Any]]:
    """Convert tag inputs to API refs, dropping entries with neither id nor name."""
    refs = (TagRef.parse(tag).to_api_dict() for tag in tags or ())
    return [ref for ref in refs if ref]


class _KommoPayload(BaseModel):
    """Shared serialization for lead/contact payloads."""

    scalar_fields: ClassVar[tuple[str, ...]] = ()

    @field_validator("tags", "tags_to_add", "tags_to_delete", mode="before", check_fields=False)
    @classmethod
    def _parse_tags(cls, value: Any) -> list[TagRef]:
        """Accept tag names, ids or ``{"id", "name"}`` objects."""
        if value is None:
            return []
        if isinstance(value, (str, int, dict)):
            value = [value]
        return [TagRef.parse(item) for item in value]

    def _scalars(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field_name in self.scalar_fields:
            value = getattr(self, field_name)
            if _present(value):
                data[field_name] = value
        return data


class LeadCreate(_KommoPayload):
    """Schema for creating a lead."""

    scalar_fields = ("name", "price", "status_id", "pipeline_id", "responsible_user_id")

    name: str = Field(..., min_length=1, description="Lead name")
    price: int | float | None = None
    status_id: int | None = Field(None, description="Pipeline stage id")
    pipeline_id: int | None = None
    responsible_user_id: int | None = None
    contact_ids: list[int] = Field(default_factory=list)
    company_id: int | None = None
    tags: list[TagRef] = Field(default_factory=list)
    custom_fields_values: list[dict[str, Any]] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self._scalars()

        embedded: dict[str, list[dict[str, Any]]] = {}
        if self.contact_ids:
            embedded["contacts"] = [{"id": contact_id} for contact_id in self.contact_ids]
        if self.company_id is not None:
            embedded["companies"] = [{"id": self.company_id}]
        tags = normalize_tags(self.tags)
        if tags:
            embedded["tags"] = tags
        if embedded:
            data["_embedded"] = embedded

        if self.custom_fields_values:
            data["custom_fields_values"] = self.custom_fields_values
        return data


class LeadUpdate(_KommoPayload):
    """Schema for updating a lead. Only provided fields are sent."""

    scalar_fields = ("name", "price", "status_id", "pipeline_id", "responsible_user_id")

    name: str | None = None
    price: int | float | None = None
    status_id: int | None = None
    pipeline_id: int | None = None
    responsible_user_id: int | None = None
    tags_to_add: list[TagRef] = Field(default_factory=list)
    tags_to_delete: list[TagRef] = Field(default_factory=list)
    custom_fields_values: list[dict[str, Any]] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self._scalars()
        if self.custom_fields_values:
            data["custom_fields_values"] = self.custom_fields_values
        embedded = _tag_changes(self.tags_to_add, self.tags_to_delete)
        if embedded:
            data["_embedded"] = embedded
        return data


class ContactCreate(_KommoPayload):
    """Schema for creating a contact."""

    scalar_fields = ("name", "first_name", "last_name", "responsible_user_id")

    name: str = Field(..., min_length=1, description="Full name")
    first_name: str | None = None
    last_name: str | None = None
    responsible_user_id: int | None = None
    tags: list[TagRef] = Field(default_factory=list)
    custom_fields_values: list[dict[str, Any]] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self._scalars()
        if self.custom_fields_values:
            data["custom_fields_values"] = self.custom_fields_values
        tags = normalize_tags(self.tags)
        if tags:
            data["_embedded"] = {"tags": tags}
        return data


class ContactUpdate(_KommoPayload):
    """Schema for updating a contact. Only provided fields are sent."""

    scalar_fields = ("name", "first_name", "last_name", "responsible_user_id")

    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    responsible_user_id: int | None = None
    tags_to_add: list[TagRef] = Field(default_factory=list)
    tags_to_delete: list[TagRef] = Field(default_factory=list)
    custom_fields_values: list[dict[str, Any]] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self._scalars()
        if self.custom_fields_values:
            data["custom_fields_values"] = self.custom_fields_values
        embedded = _tag_changes(self.tags_to_add, self.tags_to_delete)
        if embedded:
            data["_embedded"] = embedded
        return data


def _tag_changes(to_add: list[TagRef], to_delete: list[TagRef]) -> dict[str, Any]:
    embedded: dict[str, Any] = {}
    added = normalize_tags(to_add)
    if added:
        embedded["tags_to_add"] = added
    deleted = normalize_tags(to_delete)
    if deleted:
        embedded["tags_to_delete"] = deleted
    return embedded


class WebhookCreate(BaseModel):
    """Schema for registering a webhook."""

    destination: str = Field(..., min_length=1)
    settings: list[str] = Field(..., min_length=1)

    @field_validator("settings")
    @classmethod
    def known_events(cls, v: list[str]) -> list[str]:
        unknown = [event for event in v if event not in WEBHOOK_EVENTS]
        if unknown:
            raise ValueError(f"Unsupported webhook events: {unknown}")
        return v

    def to_api_dict(self) -> dict[str, Any]:
        return {"destination": self.destination, "settings": list(self.settings)}


# =============================================================================
# Response Schemas
# =============================================================================


class KommoLead(BaseModel):
    """Lead record (only the fields used for dropdown labels are typed)."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or f"Lead ID: {self.id}"


class KommoContact(BaseModel):
    """Contact record."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or f"Contact ID: {self.id}"
