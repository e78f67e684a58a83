"""
Kommo API Client.

Async access to Kommo's REST API v4 for leads, contacts, companies and
webhooks. Each Kommo account lives on its own subdomain, so the base URL
is derived from the connection's ``account_subdomain``.

Usage:
    async with KommoClient.from_auth(connection) as client:
        created = await client.create_lead(LeadCreate(name="Website deal"))

        contacts = await client.find_contacts("jane@example.com", with_=["leads"])

        hook = await client.create_webhook(
            destination="https://host.example.com/hooks/abc",
            settings=["add_lead"],
        )

API Reference:
    https://developers.kommo.com/reference
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from flowpieces.integrations.base import IntegrationClient, IntegrationConfig
from flowpieces.integrations.kommo.schemas import (
    ContactCreate,
    ContactUpdate,
    KommoAuth,
    KommoContact,
    KommoLead,
    LeadCreate,
    LeadUpdate,
    WebhookCreate,
    embedded_items,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v4"


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class KommoConfig(IntegrationConfig):
    """Configuration for Kommo client."""

    access_token: str = ""
    account_subdomain: str = ""
    domain: str = "kommo.com"

    def __post_init__(self):
        """Validate configuration and derive the account base URL."""
        if not self.access_token:
            raise ValueError("Kommo access token is required")
        if not self.account_subdomain:
            raise ValueError("Kommo account subdomain is required")
        if not self.base_url:
            object.__setattr__(
                self, "base_url", f"https://{self.account_subdomain}.{self.domain}"
            )


def _with_param(with_: Sequence[str] | None) -> dict[str, str]:
    """Build the ``with`` query parameter (comma-joined related entities)."""
    if with_:
        return {"with": ",".join(with_)}
    return {}


# =============================================================================
# Client
# =============================================================================


class KommoClient(IntegrationClient):
    """
    Async client for the Kommo API.

    Provides methods for:
    - Lead create/update/get/list
    - Contact create/update/list/search
    - Company search
    - Webhook registration and removal

    The client handles:
    - OAuth2 bearer authentication
    - ``_embedded`` envelope unwrapping
    - Kommo's 204 No Content answer for empty searches
    """

    def __init__(self, config: KommoConfig):
        super().__init__(config)
        self._config: KommoConfig = config

    @classmethod
    def from_auth(
        cls,
        auth: Any,
        *,
        domain: str = "kommo.com",
        timeout: float = 30.0,
        log_requests: bool = False,
    ) -> KommoClient:
        """
        Build a client from a host connection value.

        Raises:
            ConfigurationError: If the account subdomain is missing
        """
        kommo_auth = KommoAuth.from_connection(auth)
        subdomain = kommo_auth.require_subdomain()
        return cls(
            KommoConfig(
                access_token=kommo_auth.access_token.get_secret_value(),
                account_subdomain=subdomain,
                domain=domain,
                timeout=timeout,
                log_requests=log_requests,
                log_responses=log_requests,
            )
        )

    @property
    def name(self) -> str:
        return "kommo"

    @property
    def account_subdomain(self) -> str:
        return self._config.account_subdomain

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.access_token}"}

    # =========================================================================
    # Leads
    # =========================================================================

    async def create_lead(self, lead: LeadCreate) -> Any:
        """
        Create a lead.

        Kommo's create endpoint takes an array; a single-element array is sent.

        Returns:
            Raw response body (``_embedded.leads`` holds the new id)
        """
        logger.info(f"[kommo] Creating lead: {lead.name}")

        response = await self._request("POST", f"{API_PREFIX}/leads", json=[lead.to_api_dict()])
        return self._json_or_none(response)

    async def update_lead(self, lead_id: int | str, update: LeadUpdate) -> Any:
        """Update a lead. Only fields set on ``update`` are sent."""
        logger.info(f"[kommo] Updating lead: {lead_id}")

        response = await self._request(
            "PATCH",
            f"{API_PREFIX}/leads/{lead_id}",
            json=update.to_api_dict(),
        )
        return self._json_or_none(response)

    async def get_lead(self, lead_id: int | str, *, with_: Sequence[str] | None = None) -> Any:
        """
        Get a lead by id.

        Args:
            lead_id: Lead id
            with_: Related entities to include (contacts, loss_reason, ...)
        """
        params = _with_param(with_)
        response = await self._request(
            "GET",
            f"{API_PREFIX}/leads/{lead_id}",
            params=params or None,
        )
        return self._json_or_none(response)

    async def list_leads(
        self,
        *,
        limit: int = 100,
        order: str = "updated_at:desc",
    ) -> list[KommoLead]:
        """List the most recently updated leads."""
        response = await self._request(
            "GET",
            f"{API_PREFIX}/leads",
            params={"limit": str(limit), "order": order},
        )
        items = embedded_items(self._json_or_none(response), "leads")
        return [KommoLead.model_validate(item) for item in items]

    # =========================================================================
    # Contacts
    # =========================================================================

    async def create_contact(self, contact: ContactCreate) -> Any:
        logger.info(f"[kommo] Creating contact: {contact.name}")

        response = await self._request(
            "POST", f"{API_PREFIX}/contacts", json=[contact.to_api_dict()]
        )
        return self._json_or_none(response)

    async def update_contact(self, contact_id: int | str, update: ContactUpdate) -> Any:
        logger.info(f"[kommo] Updating contact: {contact_id}")

        response = await self._request(
            "PATCH",
            f"{API_PREFIX}/contacts/{contact_id}",
            json=update.to_api_dict(),
        )
        return self._json_or_none(response)

    async def list_contacts(
        self,
        *,
        limit: int = 100,
        order: str = "updated_at:desc",
    ) -> list[KommoContact]:
        response = await self._request(
            "GET",
            f"{API_PREFIX}/contacts",
            params={"limit": str(limit), "order": order},
        )
        items = embedded_items(self._json_or_none(response), "contacts")
        return [KommoContact.model_validate(item) for item in items]

    async def find_contacts(
        self,
        query: str,
        *,
        with_: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search contacts by a free-text query (e.g. an email address).

        Returns:
            Matching contacts, [] when nothing matched
        """
        params = {"query": query, **_with_param(with_)}
        response = await self._request("GET", f"{API_PREFIX}/contacts", params=params)
        return embedded_items(self._json_or_none(response), "contacts")

    # =========================================================================
    # Companies
    # =========================================================================

    async def find_companies(
        self,
        query: str,
        *,
        with_: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Search companies by partial or full name."""
        params = {"query": query, **_with_param(with_)}
        response = await self._request("GET", f"{API_PREFIX}/companies", params=params)
        return embedded_items(self._json_or_none(response), "companies")

    # =========================================================================
    # Webhooks
    # =========================================================================

    async def create_webhook(self, destination: str, settings: Sequence[str]) -> dict[str, Any]:
        """
        Subscribe ``destination`` to the given event keys.

        Returns:
            Webhook record; ``id`` is absent if the registration failed
        """
        payload = WebhookCreate(destination=destination, settings=list(settings))
        logger.info(f"[kommo] Registering webhook {payload.settings} -> {destination}")

        response = await self._request("POST", f"{API_PREFIX}/webhooks", json=payload.to_api_dict())
        body = self._json_or_none(response)
        return body if isinstance(body, dict) else {}

    async def delete_webhook(self, destination: str) -> None:
        """Remove the webhook registered for ``destination``."""
        logger.info(f"[kommo] Deleting webhook for {destination}")

        await self._request("DELETE", f"{API_PREFIX}/webhooks", json={"destination": destination})
