"""
Zagomail API Client.

Thin async client for the Zagomail email-marketing API. Zagomail always
answers with HTTP 200 and encodes logical failures in the body, so the
envelope is checked on every call:

    {"status": "success", "data": {...}}            -> passes
    {"status": "error", "error": "..."}             -> ZagomailAPIError
    anything else                                   -> ZagomailResponseError

The public key travels in the JSON body of every request (GET included).

Usage:
    async with ZagomailClient.from_auth({"publicKey": "...", "privateKey": "..."}) as client:
        record = await client.create_subscriber("list-uid", "jane@example.com", fname="Jane")
        lists = await client.get_all_lists()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pydantic

from flowpieces.framework.base import AuthValidation
from flowpieces.integrations.base import IntegrationClient, IntegrationConfig, IntegrationError
from flowpieces.integrations.zagomail.schemas import (
    SUBSCRIBER_NOT_FOUND,
    WEBHOOK_EVENTS,
    MailList,
    ZagomailAuth,
    ZagomailResponse,
)

logger = logging.getLogger(__name__)

# Probe identifiers that never exist; a "not found" answer proves the key works
_PROBE_LIST_UID = "ap-test-list-uid"
_PROBE_SUBSCRIBER_UID = "ap-test-subscriber-uid"


# =============================================================================
# Exceptions
# =============================================================================


class ZagomailAPIError(IntegrationError):
    """Zagomail answered with ``status: "error"``."""

    def __init__(self, message: str, *, response: ZagomailResponse | None = None):
        super().__init__(f"Zagomail API Error: {message}", "zagomail")
        self.response = response


class ZagomailResponseError(IntegrationError):
    """Zagomail answered with a body that is not a status envelope."""

    def __init__(self, message: str, *, body: Any = None):
        super().__init__(f"Zagomail API Error: {message}", "zagomail")
        self.body = body


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class ZagomailConfig(IntegrationConfig):
    """Configuration for Zagomail client."""

    public_key: str = ""
    base_url: str = "https://api.zagomail.com"

    def __post_init__(self):
        if not self.public_key:
            raise ValueError("Zagomail public key is required")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


# =============================================================================
# Client
# =============================================================================


class ZagomailClient(IntegrationClient):
    """
    Async client for the Zagomail API.

    Provides methods for:
    - Subscriber create/update/search/get and tagging
    - List enumeration (for dropdowns)
    - Campaign statistics
    - Webhook registration and removal
    - Credential probing (test_auth)
    """

    def __init__(self, config: ZagomailConfig):
        super().__init__(config)
        self._config: ZagomailConfig = config

    @classmethod
    def from_auth(
        cls,
        auth: Any,
        *,
        base_url: str = "https://api.zagomail.com",
        timeout: float = 30.0,
        log_requests: bool = False,
    ) -> ZagomailClient:
        """
        Build a client from a host connection value.

        Raises:
            ConfigurationError: If the public key is missing
        """
        zagomail_auth = ZagomailAuth.from_connection(auth)
        return cls(
            ZagomailConfig(
                public_key=zagomail_auth.public_key,
                base_url=base_url,
                timeout=timeout,
                log_requests=log_requests,
                log_responses=log_requests,
            )
        )

    @property
    def name(self) -> str:
        return "zagomail"

    @property
    def public_key(self) -> str:
        return self._config.public_key

    def _get_auth_headers(self) -> dict[str, str]:
        # Zagomail authenticates through the body's publicKey field
        return {}

    def _body(self, **fields: Any) -> dict[str, Any]:
        """Request body with the public key; empty optional fields are omitted."""
        body: dict[str, Any] = {"publicKey": self.public_key}
        for key, value in fields.items():
            if value is not None and value != "":
                body[key] = value
        return body

    async def call(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> ZagomailResponse:
        """
        Make a request and check the status envelope.

        Returns:
            The success envelope

        Raises:
            ZagomailAPIError: ``status == "error"``
            ZagomailResponseError: Body is not a status envelope
            IntegrationError: Transport failures and non-2xx statuses
        """
        response = await self._request(
            method,
            f"/{endpoint.lstrip('/')}",
            params=params,
            json=body if body is not None else self._body(),
        )

        try:
            payload = response.json()
        except ValueError as e:
            raise ZagomailResponseError(
                "Unexpected response structure or missing status.", body=response.text
            ) from e

        try:
            envelope = ZagomailResponse.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ZagomailResponseError(
                "Unexpected response structure or missing status.", body=payload
            ) from e

        if not envelope.is_success:
            raise ZagomailAPIError(envelope.error_message(), response=envelope)
        return envelope

    # =========================================================================
    # Subscribers
    # =========================================================================

    async def create_subscriber(
        self,
        list_uid: str,
        email: str,
        *,
        fname: str | None = None,
        lname: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a subscriber in a list.

        Raises:
            ZagomailResponseError: If the success envelope lacks the record
        """
        logger.info(f"[zagomail] Creating subscriber in list {list_uid}")

        envelope = await self.call(
            "POST",
            "lists/subscriber-create",
            params={"list_uid": list_uid},
            body=self._body(email=email, fname=fname, lname=lname),
        )
        return self._require_record(envelope, "create subscriber")

    async def update_subscriber(
        self,
        list_uid: str,
        subscriber_uid: str,
        *,
        email: str | None = None,
        fname: str | None = None,
        lname: str | None = None,
    ) -> dict[str, Any]:
        logger.info(f"[zagomail] Updating subscriber {subscriber_uid} in list {list_uid}")

        envelope = await self.call(
            "POST",
            "lists/subscriber-update",
            params={"list_uid": list_uid, "subscriber_uid": subscriber_uid},
            body=self._body(email=email, fname=fname, lname=lname),
        )
        return self._require_record(envelope, "update subscriber")

    async def search_by_email(self, list_uid: str, email: str) -> dict[str, Any] | None:
        """Find a subscriber by email. None if the success envelope has no record."""
        envelope = await self.call(
            "POST",
            "lists/search-by-email",
            params={"list_uid": list_uid},
            body=self._body(email=email),
        )
        return self._record(envelope)

    async def get_subscriber(self, list_uid: str, subscriber_uid: str) -> dict[str, Any] | None:
        envelope = await self.call(
            "GET",
            "lists/get-subscriber",
            params={"list_uid": list_uid, "subscriber_uid": subscriber_uid},
        )
        return self._record(envelope)

    async def add_tag(self, list_uid: str, subscriber_uid: str, ztag_id: int | str) -> ZagomailResponse:
        logger.info(f"[zagomail] Tagging subscriber {subscriber_uid} with tag {ztag_id}")

        return await self.call(
            "POST",
            "lists/add-tag",
            params={"ztag_id": ztag_id, "subscriber_uid": subscriber_uid, "list_uid": list_uid},
        )

    # =========================================================================
    # Lists and Campaigns
    # =========================================================================

    async def get_all_lists(self) -> list[MailList]:
        """Enumerate the account's lists. Records without a uid are skipped."""
        envelope = await self.call("POST", "lists/all-lists")

        data = envelope.data
        if isinstance(data, dict):
            records = data.get("records") or data.get("lists") or []
        elif isinstance(data, list):
            records = data
        else:
            records = []

        lists = [MailList.from_record(record) for record in records if isinstance(record, dict)]
        return [mail_list for mail_list in lists if mail_list is not None]

    async def get_campaign_stats(
        self,
        campaign_uid: str,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Any:
        """
        Get delivery statistics for a campaign.

        Raises:
            ZagomailResponseError: If the success envelope carries no data
        """
        envelope = await self.call(
            "GET",
            "campaigns/get-stats",
            params={"campaign_uid": campaign_uid},
            body=self._body(page=page, perPage=per_page),
        )
        if envelope.data is None:
            raise ZagomailResponseError(
                "Failed to get campaign stats: response data missing despite success status."
            )
        return envelope.data

    # =========================================================================
    # Webhooks
    # =========================================================================

    async def create_webhook(
        self,
        event_type: str,
        target_url: str,
        *,
        tag_id: str | int | None = None,
    ) -> str | None:
        """
        Register a webhook for ``event_type``.

        The webhook object is read from ``data.webhook`` and, failing that,
        from a top-level ``webhook`` field.

        Returns:
            Webhook id, or None if the response carries none
        """
        if event_type not in WEBHOOK_EVENTS:
            raise ValueError(f"Unsupported webhook event: {event_type}")

        logger.info(f"[zagomail] Registering webhook {event_type} -> {target_url}")

        envelope = await self.call(
            "POST",
            "webhooks/create",
            body=self._body(event_type=event_type, target_url=target_url, tagID=tag_id),
        )

        nested = envelope.data.get("webhook") if isinstance(envelope.data, dict) else None
        for webhook in (nested, envelope.extra_field("webhook")):
            if isinstance(webhook, dict) and webhook.get("id"):
                return str(webhook["id"])

        logger.error(f"[zagomail] Webhook response carried no id: {envelope.model_dump()}")
        return None

    async def delete_webhook(self, webhook_id: str) -> None:
        logger.info(f"[zagomail] Deleting webhook {webhook_id}")

        await self.call("POST", "webhooks/delete", params={"id": webhook_id})

    # =========================================================================
    # Credential Probe
    # =========================================================================

    async def test_auth(self) -> AuthValidation:
        """
        Check that the credentials reach the API.

        Queries a subscriber that cannot exist. A success envelope or the
        "does not exist" logical error both prove the key is accepted;
        every other failure marks the credentials invalid.
        """
        try:
            await self.call(
                "GET",
                "lists/get-subscriber",
                params={"list_uid": _PROBE_LIST_UID, "subscriber_uid": _PROBE_SUBSCRIBER_UID},
            )
            return AuthValidation(valid=True)
        except ZagomailAPIError as e:
            message = str(e)
            if SUBSCRIBER_NOT_FOUND in message or "subscriber not found" in message:
                return AuthValidation(valid=True)
            logger.warning(f"[zagomail] Credential probe rejected: {message}")
            return AuthValidation(valid=False, error=f"Authentication test failed: {message}")
        except IntegrationError as e:
            logger.warning(f"[zagomail] Credential probe failed: {e}")
            return AuthValidation(valid=False, error=f"Authentication test failed: {e}")

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _record(envelope: ZagomailResponse) -> dict[str, Any] | None:
        data = envelope.data
        if isinstance(data, dict) and isinstance(data.get("record"), dict):
            return data["record"]
        return None

    def _require_record(self, envelope: ZagomailResponse, operation: str) -> dict[str, Any]:
        record = self._record(envelope)
        if record is None:
            raise ZagomailResponseError(
                f"Failed to {operation}: response data or record missing despite success status."
            )
        return record
