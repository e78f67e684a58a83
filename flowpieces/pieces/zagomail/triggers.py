"""
Zagomail webhook triggers.

Zagomail delivers one flat event per request:

    {"event_type": "tag-added", "subscriber": {...}, "tag_id": "...", ...}

Webhooks are identified by id, so teardown deletes by the stored id.
"""

from __future__ import annotations

import logging
from typing import Any

from flowpieces.framework.base import Property, TriggerContext
from flowpieces.framework.events import match_event_type
from flowpieces.framework.webhooks import WebhookTrigger

from .common import PIECE_NAME, ClientFactory, create_client

logger = logging.getLogger(__name__)


class ZagomailWebhookTrigger(WebhookTrigger):
    """Base for Zagomail triggers; subclasses set ``event_type``."""

    piece_name = PIECE_NAME

    event_type: str = ""

    def __init__(self, *, client_factory: ClientFactory | None = None):
        self._client_factory = client_factory or create_client

    def webhook_tag_id(self, context: TriggerContext) -> Any:
        """Tag filter sent on registration (tag-specific triggers only)."""
        return None

    async def register(self, context: TriggerContext) -> Any:
        async with self._client_factory(context.auth) as client:
            return await client.create_webhook(
                self.event_type,
                context.webhook_url,
                tag_id=self.webhook_tag_id(context),
            )

    async def unregister(
        self,
        context: TriggerContext,
        webhook_id: Any,
        destination: str | None,
    ) -> None:
        if not webhook_id:
            logger.info(f"[{self.qualified_name}] No webhook id in store, skipping delete")
            return

        async with self._client_factory(context.auth) as client:
            await client.delete_webhook(str(webhook_id))


class ZagomailNewSubscriberTrigger(ZagomailWebhookTrigger):
    event_type = "subscriber-activate"

    @property
    def name(self) -> str:
        return "new_subscriber_added"

    @property
    def display_name(self) -> str:
        return "New Subscriber Added"

    @property
    def description(self) -> str:
        return "Triggers when a new subscriber is activated (signed up or confirmed)."

    @property
    def sample_data(self) -> Any:
        return {
            "event_type": "subscriber-activate",
            "subscriber": {
                "subscriber_uid": "sub_123xyz",
                "email": "test@example.com",
                "fname": "Test",
                "lname": "User",
            },
            "timestamp": "2023-10-27T10:00:00Z",
        }

    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        event = match_event_type(payload, self.event_type)
        if event and event.get("subscriber"):
            return [event["subscriber"]]
        return []


class ZagomailSubscriberUnsubscribedTrigger(ZagomailWebhookTrigger):
    event_type = "subscriber-unsubscribe"

    @property
    def name(self) -> str:
        return "subscriber_unsubscribed"

    @property
    def display_name(self) -> str:
        return "Subscriber Unsubscribed"

    @property
    def description(self) -> str:
        return "Triggers when a subscriber unsubscribes from a list."

    @property
    def sample_data(self) -> Any:
        return {
            "event_type": "subscriber-unsubscribe",
            "subscriber": {
                "subscriber_uid": "sub_123xyz",
                "email": "test@example.com",
            },
            "list_uid": "list_abc789",
            "timestamp": "2023-10-27T11:00:00Z",
        }

    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        event = match_event_type(payload, self.event_type)
        return [event] if event else []


class ZagomailSubscriberTaggedTrigger(ZagomailWebhookTrigger):
    """
    Fires for one monitored tag.

    The store record is keyed by tag id, so a flow may watch several
    tags with parallel subscriptions.
    """

    event_type = "tag-added"

    @property
    def name(self) -> str:
        return "subscriber_tagged"

    @property
    def display_name(self) -> str:
        return "Subscriber Tagged"

    @property
    def description(self) -> str:
        return "Triggers when a specific tag is added to a subscriber."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "tag_id",
                "Tag ID",
                description="The ID of the tag to monitor (e.g., 'your_tag_id' from Zagomail).",
                required=True,
            ),
        )

    @property
    def sample_data(self) -> Any:
        return {
            "event_type": "tag-added",
            "subscriber": {
                "subscriber_uid": "sub_123xyz",
                "email": "test@example.com",
            },
            "tag_id": "tag_abc456",
            "list_uid": "list_def789",
            "timestamp": "2023-10-27T12:00:00Z",
        }

    def webhook_tag_id(self, context: TriggerContext) -> Any:
        return context.props.get("tag_id")

    def store_discriminator(self, context: TriggerContext) -> str | int | None:
        return context.props.get("tag_id")

    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        event = match_event_type(payload, self.event_type)
        if event is None:
            return []
        # Tag ids may arrive as numbers or strings
        if str(event.get("tag_id")) != str(context.props.get("tag_id")):
            return []
        return [event]
