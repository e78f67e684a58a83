"""
Kommo webhook triggers.

Each trigger subscribes the flow's callback URL to one Kommo event key.
Kommo identifies webhooks by destination, so teardown deletes by the
stored destination URL.

Delivery shapes (first match wins):
    {"leads": {"add": [...]}}
    {"leads": [...]}
    [...]
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from flowpieces.framework.base import TriggerContext
from flowpieces.framework.events import extract_events
from flowpieces.framework.webhooks import WebhookTrigger

from .common import PIECE_NAME, ClientFactory, create_client

logger = logging.getLogger(__name__)


class KommoWebhookTrigger(WebhookTrigger):
    """
    Base for Kommo triggers.

    Subclasses set:
        event: Kommo webhook event key (e.g. "add_lead")
        collection_key: Top-level payload key (e.g. "leads")
        sub_keys: Nested keys tried in order (e.g. ("add",))
    """

    piece_name = PIECE_NAME

    event: str = ""
    collection_key: str = ""
    sub_keys: Sequence[str] = ()

    def __init__(self, *, client_factory: ClientFactory | None = None):
        self._client_factory = client_factory or create_client

    async def register(self, context: TriggerContext) -> Any:
        async with self._client_factory(context.auth) as client:
            webhook = await client.create_webhook(context.webhook_url, [self.event])

        webhook_id = webhook.get("id")
        if not webhook_id:
            logger.error(f"[{self.qualified_name}] Webhook response carried no id: {webhook}")
        return webhook_id

    async def unregister(
        self,
        context: TriggerContext,
        webhook_id: Any,
        destination: str | None,
    ) -> None:
        if not destination:
            logger.warning(
                f"[{self.qualified_name}] No stored destination for webhook {webhook_id}, "
                "skipping delete"
            )
            return

        async with self._client_factory(context.auth) as client:
            await client.delete_webhook(destination)

    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        return extract_events(payload, self.collection_key, self.sub_keys)


class KommoNewLeadCreatedTrigger(KommoWebhookTrigger):
    event = "add_lead"
    collection_key = "leads"
    sub_keys = ("add",)

    @property
    def name(self) -> str:
        return "new_lead_created"

    @property
    def display_name(self) -> str:
        return "New Lead Created"

    @property
    def description(self) -> str:
        return "Fires when a new lead is created in Kommo."

    @property
    def sample_data(self) -> Any:
        return {
            "leads": [
                {
                    "id": 12345,
                    "name": "New Lead via Webhook",
                    "status_id": 78910,
                    "pipeline_id": 11121,
                    "created_at": 1678886400,
                }
            ]
        }


class KommoLeadStatusChangedTrigger(KommoWebhookTrigger):
    event = "status_lead"
    collection_key = "leads"
    sub_keys = ("status",)

    @property
    def name(self) -> str:
        return "lead_status_changed"

    @property
    def display_name(self) -> str:
        return "Lead Status Changed"

    @property
    def description(self) -> str:
        return "Fires when a lead changes its pipeline stage/status."

    @property
    def sample_data(self) -> Any:
        return {
            "leads": [
                {
                    "id": 54321,
                    "status_id": "142",
                    "old_status_id": "141",
                    "pipeline_id": "1001",
                    "updated_at": 1678886500,
                }
            ]
        }


class KommoNewContactAddedTrigger(KommoWebhookTrigger):
    event = "add_contact"
    collection_key = "contacts"
    sub_keys = ("add",)

    @property
    def name(self) -> str:
        return "new_contact_added"

    @property
    def display_name(self) -> str:
        return "New Contact Added"

    @property
    def description(self) -> str:
        return "Triggers when a contact is added to Kommo."

    @property
    def sample_data(self) -> Any:
        return {
            "contacts": [
                {
                    "id": 67890,
                    "name": "New Contact via Webhook",
                    "first_name": "John",
                    "last_name": "Doe",
                    "created_at": 1678886600,
                }
            ]
        }


class KommoTaskCompletedTrigger(KommoWebhookTrigger):
    """Task updates filtered down to completed tasks."""

    event = "update_task"
    collection_key = "tasks"
    sub_keys = ("update", "status")

    @property
    def name(self) -> str:
        return "task_completed"

    @property
    def display_name(self) -> str:
        return "Task Completed"

    @property
    def description(self) -> str:
        return "Fires when a user marks a task as complete."

    @property
    def sample_data(self) -> Any:
        return {
            "tasks": [
                {
                    "id": 78901,
                    "text": "Follow up call with new lead",
                    "is_completed": True,
                    "responsible_user_id": 123,
                    "entity_id": 12345,
                    "entity_type": "leads",
                    "complete_till": 1678886700,
                    "updated_at": 1678886700,
                    "created_at": 1678880000,
                    "result": {"text": "Called and discussed next steps."},
                }
            ]
        }

    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        tasks = super().normalize(payload, context)
        # Only an explicit boolean true counts as completed
        return [
            task for task in tasks if isinstance(task, dict) and task.get("is_completed") is True
        ]
