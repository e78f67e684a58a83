"""
Webhook Trigger Lifecycle.

Every webhook-backed trigger follows the same three-phase lifecycle:

    Disabled --on_enable--> Enabled --on_disable--> Disabled
                               |
                              run (per delivery)

on_enable registers a webhook with the vendor and persists the returned
identifier together with the callback URL. on_disable reads that record,
unregisters on a best-effort basis and clears the record. run turns a
raw delivery into the event list the flow engine consumes.

Subclasses supply the vendor specifics:
    - register(): send the registration request, return the webhook id
    - unregister(): send the teardown request
    - normalize(): locate/filter events in the delivery payload
    - store_discriminator(): correlation parameter for parallel
      subscriptions (optional)
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any

from .base import Trigger, TriggerContext
from .errors import WebhookRegistrationError
from .store import webhook_store_key

logger = logging.getLogger(__name__)

WEBHOOK_ID_FIELD = "webhook_id"
DESTINATION_FIELD = "destination"


class WebhookTrigger(Trigger):
    """Template implementation of the webhook lifecycle."""

    #: Piece name used to qualify store keys, e.g. "kommo"
    piece_name: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.piece_name}.{self.name}" if self.piece_name else self.name

    def store_discriminator(self, context: TriggerContext) -> str | int | None:
        """Correlation parameter distinguishing parallel subscriptions."""
        return None

    def store_keys(self, context: TriggerContext) -> tuple[str, str]:
        """Return the (webhook id, destination) store keys for this context."""
        discriminator = self.store_discriminator(context)
        return (
            webhook_store_key(self.qualified_name, WEBHOOK_ID_FIELD, discriminator),
            webhook_store_key(self.qualified_name, DESTINATION_FIELD, discriminator),
        )

    @abstractmethod
    async def register(self, context: TriggerContext) -> Any:
        """Register the webhook with the vendor and return its identifier."""
        ...

    @abstractmethod
    async def unregister(
        self,
        context: TriggerContext,
        webhook_id: Any,
        destination: str | None,
    ) -> None:
        """Remove a previously registered webhook."""
        ...

    @abstractmethod
    def normalize(self, payload: Any, context: TriggerContext) -> list[Any]:
        """Turn a raw delivery payload into a list of events."""
        ...

    async def on_enable(self, context: TriggerContext) -> None:
        """
        Register the webhook and persist its id and callback URL.

        Raises:
            WebhookRegistrationError: If the vendor returned no identifier.
                Nothing is written to the store in that case.
        """
        webhook_id = await self.register(context)
        if not webhook_id:
            raise WebhookRegistrationError(
                f"Failed to register webhook for '{self.qualified_name}': "
                "vendor response contained no webhook identifier"
            )

        id_key, destination_key = self.store_keys(context)
        await context.store.put(id_key, webhook_id)
        await context.store.put(destination_key, context.webhook_url)

        logger.info(
            f"[{self.qualified_name}] Webhook registered: id={webhook_id} "
            f"destination={context.webhook_url}"
        )

    async def on_disable(self, context: TriggerContext) -> None:
        """
        Unregister the stored webhook, best effort, then clear the record.

        Teardown failures are logged and swallowed: the flow is being
        deactivated regardless.
        """
        id_key, destination_key = self.store_keys(context)
        webhook_id = await context.store.get(id_key)
        destination = await context.store.get(destination_key)

        if webhook_id or destination:
            try:
                await self.unregister(context, webhook_id, destination)
                logger.info(
                    f"[{self.qualified_name}] Webhook unregistered: id={webhook_id} "
                    f"destination={destination}"
                )
            except Exception as e:
                logger.warning(
                    f"[{self.qualified_name}] Failed to unregister webhook "
                    f"id={webhook_id} destination={destination}: {e}"
                )
        else:
            logger.info(f"[{self.qualified_name}] No webhook record in store, skipping delete")

        await context.store.delete(id_key)
        await context.store.delete(destination_key)

    async def run(self, context: TriggerContext) -> list[Any]:
        events = self.normalize(context.payload, context)
        if events:
            logger.info(f"[{self.qualified_name}] Received {len(events)} event(s)")
        return events
