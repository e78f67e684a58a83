"""
Zagomail Integration.

Zagomail is an email-marketing service. This integration provides:
- Subscriber management and tagging
- List enumeration and campaign statistics
- Webhook registration for subscriber events
- A credential probe for connection validation

Usage:
    from flowpieces.integrations.zagomail import ZagomailClient

    async with ZagomailClient.from_auth({"publicKey": "...", "privateKey": "..."}) as client:
        record = await client.create_subscriber("list-uid", "jane@example.com")
"""

from flowpieces.integrations.zagomail.client import (
    ZagomailAPIError,
    ZagomailClient,
    ZagomailConfig,
    ZagomailResponseError,
)
from flowpieces.integrations.zagomail.schemas import (
    SUBSCRIBER_NOT_FOUND,
    WEBHOOK_EVENTS,
    MailList,
    ZagomailAuth,
    ZagomailResponse,
)

__all__ = [
    "ZagomailClient",
    "ZagomailConfig",
    "ZagomailAPIError",
    "ZagomailResponseError",
    "ZagomailAuth",
    "ZagomailResponse",
    "MailList",
    "SUBSCRIBER_NOT_FOUND",
    "WEBHOOK_EVENTS",
]
