"""
Zagomail Piece.

Actions:
- create_subscriber, update_subscriber, tag_subscriber
- find_subscriber_by_email, get_subscriber_details
- get_campaign_stats

Triggers:
- new_subscriber_added, subscriber_unsubscribed, subscriber_tagged

Usage:
    from flowpieces.pieces.zagomail import zagomail

    result = await zagomail.auth.validate({"publicKey": "...", "privateKey": "..."})
"""

from .campaigns import ZagomailGetCampaignStatsAction
from .common import create_client, create_zagomail_auth
from .piece import create_zagomail_piece, zagomail
from .subscribers import (
    ZagomailCreateSubscriberAction,
    ZagomailFindSubscriberByEmailAction,
    ZagomailGetSubscriberDetailsAction,
    ZagomailTagSubscriberAction,
    ZagomailUpdateSubscriberAction,
)
from .triggers import (
    ZagomailNewSubscriberTrigger,
    ZagomailSubscriberTaggedTrigger,
    ZagomailSubscriberUnsubscribedTrigger,
    ZagomailWebhookTrigger,
)

__all__ = [
    "zagomail",
    "create_zagomail_piece",
    "create_zagomail_auth",
    "create_client",
    "ZagomailCreateSubscriberAction",
    "ZagomailUpdateSubscriberAction",
    "ZagomailTagSubscriberAction",
    "ZagomailFindSubscriberByEmailAction",
    "ZagomailGetSubscriberDetailsAction",
    "ZagomailGetCampaignStatsAction",
    "ZagomailWebhookTrigger",
    "ZagomailNewSubscriberTrigger",
    "ZagomailSubscriberUnsubscribedTrigger",
    "ZagomailSubscriberTaggedTrigger",
]
