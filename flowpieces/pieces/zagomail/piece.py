"""Zagomail piece definition."""

from __future__ import annotations

from flowpieces.framework.base import Piece

from .campaigns import ZagomailGetCampaignStatsAction
from .common import PIECE_NAME, ClientFactory, create_zagomail_auth
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
)


def create_zagomail_piece(*, client_factory: ClientFactory | None = None) -> Piece:
    """
    Assemble the Zagomail piece.

    Args:
        client_factory: Builds a ZagomailClient from a connection value.
            Used by actions, triggers and the auth validation probe.
    """
    return Piece(
        name=PIECE_NAME,
        display_name="Zagomail",
        auth=create_zagomail_auth(client_factory),
        logo_url="https://cdn.activepieces.com/pieces/zagomail.png",
        authors=["onyedikachi-david"],
        actions=[
            ZagomailCreateSubscriberAction(client_factory=client_factory),
            ZagomailTagSubscriberAction(client_factory=client_factory),
            ZagomailUpdateSubscriberAction(client_factory=client_factory),
            ZagomailFindSubscriberByEmailAction(client_factory=client_factory),
            ZagomailGetSubscriberDetailsAction(client_factory=client_factory),
            ZagomailGetCampaignStatsAction(client_factory=client_factory),
        ],
        triggers=[
            ZagomailNewSubscriberTrigger(client_factory=client_factory),
            ZagomailSubscriberUnsubscribedTrigger(client_factory=client_factory),
            ZagomailSubscriberTaggedTrigger(client_factory=client_factory),
        ],
    )


zagomail = create_zagomail_piece()
