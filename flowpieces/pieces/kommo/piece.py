"""Kommo piece definition."""

from __future__ import annotations

from flowpieces.framework.base import Piece

from .common import PIECE_NAME, ClientFactory, kommo_auth
from .companies import KommoFindCompanyAction
from .contacts import KommoCreateContactAction, KommoFindContactAction, KommoUpdateContactAction
from .leads import KommoCreateLeadAction, KommoFindLeadAction, KommoUpdateLeadAction
from .triggers import (
    KommoLeadStatusChangedTrigger,
    KommoNewContactAddedTrigger,
    KommoNewLeadCreatedTrigger,
    KommoTaskCompletedTrigger,
)


def create_kommo_piece(*, client_factory: ClientFactory | None = None) -> Piece:
    """
    Assemble the Kommo piece.

    Args:
        client_factory: Builds a KommoClient from a connection value.
            Defaults to a factory reading application settings.
    """
    return Piece(
        name=PIECE_NAME,
        display_name="Kommo",
        auth=kommo_auth,
        logo_url="https://cdn.activepieces.com/pieces/kommo.png",
        minimum_supported_release="0.36.1",
        authors=["onyedikachi-david"],
        actions=[
            KommoCreateLeadAction(client_factory=client_factory),
            KommoUpdateLeadAction(client_factory=client_factory),
            KommoCreateContactAction(client_factory=client_factory),
            KommoUpdateContactAction(client_factory=client_factory),
            KommoFindLeadAction(client_factory=client_factory),
            KommoFindContactAction(client_factory=client_factory),
            KommoFindCompanyAction(client_factory=client_factory),
        ],
        triggers=[
            KommoNewLeadCreatedTrigger(client_factory=client_factory),
            KommoLeadStatusChangedTrigger(client_factory=client_factory),
            KommoNewContactAddedTrigger(client_factory=client_factory),
            KommoTaskCompletedTrigger(client_factory=client_factory),
        ],
    )


kommo = create_kommo_piece()
