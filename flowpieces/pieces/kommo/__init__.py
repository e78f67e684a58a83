"""
Kommo Piece.

Actions:
- create_new_lead, update_lead, find_lead_by_id
- create_new_contact, update_contact, find_contact_by_email
- find_company

Triggers:
- new_lead_created, lead_status_changed, new_contact_added, task_completed

Usage:
    from flowpieces.pieces.kommo import kommo

    action = kommo.get_action("create_new_lead")
    result = await action.run(ActionContext(auth=connection, props={"name": "Deal"}))

For tests, build a piece around a stub client:

    piece = create_kommo_piece(client_factory=lambda auth: fake_client)
"""

from .common import create_client, kommo_auth
from .companies import KommoFindCompanyAction
from .contacts import KommoCreateContactAction, KommoFindContactAction, KommoUpdateContactAction
from .leads import KommoCreateLeadAction, KommoFindLeadAction, KommoUpdateLeadAction
from .piece import create_kommo_piece, kommo
from .triggers import (
    KommoLeadStatusChangedTrigger,
    KommoNewContactAddedTrigger,
    KommoNewLeadCreatedTrigger,
    KommoTaskCompletedTrigger,
    KommoWebhookTrigger,
)

__all__ = [
    "kommo",
    "create_kommo_piece",
    "kommo_auth",
    "create_client",
    "KommoCreateLeadAction",
    "KommoUpdateLeadAction",
    "KommoFindLeadAction",
    "KommoCreateContactAction",
    "KommoUpdateContactAction",
    "KommoFindContactAction",
    "KommoFindCompanyAction",
    "KommoWebhookTrigger",
    "KommoNewLeadCreatedTrigger",
    "KommoLeadStatusChangedTrigger",
    "KommoNewContactAddedTrigger",
    "KommoTaskCompletedTrigger",
]
