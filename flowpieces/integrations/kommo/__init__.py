"""
Kommo Integration.

Kommo is a messenger-based CRM. This integration provides:
- Lead, contact and company management
- Webhook registration for lead, contact and task events

Usage:
    from flowpieces.integrations.kommo import KommoClient, LeadCreate

    client = KommoClient.from_auth({
        "access_token": "...",
        "props": {"account_subdomain": "acme"},
    })
    await client.create_lead(LeadCreate(name="Website deal", price=1500))
"""

from flowpieces.integrations.kommo.client import KommoClient, KommoConfig
from flowpieces.integrations.kommo.schemas import (
    WEBHOOK_EVENTS,
    ContactCreate,
    ContactUpdate,
    KommoAuth,
    KommoContact,
    KommoLead,
    LeadCreate,
    LeadUpdate,
    TagRef,
    coerce_custom_fields,
    embedded_items,
    normalize_tags,
)

__all__ = [
    "KommoClient",
    "KommoConfig",
    "KommoAuth",
    "KommoLead",
    "KommoContact",
    "LeadCreate",
    "LeadUpdate",
    "ContactCreate",
    "ContactUpdate",
    "TagRef",
    "WEBHOOK_EVENTS",
    "coerce_custom_fields",
    "embedded_items",
    "normalize_tags",
]
