"""
Piece Framework.

Concrete Python seams for the host platform contract:

- base.py      # Property, PieceAuth, Action, Trigger, Piece
- store.py     # Key-value store protocol, in-memory backend, key mapping
- events.py    # Webhook payload shape matchers
- webhooks.py  # WebhookTrigger lifecycle template
- registry.py  # PieceRegistry
- errors.py    # Piece-level exceptions
"""

from .base import (
    Action,
    ActionContext,
    AuthValidation,
    CustomAuth,
    DropdownOption,
    DropdownState,
    OAuth2Auth,
    Piece,
    PieceAuth,
    Property,
    PropertyType,
    Trigger,
    TriggerContext,
    properties_to_schema,
)
from .errors import (
    ActionError,
    ConfigurationError,
    InputValidationError,
    PieceError,
    PieceRegistryError,
    WebhookRegistrationError,
)
from .events import extract_events, match_event_type
from .registry import PieceRegistry, create_default_registry
from .store import InMemoryStore, ScopedStore, StoreProtocol, webhook_store_key
from .webhooks import WebhookTrigger

__all__ = [
    # Core abstractions
    "Action",
    "ActionContext",
    "Trigger",
    "TriggerContext",
    "WebhookTrigger",
    "Piece",
    "PieceRegistry",
    "create_default_registry",
    # Properties and auth
    "Property",
    "PropertyType",
    "DropdownOption",
    "DropdownState",
    "properties_to_schema",
    "PieceAuth",
    "OAuth2Auth",
    "CustomAuth",
    "AuthValidation",
    # Store
    "StoreProtocol",
    "InMemoryStore",
    "ScopedStore",
    "webhook_store_key",
    # Events
    "extract_events",
    "match_event_type",
    # Errors
    "PieceError",
    "ConfigurationError",
    "InputValidationError",
    "ActionError",
    "WebhookRegistrationError",
    "PieceRegistryError",
]
