"""
Dependency Injection for the host adapter.

Provides singleton instances of the piece registry, the shared trigger
store and the table of active trigger subscriptions.

Activation state lives in process memory; a restart forgets which flows
were enabled. Persistence is the host platform's concern.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from flowpieces.config import AppSettings, get_settings
from flowpieces.framework import InMemoryStore, PieceRegistry, ScopedStore, create_default_registry

logger = logging.getLogger(__name__)

__all__ = [
    "AppSettings",
    "TriggerActivation",
    "get_settings",
    "get_registry",
    "get_store",
    "get_activations",
    "flow_store",
    "initialize_services",
    "shutdown_services",
    "reset_services",
]


@dataclass
class TriggerActivation:
    """An enabled trigger bound to a flow."""

    flow_id: str
    piece_name: str
    trigger_name: str
    webhook_url: str
    auth: Any = None
    props: dict[str, Any] = field(default_factory=dict)


# Global instances (initialized on first access)
_registry: Optional[PieceRegistry] = None
_store: Optional[InMemoryStore] = None
_activations: dict[str, TriggerActivation] = {}


def get_registry() -> PieceRegistry:
    """Get the piece registry, loading the bundled pieces on first call."""
    global _registry
    if _registry is None:
        _registry = create_default_registry()
    return _registry


def get_store() -> InMemoryStore:
    global _store
    if _store is None:
        _store = InMemoryStore()
    return _store


def get_activations() -> dict[str, TriggerActivation]:
    """Active trigger subscriptions keyed by flow id."""
    return _activations


def flow_store(flow_id: str) -> ScopedStore:
    """Store view scoped to one flow."""
    return ScopedStore(get_store(), scope=flow_id)


async def initialize_services() -> None:
    """Initialize all services on application startup."""
    registry = get_registry()
    get_store()
    logger.info(f"Loaded pieces: {registry.list_names()}")


async def shutdown_services() -> None:
    """Clean up services on application shutdown."""
    if _activations:
        logger.warning(
            f"Shutting down with {len(_activations)} active trigger(s); "
            "their vendor webhooks stay registered"
        )
    _activations.clear()


def reset_services() -> None:
    """Drop all singletons (used by tests)."""
    global _registry, _store
    _registry = None
    _store = None
    _activations.clear()
