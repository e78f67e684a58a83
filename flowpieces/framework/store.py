"""
Trigger Key-Value Store.

Triggers remember the webhook they registered so they can tear it down
later. The host supplies a persistent, flow-scoped store; this module
defines the interface pieces program against plus an in-memory backend
used by tests and the local host adapter.

Design:
    - StoreProtocol defines the interface (get/put/delete)
    - InMemoryStore is a dict-backed backend
    - ScopedStore namespaces every key, one scope per flow
    - webhook_store_key() derives keys from trigger identity instead of
      module-level constants, so parallel subscriptions never collide

Usage:
    store = ScopedStore(InMemoryStore(), scope="flow-123")

    key = webhook_store_key("kommo.new_lead_created", "webhook_id")
    await store.put(key, "42")
    await store.get(key)  # "42"
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


def webhook_store_key(
    trigger: str,
    field: str,
    discriminator: str | int | None = None,
) -> str:
    """
    Map trigger identity to a store key.

    Args:
        trigger: Qualified trigger name, e.g. "zagomail.subscriber_tagged"
        field: Stored attribute, e.g. "webhook_id" or "destination"
        discriminator: Correlation parameter for triggers that may hold
            several parallel subscriptions (e.g. one per tag id)

    Returns:
        Store key string
    """
    key = f"{trigger}.{field}"
    if discriminator is not None and discriminator != "":
        key = f"{key}.{discriminator}"
    return key


@runtime_checkable
class StoreProtocol(Protocol):
    """Interface of the host's key-value store."""

    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent."""
        ...

    async def put(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a key. Deleting a missing key is a no-op."""
        ...


class InMemoryStore:
    """
    Dict-backed store.

    Data is lost on process restart; durability is the host's concern.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self._data.get(key)

    async def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """List stored keys (for inspection in tests and health output)."""
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class ScopedStore:
    """Store view that prefixes every key with ``"{scope}:"``."""

    def __init__(self, store: StoreProtocol, scope: str) -> None:
        self._store = store
        self.scope = scope

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    async def get(self, key: str) -> Any | None:
        return await self._store.get(self._key(key))

    async def put(self, key: str, value: Any) -> None:
        await self._store.put(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self._store.delete(self._key(key))

    def __repr__(self) -> str:
        return f"<ScopedStore scope={self.scope}>"
