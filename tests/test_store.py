"""
Tests for the trigger key-value store.
"""

import pytest

from flowpieces.framework.store import (
    InMemoryStore,
    ScopedStore,
    StoreProtocol,
    webhook_store_key,
)


class TestWebhookStoreKey:
    def test_without_discriminator(self):
        assert webhook_store_key("kommo.new_lead_created", "webhook_id") == (
            "kommo.new_lead_created.webhook_id"
        )

    def test_with_discriminator(self):
        assert webhook_store_key("zagomail.subscriber_tagged", "webhook_id", "t1") == (
            "zagomail.subscriber_tagged.webhook_id.t1"
        )

    def test_numeric_discriminator(self):
        assert webhook_store_key("t", "destination", 7) == "t.destination.7"

    def test_empty_discriminator_ignored(self):
        assert webhook_store_key("t", "webhook_id", "") == "t.webhook_id"

    def test_distinct_triggers_distinct_keys(self):
        assert webhook_store_key("kommo.a", "webhook_id") != webhook_store_key(
            "kommo.b", "webhook_id"
        )


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_put_get_delete(self):
        store = InMemoryStore()

        await store.put("k", "v")
        assert await store.get("k") == "v"
        assert "k" in store
        assert len(store) == 1

        await store.delete("k")
        assert await store.get("k") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self):
        store = InMemoryStore()
        await store.delete("missing")
        assert store.keys() == []

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryStore(), StoreProtocol)


class TestScopedStore:
    @pytest.mark.asyncio
    async def test_keys_are_prefixed(self):
        backend = InMemoryStore()
        store = ScopedStore(backend, scope="flow-1")

        await store.put("k", 1)

        assert backend.keys() == ["flow-1:k"]
        assert await store.get("k") == 1

    @pytest.mark.asyncio
    async def test_scopes_are_isolated(self):
        backend = InMemoryStore()
        first = ScopedStore(backend, scope="flow-1")
        second = ScopedStore(backend, scope="flow-2")

        await first.put("k", "a")
        await second.put("k", "b")
        await first.delete("k")

        assert await first.get("k") is None
        assert await second.get("k") == "b"

    def test_satisfies_protocol(self):
        assert isinstance(ScopedStore(InMemoryStore(), "s"), StoreProtocol)
