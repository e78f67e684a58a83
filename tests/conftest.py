"""
Pytest configuration and fixtures for flowpieces tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from flowpieces.framework import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from flowpieces.framework import InMemoryStore, ScopedStore, TriggerContext  # noqa: E402


@pytest.fixture
def kommo_connection():
    """Sample Kommo OAuth2 connection value."""
    return {
        "access_token": "kommo_test_token",
        "props": {"account_subdomain": "acme"},
    }


@pytest.fixture
def zagomail_connection():
    """Sample Zagomail key-pair connection value."""
    return {"publicKey": "pub_test_key", "privateKey": "priv_test_key"}


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def flow_store(memory_store):
    """Store view for a single test flow."""
    return ScopedStore(memory_store, scope="flow-1")


@pytest.fixture
def trigger_context(flow_store):
    """Factory for trigger contexts sharing the test flow's store."""

    def _make(auth=None, props=None, payload=None, webhook_url="https://host.example.com/hooks/flow-1"):
        return TriggerContext(
            auth=auth,
            store=flow_store,
            props=props or {},
            webhook_url=webhook_url,
            payload=payload,
        )

    return _make
