"""
Test doubles for vendor clients.
"""

from unittest.mock import AsyncMock, MagicMock


def make_fake_client(**methods):
    """
    Build a stand-in vendor client usable as ``async with factory(auth) as client``.

    Each keyword becomes an AsyncMock method: a non-exception value is its
    return value, an exception instance its side effect.
    """
    client = MagicMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    for name, value in methods.items():
        if isinstance(value, BaseException):
            setattr(client, name, AsyncMock(side_effect=value))
        else:
            setattr(client, name, AsyncMock(return_value=value))
    return client


def factory_for(client):
    """Client factory returning ``client`` for any connection."""
    return MagicMock(return_value=client)
