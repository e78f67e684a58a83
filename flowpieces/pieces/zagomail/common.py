"""
Shared building blocks for the Zagomail piece.

- create_zagomail_auth: key-pair descriptor whose validation probes the API
- create_client: default per-invocation client factory
- ZagomailAction: action base holding the client factory
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from flowpieces.config import get_settings
from flowpieces.framework.base import Action, AuthValidation, CustomAuth, Property
from flowpieces.framework.errors import ConfigurationError, InputValidationError
from flowpieces.integrations.zagomail import ZagomailClient

logger = logging.getLogger(__name__)

PIECE_NAME = "zagomail"

ClientFactory = Callable[[Any], ZagomailClient]

AUTH_DESCRIPTION = """
To obtain your Zagomail API Keys, follow these steps:

1. Log in to your Zagomail account.
2. Go to **Account > API**.
3. Click on **Generate new keys** to get your Public Key and Private Key.
4. Click on **Save changes**.
"""


def create_client(auth: Any) -> ZagomailClient:
    """Build a Zagomail client from a connection using application settings."""
    settings = get_settings()
    return ZagomailClient.from_auth(
        auth,
        base_url=settings.zagomail_base_url,
        timeout=settings.http_timeout,
        log_requests=settings.log_http,
    )


def create_zagomail_auth(client_factory: ClientFactory | None = None) -> CustomAuth:
    """Key-pair auth descriptor. Validation runs the client's credential probe."""
    factory = client_factory or create_client

    async def validate(auth: Any) -> AuthValidation:
        try:
            client = factory(auth)
        except ConfigurationError as e:
            return AuthValidation(valid=False, error=str(e))

        async with client:
            result = await client.test_auth()

        if result.valid:
            return AuthValidation(valid=True)
        return AuthValidation(
            valid=False,
            error=result.error or "Authentication failed. Please check your credentials.",
        )

    return CustomAuth(
        description=AUTH_DESCRIPTION,
        required=True,
        validate=validate,
        props=(
            Property.short_text(
                "publicKey", "Public Key", description="Your Zagomail Public Key", required=True
            ),
            Property.secret_text(
                "privateKey",
                "Private Key",
                description=(
                    "Your Zagomail Private Key (currently not used for data operations, "
                    "but required for auth setup)"
                ),
                required=True,
            ),
        ),
    )


class ZagomailAction(Action):
    """Base class for Zagomail actions. One client is built per invocation."""

    def __init__(self, *, client_factory: ClientFactory | None = None):
        self._client_factory = client_factory or create_client

    def client(self, auth: Any) -> ZagomailClient:
        return self._client_factory(auth)


def require_text(props: dict[str, Any], key: str, label: str) -> str:
    """
    Return a required text prop.

    Raises:
        InputValidationError: If the value is absent or blank
    """
    value = props.get(key)
    if value is None or str(value).strip() == "":
        raise InputValidationError(f"{label} is required.")
    return str(value)


def optional_text(props: dict[str, Any], key: str) -> str | None:
    value = props.get(key)
    if value is None or value == "":
        return None
    return str(value)


def require_id(props: dict[str, Any], key: str, label: str) -> int | str:
    """
    Return a required numeric identifier.

    Hosts deliver number props as floats, so whole floats are sent as int.
    Other values pass through as text.
    """
    value = props.get(key)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return require_text(props, key, label)
