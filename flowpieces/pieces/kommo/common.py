"""
Shared building blocks for the Kommo piece.

- kommo_auth: OAuth2 descriptor with the account subdomain prop
- create_client: default per-invocation client factory
- KommoAction: action base holding the client factory
- helpers for turning host props into request models
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import pydantic

from flowpieces.config import get_settings
from flowpieces.framework.base import Action, OAuth2Auth, Property
from flowpieces.framework.errors import InputValidationError
from flowpieces.integrations.kommo import KommoClient

logger = logging.getLogger(__name__)

PIECE_NAME = "kommo"

ClientFactory = Callable[[Any], KommoClient]
ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


kommo_auth = OAuth2Auth(
    auth_url="https://www.kommo.com/oauth",
    token_url="https://{account_subdomain}.kommo.com/oauth2/access_token",
    scope=(),
    required=True,
    props=(
        Property.short_text(
            "account_subdomain",
            "Account Subdomain",
            description=(
                "Your Kommo account subdomain "
                "(e.g., yourcompany if your URL is yourcompany.kommo.com)"
            ),
            required=True,
        ),
    ),
)


def create_client(auth: Any) -> KommoClient:
    """Build a Kommo client from a connection using application settings."""
    settings = get_settings()
    return KommoClient.from_auth(
        auth,
        domain=settings.kommo_domain,
        timeout=settings.http_timeout,
        log_requests=settings.log_http,
    )


class KommoAction(Action):
    """Base class for Kommo actions. One client is built per invocation."""

    def __init__(self, *, client_factory: ClientFactory | None = None):
        self._client_factory = client_factory or create_client

    def client(self, auth: Any) -> KommoClient:
        return self._client_factory(auth)


# =============================================================================
# Prop helpers
# =============================================================================


def build_model(model: type[ModelT], **data: Any) -> ModelT:
    """
    Validate prop values into a request model.

    Raises:
        InputValidationError: If the values do not fit the model
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise InputValidationError(f"Invalid input for {model.__name__}: {e}") from e


def id_list(items: Any) -> list[int]:
    """Read ``[{"id": 1}, 2, ...]`` array prop items into ids."""
    ids: list[int] = []
    for item in items or ():
        value = item.get("id") if isinstance(item, dict) else item
        if value is None or value == "":
            continue
        try:
            ids.append(int(value))
        except (TypeError, ValueError) as e:
            raise InputValidationError(f"Invalid id: {value!r}") from e
    return ids


def require_value(props: dict[str, Any], key: str, label: str) -> Any:
    """
    Return a required prop value.

    Raises:
        InputValidationError: If the value is absent
    """
    value = props.get(key)
    if value is None or value == "":
        raise InputValidationError(f"{label} is required.")
    return value


def with_values(props: dict[str, Any]) -> list[str]:
    """Selected related entities of a ``with_param`` multi-select."""
    values = props.get("with_param") or []
    if isinstance(values, str):
        values = [values]
    return [str(value) for value in values if value]


def tag_item_props(verb: str) -> tuple[Property, ...]:
    """Item fields of a tag array prop (id or name)."""
    return (
        Property.number("id", f"Tag ID to {verb}", required=False),
        Property.short_text("name", f"Tag Name to {verb}", required=False),
    )


def custom_fields_prop(description: str) -> Property:
    return Property.json(
        "custom_fields_values",
        "Custom Fields",
        description=description,
        required=False,
        default=[],
    )
