"""
Piece Base Classes.

This module defines the core abstractions a piece is assembled from:
- Property: Declared input field of an action, trigger or auth
- PieceAuth: Credential descriptor (OAuth2 or custom key-based auth)
- Action: Stateless request/response mapper invoked by a flow step
- Trigger: Event source with an enable/disable lifecycle
- Piece: Self-contained bundle of auth, actions and triggers

Design Principle:
    The host platform validates inputs, stores credentials, provisions
    webhook URLs and dispatches lifecycle calls. Pieces only map inputs
    to vendor requests and vendor payloads back to flow data.

Usage:
    class GreetAction(Action):
        @property
        def name(self) -> str:
            return "greet"

        @property
        def display_name(self) -> str:
            return "Greet"

        @property
        def description(self) -> str:
            return "Greets somebody"

        @property
        def props(self) -> tuple[Property, ...]:
            return (Property.short_text("who", "Who", required=True),)

        async def run(self, context: ActionContext) -> Any:
            return {"greeting": f"Hello, {context.props['who']}!"}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import PieceRegistryError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .store import StoreProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# Properties
# =============================================================================


class PropertyType(Enum):
    """Kind of input a property collects."""

    SHORT_TEXT = "short_text"
    SECRET_TEXT = "secret_text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    JSON = "json"
    ARRAY = "array"
    DROPDOWN = "dropdown"
    MULTI_SELECT_DROPDOWN = "multi_select_dropdown"


_JSON_TYPES = {
    PropertyType.SHORT_TEXT: "string",
    PropertyType.SECRET_TEXT: "string",
    PropertyType.NUMBER: "number",
    PropertyType.CHECKBOX: "boolean",
    PropertyType.ARRAY: "array",
    PropertyType.MULTI_SELECT_DROPDOWN: "array",
}


@dataclass(frozen=True, slots=True)
class DropdownOption:
    """A single selectable dropdown entry."""

    label: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True, slots=True)
class DropdownState:
    """
    Options shown for a dropdown property.

    A disabled state carries a placeholder explaining why no options
    are available (not authenticated, vendor error, empty account).
    """

    options: tuple[DropdownOption, ...] = ()
    disabled: bool = False
    placeholder: str | None = None

    @classmethod
    def of(cls, options: Sequence[DropdownOption]) -> DropdownState:
        """Create an enabled state from a sequence of options."""
        return cls(options=tuple(options))

    @classmethod
    def unavailable(cls, placeholder: str) -> DropdownState:
        """Create a disabled state with an explanatory placeholder."""
        return cls(options=(), disabled=True, placeholder=placeholder)

    @classmethod
    def failure(cls, message: str, error: Any) -> DropdownState:
        """Log a dropdown population failure and return a disabled state."""
        logger.error(f"[dropdown] {message} {error}")
        return cls.unavailable(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "disabled": self.disabled,
            "options": [option.to_dict() for option in self.options],
        }
        if self.placeholder is not None:
            result["placeholder"] = self.placeholder
        return result


@dataclass(frozen=True, slots=True)
class Property:
    """
    Declared input field.

    Attributes:
        name: Key under which the value arrives in ``context.props``
        display_name: Human-readable label
        type: Kind of input collected
        required: Whether the host must supply a value
        description: Help text
        default: Default value offered by the host
        properties: Item fields for ARRAY properties
        options: Static options for dropdown properties
    """

    name: str
    display_name: str
    type: PropertyType
    required: bool = False
    description: str | None = None
    default: Any = None
    properties: tuple[Property, ...] = ()
    options: tuple[DropdownOption, ...] = ()

    @classmethod
    def short_text(cls, name: str, display_name: str, **kwargs: Any) -> Property:
        return cls(name, display_name, PropertyType.SHORT_TEXT, **kwargs)

    @classmethod
    def secret_text(cls, name: str, display_name: str, **kwargs: Any) -> Property:
        return cls(name, display_name, PropertyType.SECRET_TEXT, **kwargs)

    @classmethod
    def number(cls, name: str, display_name: str, **kwargs: Any) -> Property:
        return cls(name, display_name, PropertyType.NUMBER, **kwargs)

    @classmethod
    def json(cls, name: str, display_name: str, **kwargs: Any) -> Property:
        return cls(name, display_name, PropertyType.JSON, **kwargs)

    @classmethod
    def array(
        cls,
        name: str,
        display_name: str,
        *,
        properties: Sequence[Property] = (),
        **kwargs: Any,
    ) -> Property:
        return cls(
            name, display_name, PropertyType.ARRAY, properties=tuple(properties), **kwargs
        )

    @classmethod
    def dropdown(cls, name: str, display_name: str, **kwargs: Any) -> Property:
        return cls(name, display_name, PropertyType.DROPDOWN, **kwargs)

    @classmethod
    def multi_select(
        cls,
        name: str,
        display_name: str,
        *,
        options: Sequence[DropdownOption] = (),
        **kwargs: Any,
    ) -> Property:
        return cls(
            name,
            display_name,
            PropertyType.MULTI_SELECT_DROPDOWN,
            options=tuple(options),
            **kwargs,
        )

    def to_schema(self) -> dict[str, Any]:
        """Render as a JSON-Schema-like property definition."""
        schema: dict[str, Any] = {"title": self.display_name, "x-kind": self.type.value}
        json_type = _JSON_TYPES.get(self.type)
        if json_type:
            schema["type"] = json_type
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.properties:
            schema["items"] = properties_to_schema(self.properties)
        if self.options:
            schema["enum"] = [option.value for option in self.options]
        return schema


def properties_to_schema(props: Sequence[Property]) -> dict[str, Any]:
    """Render a property list as a JSON-Schema object definition."""
    return {
        "type": "object",
        "properties": {prop.name: prop.to_schema() for prop in props},
        "required": [prop.name for prop in props if prop.required],
    }


# =============================================================================
# Auth
# =============================================================================


@dataclass(frozen=True, slots=True)
class AuthValidation:
    """Outcome of a credential validation probe."""

    valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            result["error"] = self.error
        return result


class PieceAuth(ABC):
    """Credential descriptor for a piece."""

    kind: str = "none"

    def __init__(
        self,
        *,
        props: Sequence[Property] = (),
        description: str | None = None,
        required: bool = True,
    ):
        self.props = tuple(props)
        self.description = description
        self.required = required

    async def validate(self, auth: Any) -> AuthValidation:
        """Validate candidate credentials. Accepts everything by default."""
        return AuthValidation(valid=True)

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": self.kind,
            "required": self.required,
            "props": properties_to_schema(self.props),
        }
        if self.description:
            schema["description"] = self.description
        return schema


class OAuth2Auth(PieceAuth):
    """
    OAuth2 authorization-code credentials.

    Token acquisition and refresh belong to the host. The token URL may
    reference auth props, e.g. ``https://{account_subdomain}.example.com``.
    """

    kind = "oauth2"

    def __init__(
        self,
        *,
        auth_url: str,
        token_url: str,
        scope: Sequence[str] = (),
        grant_type: str = "authorization_code",
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.auth_url = auth_url
        self.token_url = token_url
        self.scope = tuple(scope)
        self.grant_type = grant_type

    def token_url_for(self, props: dict[str, Any]) -> str:
        """Expand ``{prop}`` placeholders in the token URL."""
        return self.token_url.format(**props)

    def to_schema(self) -> dict[str, Any]:
        schema = super().to_schema()
        schema.update(
            auth_url=self.auth_url,
            token_url=self.token_url,
            scope=list(self.scope),
            grant_type=self.grant_type,
        )
        return schema


class CustomAuth(PieceAuth):
    """Key-based credentials with an optional validation probe."""

    kind = "custom"

    def __init__(
        self,
        *,
        validate: Callable[[Any], Awaitable[AuthValidation]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._validate = validate

    async def validate(self, auth: Any) -> AuthValidation:
        if self._validate is None:
            return AuthValidation(valid=True)
        return await self._validate(auth)


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class ActionContext:
    """
    Invocation-scoped data handed to an action.

    Attributes:
        auth: Resolved connection value, as stored by the host
        props: Validated property values
    """

    auth: Any
    props: dict[str, Any] = field(default_factory=dict)


class Action(ABC):
    """
    Base class for piece actions.

    Contract:
        - name: Unique identifier within the piece (snake_case)
        - display_name / description: Shown in the flow builder
        - props: Declared input fields
        - run: Build one vendor request, send it, return its result

    Errors are raised, not returned: the host decides how a failed
    step affects the flow.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def props(self) -> tuple[Property, ...]:
        return ()

    @abstractmethod
    async def run(self, context: ActionContext) -> Any:
        """Execute the action against the vendor API."""
        ...

    async def options(self, prop_name: str, auth: Any) -> DropdownState:
        """
        Populate a dropdown property.

        Static dropdowns answer from their declared options; actions with
        dynamic dropdowns override this and fall back to ``super()``.

        Raises:
            KeyError: If the property is not a dropdown of this action
        """
        for prop in self.props:
            if prop.name == prop_name and prop.options:
                return DropdownState.of(prop.options)
        raise KeyError(f"Action '{self.name}' has no dropdown property '{prop_name}'")

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "props": properties_to_schema(self.props),
        }

    def __repr__(self) -> str:
        return f"<Action {self.name}>"


# =============================================================================
# Triggers
# =============================================================================


@dataclass(frozen=True)
class TriggerContext:
    """
    Invocation-scoped data handed to a trigger lifecycle callback.

    Attributes:
        auth: Resolved connection value
        store: Flow-scoped key-value store
        props: Validated property values
        webhook_url: Callback URL provisioned by the host
        payload: Body of an incoming webhook delivery (run only)
    """

    auth: Any
    store: StoreProtocol
    props: dict[str, Any] = field(default_factory=dict)
    webhook_url: str | None = None
    payload: Any = None


class Trigger(ABC):
    """
    Base class for piece triggers.

    Lifecycle:
        on_enable  - called once at activation
        run        - called for every incoming event delivery
        on_disable - called once at deactivation
        test       - returns sample events for the flow builder
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def props(self) -> tuple[Property, ...]:
        return ()

    @property
    def sample_data(self) -> Any:
        return {}

    @abstractmethod
    async def on_enable(self, context: TriggerContext) -> None:
        ...

    @abstractmethod
    async def on_disable(self, context: TriggerContext) -> None:
        ...

    @abstractmethod
    async def run(self, context: TriggerContext) -> list[Any]:
        ...

    async def test(self, context: TriggerContext) -> list[Any]:
        return [self.sample_data]

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "type": "webhook",
            "props": properties_to_schema(self.props),
            "sample_data": self.sample_data,
        }

    def __repr__(self) -> str:
        return f"<Trigger {self.name}>"


# =============================================================================
# Piece
# =============================================================================


@dataclass
class Piece:
    """A self-contained integration: auth plus actions and triggers."""

    name: str
    display_name: str
    auth: PieceAuth
    actions: list[Action] = field(default_factory=list)
    triggers: list[Trigger] = field(default_factory=list)
    logo_url: str | None = None
    authors: list[str] = field(default_factory=list)
    minimum_supported_release: str | None = None

    def get_action(self, name: str) -> Action:
        for action in self.actions:
            if action.name == name:
                return action
        available = [action.name for action in self.actions]
        raise PieceRegistryError(
            f"Action '{name}' not found in piece '{self.name}'. Available actions: {available}"
        )

    def get_trigger(self, name: str) -> Trigger:
        for trigger in self.triggers:
            if trigger.name == name:
                return trigger
        available = [trigger.name for trigger in self.triggers]
        raise PieceRegistryError(
            f"Trigger '{name}' not found in piece '{self.name}'. Available triggers: {available}"
        )

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "name": self.name,
            "display_name": self.display_name,
            "auth": self.auth.to_schema(),
            "actions": [action.to_schema() for action in self.actions],
            "triggers": [trigger.to_schema() for trigger in self.triggers],
            "authors": list(self.authors),
        }
        if self.logo_url:
            schema["logo_url"] = self.logo_url
        if self.minimum_supported_release:
            schema["minimum_supported_release"] = self.minimum_supported_release
        return schema

    def __repr__(self) -> str:
        return f"<Piece {self.name} actions={len(self.actions)} triggers={len(self.triggers)}>"
