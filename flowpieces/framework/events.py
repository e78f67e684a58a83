"""
Webhook payload normalization.

Vendors deliver events in a handful of shapes. Kommo, for example, may
send any of:

    {"leads": {"add": [{...}, {...}]}}
    {"leads": [{...}]}
    [{...}]

extract_events() tries an ordered list of shape matchers and returns the
event list from the first one that matches structurally, or an empty
list when none does. It is pure and independent of HTTP.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

# A matcher returns the located event list, or None when its shape does not apply.
ShapeMatcher = Callable[[Any], "list[Any] | None"]


def nested_collection(collection_key: str, sub_keys: Sequence[str]) -> ShapeMatcher:
    """Match ``{collection_key: {sub_key: [...]}}``, sub keys tried in order."""

    def match(payload: Any) -> list[Any] | None:
        if not isinstance(payload, dict):
            return None
        collection = payload.get(collection_key)
        if not isinstance(collection, dict):
            return None
        for sub_key in sub_keys:
            events = collection.get(sub_key)
            if isinstance(events, list):
                return events
        return None

    return match


def flat_collection(collection_key: str) -> ShapeMatcher:
    """Match ``{collection_key: [...]}``."""

    def match(payload: Any) -> list[Any] | None:
        if not isinstance(payload, dict):
            return None
        events = payload.get(collection_key)
        return events if isinstance(events, list) else None

    return match


def root_list(payload: Any) -> list[Any] | None:
    """Match a payload that is itself the event list."""
    return payload if isinstance(payload, list) else None


def default_matchers(collection_key: str, sub_keys: Sequence[str]) -> list[ShapeMatcher]:
    """Standard matcher order: nested, then flat, then root list."""
    return [
        nested_collection(collection_key, sub_keys),
        flat_collection(collection_key),
        root_list,
    ]


def first_match(payload: Any, matchers: Sequence[ShapeMatcher]) -> list[Any]:
    """Return the events located by the first matching shape, else []."""
    for matcher in matchers:
        events = matcher(payload)
        if events is not None:
            return list(events)
    return []


def extract_events(
    payload: Any,
    collection_key: str,
    sub_keys: Sequence[str],
) -> list[Any]:
    """
    Locate the event list inside a webhook payload.

    Args:
        payload: Raw delivery body (any JSON value)
        collection_key: Top-level key, e.g. "leads"
        sub_keys: Nested keys to try in order, e.g. ("add",)

    Returns:
        List of event objects (empty if no known shape matches)

    Example:
        >>> extract_events({"leads": {"add": [{"id": 1}]}}, "leads", ("add",))
        [{'id': 1}]
        >>> extract_events({"unrelated": True}, "leads", ("add",))
        []
    """
    return first_match(payload, default_matchers(collection_key, sub_keys))


def match_event_type(payload: Any, event_type: str) -> dict[str, Any] | None:
    """Return the payload if it is an object announcing ``event_type``."""
    if isinstance(payload, dict) and payload.get("event_type") == event_type:
        return payload
    return None
