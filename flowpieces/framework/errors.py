"""
Piece-level exceptions.

These are raised by actions and triggers and propagate to the host.
Vendor transport failures live in ``flowpieces.integrations.base``.
"""

from __future__ import annotations


class PieceError(Exception):
    """Base exception for piece errors."""


class ConfigurationError(PieceError):
    """Required credential-derived context is missing (e.g. account subdomain)."""


class InputValidationError(PieceError):
    """Required input is missing or logically insufficient for the operation."""


class ActionError(PieceError):
    """A vendor call made by an action failed."""


class WebhookRegistrationError(PieceError):
    """The vendor accepted a webhook registration but returned no identifier."""


class PieceRegistryError(PieceError):
    """Unknown or duplicate piece, action or trigger."""
