"""
Piece Registry.

The registry holds the pieces a host loads at startup:
- Registration with validation
- Lookup by name
- Schema export for the flow builder

Usage:
    registry = PieceRegistry()
    registry.register(kommo)

    piece = registry.get_required("kommo")
    action = piece.get_action("create_new_lead")

    schemas = registry.to_schemas()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .errors import PieceRegistryError

if TYPE_CHECKING:
    from .base import Piece

logger = logging.getLogger(__name__)


class PieceRegistry:
    """Registry of loaded pieces, keyed by name."""

    def __init__(self) -> None:
        self._pieces: dict[str, Piece] = {}

    def register(self, piece: Piece) -> None:
        """
        Register a piece.

        Raises:
            PieceRegistryError: If the name is taken or the piece is invalid
        """
        if piece.name in self._pieces:
            raise PieceRegistryError(
                f"Piece '{piece.name}' already registered. Use a unique name or unregister first."
            )

        self._validate_piece(piece)

        self._pieces[piece.name] = piece
        logger.info(
            f"[piece_registry] Registered piece: {piece.name} "
            f"({len(piece.actions)} actions, {len(piece.triggers)} triggers)"
        )

    def unregister(self, name: str) -> bool:
        """Unregister a piece by name. Returns False if it was not registered."""
        if name in self._pieces:
            del self._pieces[name]
            logger.info(f"[piece_registry] Unregistered piece: {name}")
            return True
        return False

    def get(self, name: str) -> Piece | None:
        return self._pieces.get(name)

    def get_required(self, name: str) -> Piece:
        """
        Get a piece by name, raising if not found.

        Raises:
            PieceRegistryError: If piece not found
        """
        piece = self._pieces.get(name)
        if piece is None:
            available = list(self._pieces.keys())
            raise PieceRegistryError(f"Piece '{name}' not found. Available pieces: {available}")
        return piece

    def list_pieces(self) -> list[Piece]:
        return list(self._pieces.values())

    def list_names(self) -> list[str]:
        return list(self._pieces.keys())

    def to_schemas(self) -> list[dict[str, Any]]:
        return [piece.to_schema() for piece in self._pieces.values()]

    def _validate_piece(self, piece: Piece) -> None:
        """
        Validate names are present and unique within the piece.

        Raises:
            PieceRegistryError: If piece is invalid
        """
        if not piece.name or not isinstance(piece.name, str):
            raise PieceRegistryError(f"Piece must have a valid name: {piece}")

        for kind, items in (("action", piece.actions), ("trigger", piece.triggers)):
            names = [item.name for item in items]
            duplicates = {name for name in names if names.count(name) > 1}
            if duplicates:
                raise PieceRegistryError(
                    f"Piece '{piece.name}' declares duplicate {kind} names: {sorted(duplicates)}"
                )
            for item in items:
                if not item.description:
                    raise PieceRegistryError(
                        f"{kind.capitalize()} '{piece.name}.{item.name}' must have a description"
                    )

    def __len__(self) -> int:
        return len(self._pieces)

    def __contains__(self, name: str) -> bool:
        return name in self._pieces

    def __repr__(self) -> str:
        return f"<PieceRegistry pieces={list(self._pieces.keys())}>"


# =============================================================================
# Factory Functions
# =============================================================================


def create_default_registry() -> PieceRegistry:
    """Create a registry with the bundled Kommo and Zagomail pieces."""
    from flowpieces.pieces.kommo import kommo
    from flowpieces.pieces.zagomail import zagomail

    registry = PieceRegistry()
    registry.register(kommo)
    registry.register(zagomail)
    return registry
