"""
Exception to HTTP status mapping.

    PieceRegistryError        -> 404 (unknown piece, action or trigger)
    ActionError               -> 502 (vendor call failed)
    other PieceError          -> 400 (configuration or input problem)
    IntegrationError          -> 502 (vendor transport or status error)
"""

from __future__ import annotations

import logging

from fastapi import HTTPException

from flowpieces.framework.errors import ActionError, PieceError, PieceRegistryError
from flowpieces.integrations.base import IntegrationError

logger = logging.getLogger(__name__)


def to_http_exception(error: Exception) -> HTTPException:
    """Translate a piece or vendor error into an HTTPException."""
    if isinstance(error, PieceRegistryError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ActionError):
        logger.warning(f"[api] Action failed: {error}")
        return HTTPException(status_code=502, detail=str(error))
    if isinstance(error, PieceError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, IntegrationError):
        logger.warning(f"[api] Vendor call failed: {error}")
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
