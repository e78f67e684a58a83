"""
API routers for the host adapter.

- pieces:   piece catalogue, auth validation, actions, dropdown options
- flows:    trigger enable/disable per flow
- webhooks: incoming vendor deliveries
"""

from flowpieces.app.api.flows import router as flows_router
from flowpieces.app.api.pieces import router as pieces_router
from flowpieces.app.api.webhooks import router as webhooks_router

__all__ = ["pieces_router", "flows_router", "webhooks_router"]
