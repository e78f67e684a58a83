"""
Trigger activation endpoints.

Routes (under /api/v1):
    POST /flows/{flow_id}/triggers/{piece}/{trigger}/enable
    POST /flows/{flow_id}/triggers/{piece}/{trigger}/disable

The callback URL handed to the trigger is this service's own webhook
receiver for the flow: ``{base_url}/api/v1/webhooks/{flow_id}``. A flow
has at most one active trigger.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from flowpieces.app.api.errors import to_http_exception
from flowpieces.app.api.pieces import get_piece
from flowpieces.app.api.schemas import InvocationRequest
from flowpieces.app.dependencies import TriggerActivation, flow_store, get_activations
from flowpieces.framework import PieceError, Trigger, TriggerContext
from flowpieces.integrations.base import IntegrationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flows", tags=["flows"])


def webhook_url_for(request: Request, flow_id: str) -> str:
    return f"{str(request.base_url).rstrip('/')}/api/v1/webhooks/{flow_id}"


def _get_trigger(piece_name: str, trigger_name: str) -> Trigger:
    piece = get_piece(piece_name)
    try:
        return piece.get_trigger(trigger_name)
    except PieceError as e:
        raise to_http_exception(e) from e


@router.post("/{flow_id}/triggers/{piece_name}/{trigger_name}/enable")
async def enable_trigger(
    flow_id: str,
    piece_name: str,
    trigger_name: str,
    body: InvocationRequest,
    request: Request,
) -> dict[str, Any]:
    """Register the trigger's webhook and bind it to the flow."""
    trigger = _get_trigger(piece_name, trigger_name)

    activations = get_activations()
    if flow_id in activations:
        raise HTTPException(
            status_code=409,
            detail=f"Flow '{flow_id}' already has an active trigger. Disable it first.",
        )

    webhook_url = webhook_url_for(request, flow_id)
    context = TriggerContext(
        auth=body.auth,
        store=flow_store(flow_id),
        props=body.props,
        webhook_url=webhook_url,
    )

    try:
        await trigger.on_enable(context)
    except (PieceError, IntegrationError) as e:
        logger.error(f"[api] Failed to enable {piece_name}.{trigger_name} for flow {flow_id}: {e}")
        raise to_http_exception(e) from e

    activations[flow_id] = TriggerActivation(
        flow_id=flow_id,
        piece_name=piece_name,
        trigger_name=trigger_name,
        webhook_url=webhook_url,
        auth=body.auth,
        props=body.props,
    )
    logger.info(f"[api] Enabled {piece_name}.{trigger_name} for flow {flow_id}")

    return {"flow_id": flow_id, "enabled": True, "webhook_url": webhook_url}


@router.post("/{flow_id}/triggers/{piece_name}/{trigger_name}/disable")
async def disable_trigger(
    flow_id: str,
    piece_name: str,
    trigger_name: str,
    body: InvocationRequest,
    request: Request,
) -> dict[str, Any]:
    """
    Tear down the trigger's webhook and unbind it from the flow.

    Vendor teardown is best effort; the flow is always unbound. A flow
    bound to a different trigger is left untouched (409).
    """
    trigger = _get_trigger(piece_name, trigger_name)

    activations = get_activations()
    activation = activations.get(flow_id)
    if activation is not None and (activation.piece_name, activation.trigger_name) != (
        piece_name,
        trigger_name,
    ):
        raise HTTPException(
            status_code=409,
            detail=(
                f"Flow '{flow_id}' is bound to "
                f"{activation.piece_name}.{activation.trigger_name}, not {piece_name}.{trigger_name}."
            ),
        )
    activations.pop(flow_id, None)

    context = TriggerContext(
        auth=body.auth if body.auth is not None else getattr(activation, "auth", None),
        store=flow_store(flow_id),
        props=body.props or getattr(activation, "props", {}),
        webhook_url=webhook_url_for(request, flow_id),
    )

    await trigger.on_disable(context)
    logger.info(f"[api] Disabled {piece_name}.{trigger_name} for flow {flow_id}")

    return {"flow_id": flow_id, "enabled": False}
