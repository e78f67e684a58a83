"""
Incoming webhook receiver.

Vendors POST event deliveries to ``/api/v1/webhooks/{flow_id}``; the
flow's active trigger turns the body into the event list.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from flowpieces.app.api.pieces import get_piece
from flowpieces.app.dependencies import flow_store, get_activations
from flowpieces.framework import TriggerContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/{flow_id}")
async def receive_webhook(flow_id: str, request: Request) -> dict[str, Any]:
    """
    Handle a vendor delivery.

    Returns:
        {"events": [...]} as produced by the trigger's run
    """
    activation = get_activations().get(flow_id)
    if activation is None:
        raise HTTPException(status_code=404, detail=f"No active trigger for flow '{flow_id}'")

    try:
        payload = await request.json()
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}") from e

    trigger = get_piece(activation.piece_name).get_trigger(activation.trigger_name)
    context = TriggerContext(
        auth=activation.auth,
        store=flow_store(flow_id),
        props=activation.props,
        webhook_url=activation.webhook_url,
        payload=payload,
    )

    events = await trigger.run(context)
    logger.info(
        f"[webhook] flow={flow_id} trigger={activation.piece_name}.{activation.trigger_name} "
        f"events={len(events)}"
    )
    return {"events": events}
