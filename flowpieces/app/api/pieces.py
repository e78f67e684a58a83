"""
Piece catalogue and action endpoints.

Routes (under /api/v1):
    GET  /pieces
    POST /pieces/{piece}/auth/validate
    POST /pieces/{piece}/actions/{action}
    POST /pieces/{piece}/actions/{action}/options/{prop}
    POST /pieces/{piece}/triggers/{trigger}/test
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from flowpieces.app.api.errors import to_http_exception
from flowpieces.app.api.schemas import AuthRequest, InvocationRequest
from flowpieces.app.dependencies import flow_store, get_registry
from flowpieces.framework import ActionContext, Piece, PieceError, TriggerContext
from flowpieces.integrations.base import IntegrationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pieces", tags=["pieces"])


def get_piece(piece_name: str) -> Piece:
    try:
        return get_registry().get_required(piece_name)
    except PieceError as e:
        raise to_http_exception(e) from e


@router.get("")
async def list_pieces() -> dict[str, Any]:
    """List loaded pieces with their auth, action and trigger schemas."""
    return {"pieces": get_registry().to_schemas()}


@router.post("/{piece_name}/auth/validate")
async def validate_auth(piece_name: str, body: AuthRequest) -> dict[str, Any]:
    piece = get_piece(piece_name)
    result = await piece.auth.validate(body.auth)
    logger.info(f"[api] Auth validation for {piece_name}: valid={result.valid}")
    return result.to_dict()


@router.post("/{piece_name}/actions/{action_name}")
async def run_action(piece_name: str, action_name: str, body: InvocationRequest) -> Any:
    """
    Run an action once.

    Returns the action's result as-is. Configuration and input problems
    answer 400, vendor failures 502.
    """
    piece = get_piece(piece_name)
    try:
        action = piece.get_action(action_name)
        logger.info(f"[api] Running action {piece_name}.{action_name}")
        return await action.run(ActionContext(auth=body.auth, props=body.props))
    except (PieceError, IntegrationError) as e:
        raise to_http_exception(e) from e


@router.post("/{piece_name}/actions/{action_name}/options/{prop_name}")
async def action_options(
    piece_name: str,
    action_name: str,
    prop_name: str,
    body: AuthRequest,
) -> dict[str, Any]:
    """Populate a dropdown property of an action."""
    piece = get_piece(piece_name)
    try:
        action = piece.get_action(action_name)
        state = await action.options(prop_name, body.auth)
    except PieceError as e:
        raise to_http_exception(e) from e
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0]) from e
    return state.to_dict()


@router.post("/{piece_name}/triggers/{trigger_name}/test")
async def test_trigger(piece_name: str, trigger_name: str, body: InvocationRequest) -> dict[str, Any]:
    """Return sample events for the flow builder."""
    piece = get_piece(piece_name)
    try:
        trigger = piece.get_trigger(trigger_name)
    except PieceError as e:
        raise to_http_exception(e) from e

    context = TriggerContext(auth=body.auth, store=flow_store("test"), props=body.props)
    return {"events": await trigger.test(context)}
