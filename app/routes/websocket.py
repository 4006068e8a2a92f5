# app/routes/websocket.py
"""
WebSocket endpoint.

- /ws : canal unique partagé par les spectateurs et le module de simulation.
  Trames JSON {"type": ..., "payload": ...}. Les payloads invalides sont
  journalisés puis ignorés (aucune erreur renvoyée au client).
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.models.event import (
    EVENT_ACCUSE,
    EVENT_ACTION,
    EVENT_ALIASES,
    EVENT_ANNOUNCE_COLLABORATOR,
    EVENT_INITIAL_STATE,
    EVENT_NARRATION_REPLY,
    EVENT_RESTART,
    AccusePayload,
    ActionPayload,
    NarrationReply,
)
from app.services.session_engine import SessionEngine
from app.services.session_store import get_session_engine

logger = logging.getLogger(__name__)

router = APIRouter()

Handler = Callable[[SessionEngine, WebSocket, Any], Awaitable[None]]


def _as_dict(payload: Any) -> Dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


async def _on_announce(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    await engine.register_collaborator(ws)


async def _on_narration(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    if not engine.gateway.is_collaborator(ws):
        logger.warning("[WS] narration-reply from a non-collaborator socket ignored")
        return
    reply = NarrationReply.model_validate(_as_dict(payload))
    await engine.receive_narration(reply.message, reply.choices)


async def _on_action(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    action = ActionPayload.model_validate(_as_dict(payload))
    await engine.submit_action(action.message, action.player_action)


async def _on_accuse(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    accusation = AccusePayload.model_validate(_as_dict(payload))
    await engine.accuse(accusation.target_name)


async def _on_initial_state(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    await engine.send_initial_state(ws)


async def _on_restart(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    await engine.restart()


async def _on_ping(engine: SessionEngine, ws: WebSocket, payload: Any) -> None:
    await engine.gateway.send_json(ws, {"type": "pong"})


HANDLERS: Dict[str, Handler] = {
    EVENT_ANNOUNCE_COLLABORATOR: _on_announce,
    EVENT_NARRATION_REPLY: _on_narration,
    EVENT_ACTION: _on_action,
    EVENT_ACCUSE: _on_accuse,
    EVENT_INITIAL_STATE: _on_initial_state,
    EVENT_RESTART: _on_restart,
    "ping": _on_ping,
}


async def dispatch(engine: SessionEngine, ws: WebSocket, msg: Dict[str, Any]) -> None:
    """Route une trame décodée vers son handler (types inconnus ignorés)."""
    mtype = msg.get("type")
    if not isinstance(mtype, str):
        logger.debug("[WS] frame without type ignored")
        return
    mtype = EVENT_ALIASES.get(mtype, mtype)
    handler = HANDLERS.get(mtype)
    if handler is None:
        logger.debug("[WS] unknown event type %r ignored", mtype)
        return
    try:
        await handler(engine, ws, msg.get("payload"))
    except ValidationError as exc:
        logger.error("[WS] invalid %s payload: %s", mtype, exc.errors())


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    """Boucle d'écoute : une trame = un événement du protocole."""
    engine = get_session_engine()
    await engine.gateway.connect(ws)
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                # trame binaire -> ignore
                logger.debug("[WS] binary frame ignored")
                continue
            try:
                msg = orjson.loads(raw)
            except orjson.JSONDecodeError:
                # Message non JSON -> ignore
                logger.debug("[WS] non JSON frame ignored")
                continue
            if isinstance(msg, dict):
                await dispatch(engine, ws, msg)
    except WebSocketDisconnect:
        pass
    finally:
        await engine.handle_disconnect(ws)
