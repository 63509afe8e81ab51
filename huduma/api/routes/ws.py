"""
Push channel endpoint.

One WebSocket per user, identified by ?userId=. A newer connection for the
same user replaces the older one, which is closed with code 4000.

Incoming messages:
- {"action": "ping"} -> {"type": "pong"}
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from huduma.api.dependencies import get_registry
from huduma.common.constants import SUPERSEDED_CLOSE_CODE, TypeMsg
from huduma.common.logger import log_debug, log_info
from huduma.config import settings
from huduma.realtime.channels import WebSocketChannel
from huduma.realtime.registry import ConnectionRegistry, PushChannel

router = APIRouter(tags=["Realtime"])


@router.websocket(settings.realtime.WS_PATH)
async def push_channel(
    websocket: WebSocket,
    user_id: str = Query(..., alias="userId", min_length=1),
    registry: ConnectionRegistry = Depends(get_registry),
) -> None:
    await websocket.accept()

    channel = WebSocketChannel(websocket)
    previous = registry.register(user_id, channel)
    if previous is not None:
        await _close_superseded(user_id, previous)

    await log_info(f"Push channel opened for user {user_id}", type_msg=TypeMsg.DEBUG)

    try:
        while True:
            text = await websocket.receive_text()
            await _handle_client_message(channel, text)
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(user_id, channel)
        await log_info(f"Push channel closed for user {user_id}", type_msg=TypeMsg.DEBUG)


async def _handle_client_message(channel: WebSocketChannel, text: str) -> None:
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError:
        await log_debug(f"Ignoring non-JSON client frame: {text[:100]}")
        return

    if isinstance(data, dict) and data.get("action") == "ping":
        await channel.send_text(json.dumps({"type": "pong"}))


async def _close_superseded(user_id: str, channel: PushChannel) -> None:
    try:
        await channel.close(code=SUPERSEDED_CLOSE_CODE, reason="superseded")
    except Exception as e:
        await log_debug(f"Superseded channel of user {user_id} already gone: {e}")
