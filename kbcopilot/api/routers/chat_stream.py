"""
WebSocket streaming chat endpoint.

Provides real-time token streaming for chat exchanges over WebSocket.

Routes: WS /ws/sessions/{session_id}/chat

Dependencies: kbcopilot.core.conversation
System role: WebSocket streaming HTTP API
"""

import json
import logging
from contextlib import aclosing

import pydantic
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from kbcopilot.api.deps import get_orchestrator
from kbcopilot.core.conversation import ConversationOrchestrator
from kbcopilot.models.streaming import ClientChatEvent, ClientEventType, StreamEvent

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


@router.websocket("/ws/sessions/{session_id}/chat")
async def websocket_chat(
    websocket: WebSocket,
    session_id: str,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> None:
    """
    WebSocket endpoint for streaming chat exchanges.

    Client sends:
        {"event": "chat", "data": {"message": "..."}}
        {"event": "ping"}

    Server sends:
        {"event": "token", "data": {"token": "...", "index": 0}}
        {"event": "initial_end", "data": {"tool_call": true}}
        {"event": "end", "data": {}}
        {"event": "error", "data": {"code": "...", "message": "..."}}
        {"event": "pong"}

    Args:
        websocket: WebSocket connection
        session_id: Conversation session ID from path
        orchestrator: Injected ConversationOrchestrator
    """
    await websocket.accept()
    logger.info(
        "WebSocket connection established",
        extra={"session_id": session_id, "client_host": str(websocket.client)},
    )

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                data = json.loads(raw_data)
            except json.JSONDecodeError as e:
                logger.warning(
                    "Failed to parse JSON",
                    extra={"session_id": session_id, "error_msg": str(e), "raw_data_preview": raw_data[:50]},
                )
                await websocket.send_json(StreamEvent.error("INVALID_JSON", "Invalid JSON format").to_dict())
                continue

            event_type = data.get("event") if isinstance(data, dict) else None

            if event_type == ClientEventType.PING.value:
                await websocket.send_json({"event": "pong"})
                continue

            if event_type != ClientEventType.CHAT.value:
                logger.warning(
                    "Unknown event type received",
                    extra={"session_id": session_id, "event_type": str(event_type)},
                )
                await websocket.send_json(
                    StreamEvent.error("UNKNOWN_EVENT", f"Unknown event type: {event_type}").to_dict()
                )
                continue

            try:
                chat_event = ClientChatEvent.model_validate(data.get("data") or {})
            except pydantic.ValidationError:
                await websocket.send_json(
                    StreamEvent.error("MISSING_MESSAGE", "Message is required").to_dict()
                )
                continue

            event_count = 0
            async with aclosing(orchestrator.stream_exchange(session_id, chat_event.message)) as events:
                async for event in events:
                    event_count += 1
                    await websocket.send_json(event.to_dict())

            logger.info(
                "Chat stream completed",
                extra={"session_id": session_id, "total_events": event_count},
            )

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected", extra={"session_id": session_id})
