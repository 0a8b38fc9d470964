"""Chat API endpoint.

Routes:
- GET /chat?sessionId=...&message=... - Stream one exchange as Server-Sent Events

Dependencies: kbcopilot.core.conversation
System role: Streaming chat HTTP API
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from kbcopilot.api.deps import get_orchestrator
from kbcopilot.core.conversation import ConversationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.get("/chat")
async def chat_stream(
    session_id: str = Query(alias="sessionId", min_length=1),
    message: str = Query(min_length=1),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Stream one exchange using Server-Sent Events (SSE).

    SSE Format:
        data: <content fragment line>
        (one data line per line of the fragment, then a blank line)

        event: initial_end
        data: [DONE]

        event: end
        data: [DONE]

        event: error
        data: <message>

    Args:
        session_id: Conversation session ID (created on first use)
        message: User message
        orchestrator: Injected ConversationOrchestrator

    Returns:
        StreamingResponse: SSE stream of exchange events
    """
    logger.info("Chat stream requested", extra={"session_id": session_id, "message_length": len(message)})

    async def event_generator() -> AsyncGenerator[str, None]:
        """Generate SSE frames; closing this generator cancels the exchange."""
        async with aclosing(orchestrator.stream_exchange(session_id, message)) as events:
            async for event in events:
                yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
