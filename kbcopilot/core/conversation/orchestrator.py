"""
Conversation orchestrator.

Drives one streamed question-and-answer exchange:

    AWAITING_INITIAL_STREAM → STREAMING_INITIAL → DETECTING_TOOL_CALL
        → [EXECUTING_TOOL → STREAMING_FOLLOWUP] → DONE
    (any state) → ERRORED

The initial phase streams the model with the search tool bound. Content
fragments are forwarded as they arrive while tool-call fragments are
collected. If the model asked for a search, the query is embedded, the
store is queried, the call and its result are appended to the history,
and a follow-up phase is streamed with no tools bound.

The exchange works on a copy of the session history; the copy replaces the
session's history only once the exchange reaches DONE.

Dependencies: langchain_core, kbcopilot.core, kbcopilot.boundary.vdb
System role: Streaming chat state machine
"""

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage, HumanMessage, ToolMessage
from langchain_core.messages.tool import tool_call

from kbcopilot.boundary.vdb.base import VectorStore
from kbcopilot.core.conversation.session_store import SessionStore
from kbcopilot.core.conversation.tool import (
    SEARCH_KNOWLEDGE_BASE_TOOL,
    SEARCH_TOOL_NAME,
    ToolCallAccumulator,
    parse_search_arguments,
    serialize_results,
)
from kbcopilot.core.embedder import OpenAIEmbedder
from kbcopilot.core.exceptions import (
    KnowledgeBaseError,
    ModelServiceError,
    SessionBusyError,
    StorageError,
    UpstreamServiceError,
    ValidationError,
)
from kbcopilot.models.streaming import StreamEvent
from kbcopilot.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class ExchangeState(str, Enum):
    """Phases of one exchange."""

    AWAITING_INITIAL_STREAM = "awaiting_initial_stream"
    STREAMING_INITIAL = "streaming_initial"
    DETECTING_TOOL_CALL = "detecting_tool_call"
    EXECUTING_TOOL = "executing_tool"
    STREAMING_FOLLOWUP = "streaming_followup"
    DONE = "done"
    ERRORED = "errored"


@dataclass
class _Exchange:
    session_id: str
    history: list[BaseMessage]
    state: ExchangeState = ExchangeState.AWAITING_INITIAL_STREAM
    token_index: int = 0
    tool_calls: ToolCallAccumulator = field(default_factory=ToolCallAccumulator)


def error_code(exc: Exception) -> str:
    """Map an exception to the error event code sent to clients."""
    if isinstance(exc, SessionBusyError):
        return "SESSION_BUSY"
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR"
    if isinstance(exc, ModelServiceError):
        return "MODEL_ERROR"
    if isinstance(exc, UpstreamServiceError):
        return "UPSTREAM_ERROR"
    if isinstance(exc, StorageError):
        return "STORAGE_ERROR"
    return "INTERNAL_ERROR"


def content_text(content: Any) -> str:
    """Flatten message content (plain string or list of content blocks) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else "")
            for item in content
        )
    return str(content) if content else ""


class ConversationOrchestrator:
    """Run streamed exchanges against the chat model and the knowledge base."""

    def __init__(
        self,
        chat_model: BaseChatModel,
        embedder: OpenAIEmbedder,
        vector_store: VectorStore,
        session_store: SessionStore,
        default_limit: int = 5,
        max_limit: int = 20,
        stream_idle_timeout: float = 60.0,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            chat_model: Streaming chat model supporting tool binding
            embedder: Embeds search queries
            vector_store: Searched by the knowledge-base tool
            session_store: Owner of per-session histories
            default_limit: Result count when the model omits one
            max_limit: Upper bound applied to the model's requested limit
            stream_idle_timeout: Longest wait in seconds for the next model delta
        """
        self._chat_model = chat_model
        self._tool_model = chat_model.bind_tools([SEARCH_KNOWLEDGE_BASE_TOOL])
        self._embedder = embedder
        self._vector_store = vector_store
        self._sessions = session_store
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.stream_idle_timeout = stream_idle_timeout

    async def stream_exchange(self, session_id: str, message: str) -> AsyncIterator[StreamEvent]:
        """
        Stream one exchange for a session.

        Args:
            session_id: Session identifier (created on first use)
            message: User message

        Yields:
            StreamEvent: token events, then initial_end, more token events
            when the knowledge base was searched, then end; or an error
            event followed by nothing
        """
        if not message or not message.strip():
            yield StreamEvent.error("VALIDATION_ERROR", "Message is required")
            return

        start = time.perf_counter()
        try:
            async with self._sessions.lease(session_id) as session:
                exchange = _Exchange(
                    session_id=session_id,
                    history=[*session.history, HumanMessage(content=message)],
                )
                try:
                    async with aclosing(self._run(exchange)) as events:
                        async for event in events:
                            yield event
                except Exception as e:
                    log_exception_with_context(
                        logger,
                        "Exchange failed",
                        e,
                        session_id=session_id,
                        state=exchange.state.value,
                    )
                    exchange.state = ExchangeState.ERRORED
                    detail = e.message if isinstance(e, KnowledgeBaseError) else "Internal error"
                    yield StreamEvent.error(error_code(e), detail)
                    return

                session.history = exchange.history
        except SessionBusyError as e:
            logger.warning("Exchange rejected, session busy", extra={"session_id": session_id})
            yield StreamEvent.error(error_code(e), e.message)
            return

        logger.info(
            "Exchange completed",
            extra={
                "session_id": session_id,
                "tokens": exchange.token_index,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )

    async def _run(self, exchange: _Exchange) -> AsyncIterator[StreamEvent]:
        exchange.state = ExchangeState.STREAMING_INITIAL
        initial_parts: list[str] = []
        async with aclosing(self._stream_model(self._tool_model, exchange.history)) as chunks:
            async for chunk in chunks:
                text = content_text(chunk.content)
                if text:
                    initial_parts.append(text)
                    yield self._token(exchange, text)
                exchange.tool_calls.add(chunk)
        initial_text = "".join(initial_parts)

        exchange.state = ExchangeState.DETECTING_TOOL_CALL
        call = exchange.tool_calls.find(SEARCH_TOOL_NAME)
        if call is None and exchange.tool_calls.calls:
            logger.warning(
                "Ignoring call to unknown tool",
                extra={
                    "session_id": exchange.session_id,
                    "tool_names": [c.name for c in exchange.tool_calls.calls.values()],
                },
            )

        args = None
        if call is not None:
            try:
                args = parse_search_arguments(call.arguments, default_limit=self.default_limit)
            except ValidationError as e:
                logger.warning(
                    "Skipping tool call with malformed arguments",
                    extra={"session_id": exchange.session_id, "error_msg": e.message},
                )

        yield StreamEvent.initial_end(tool_call=args is not None)

        if args is None:
            if initial_text:
                exchange.history.append(AIMessage(content=initial_text))
            exchange.state = ExchangeState.DONE
            yield StreamEvent.end()
            return

        exchange.state = ExchangeState.EXECUTING_TOOL
        limit = min(args.limit, self.max_limit)
        embedding = await self._embedder.embed(args.query)
        results = await self._vector_store.query(embedding, limit)
        log_with_context(
            logger,
            logging.INFO,
            "Knowledge base searched",
            session_id=exchange.session_id,
            query=args.query,
            limit=limit,
            results=len(results),
        )

        call_id = call.id or f"call_{uuid.uuid4().hex}"
        exchange.history.append(
            AIMessage(
                content=initial_text,
                tool_calls=[
                    tool_call(name=SEARCH_TOOL_NAME, args={"query": args.query, "limit": limit}, id=call_id)
                ],
            )
        )
        exchange.history.append(
            ToolMessage(
                content=serialize_results(results),
                tool_call_id=call_id,
                name=SEARCH_TOOL_NAME,
            )
        )

        exchange.state = ExchangeState.STREAMING_FOLLOWUP
        followup_parts: list[str] = []
        async with aclosing(self._stream_model(self._chat_model, exchange.history)) as chunks:
            async for chunk in chunks:
                text = content_text(chunk.content)
                if text:
                    followup_parts.append(text)
                    yield self._token(exchange, text)

        if followup_parts:
            exchange.history.append(AIMessage(content="".join(followup_parts)))
        exchange.state = ExchangeState.DONE
        yield StreamEvent.end()

    @staticmethod
    def _token(exchange: _Exchange, text: str) -> StreamEvent:
        event = StreamEvent.token(text, exchange.token_index)
        exchange.token_index += 1
        return event

    async def _stream_model(self, model, turns: list[BaseMessage]) -> AsyncIterator[AIMessageChunk]:
        """
        Stream model deltas with a bound on the wait for each one.

        Raises:
            ModelServiceError: When the stream fails or stalls
        """
        try:
            async with aclosing(model.astream(turns)) as stream:
                while True:
                    try:
                        chunk = await asyncio.wait_for(anext(stream), timeout=self.stream_idle_timeout)
                    except StopAsyncIteration:
                        return
                    yield chunk
        except asyncio.TimeoutError as e:
            raise ModelServiceError(
                f"Chat model stream stalled for more than {self.stream_idle_timeout}s"
            ) from e
        except KnowledgeBaseError:
            raise
        except Exception as e:
            raise ModelServiceError(f"Chat model stream failed: {e}") from e
