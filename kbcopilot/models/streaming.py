"""
Streaming event schemas for chat.

Defines the server-pushed events of one exchange and their two wire
encodings: Server-Sent Events for the HTTP endpoint and JSON objects for
the WebSocket endpoint.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

DONE_MARKER = "[DONE]"


class StreamEventType(str, Enum):
    """Server-to-client event types for streaming chat."""

    TOKEN = "token"
    INITIAL_END = "initial_end"
    END = "end"
    ERROR = "error"


class ClientEventType(str, Enum):
    """Client-to-server event types (WebSocket)."""

    CHAT = "chat"
    PING = "ping"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def token(cls, text: str, index: int) -> "StreamEvent":
        return cls(event=StreamEventType.TOKEN, data={"token": text, "index": index})

    @classmethod
    def initial_end(cls, tool_call: bool) -> "StreamEvent":
        return cls(event=StreamEventType.INITIAL_END, data={"tool_call": tool_call})

    @classmethod
    def end(cls) -> "StreamEvent":
        return cls(event=StreamEventType.END)

    @classmethod
    def error(cls, code: str, message: str) -> "StreamEvent":
        return cls(event=StreamEventType.ERROR, data={"code": code, "message": message})

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}

    def to_sse(self) -> str:
        """
        Encode as a Server-Sent Events frame.

        Content fragments are sent as unnamed events with one ``data:`` line
        per line of the fragment, so SSE clients rejoin embedded newlines.
        Markers are named events carrying ``[DONE]``.

        Returns:
            str: Frame terminated by a blank line
        """
        if self.event == StreamEventType.TOKEN:
            return _data_lines(self.data["token"]) + "\n"
        if self.event == StreamEventType.ERROR:
            return f"event: {self.event.value}\n" + _data_lines(self.data["message"]) + "\n"
        return f"event: {self.event.value}\ndata: {DONE_MARKER}\n\n"


def _data_lines(text: str) -> str:
    return "".join(f"data: {line}\n" for line in text.split("\n"))


class ClientChatEvent(BaseModel):
    """
    Client chat message event payload.

    Attributes:
        message: User's chat message
    """

    message: str = Field(min_length=1)
