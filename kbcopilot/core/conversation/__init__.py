"""Conversation orchestration: sessions, the search tool and the exchange state machine."""

from .orchestrator import ConversationOrchestrator, ExchangeState
from .prompt import SYSTEM_PROMPT
from .session_store import (
    EvictionPolicy,
    InMemorySessionStore,
    NoEvictionPolicy,
    Session,
    SessionStore,
    TtlLruEvictionPolicy,
)
from .tool import SEARCH_KNOWLEDGE_BASE_TOOL, SEARCH_TOOL_NAME

__all__ = [
    "ConversationOrchestrator",
    "EvictionPolicy",
    "ExchangeState",
    "InMemorySessionStore",
    "NoEvictionPolicy",
    "SEARCH_KNOWLEDGE_BASE_TOOL",
    "SEARCH_TOOL_NAME",
    "SYSTEM_PROMPT",
    "Session",
    "SessionStore",
    "TtlLruEvictionPolicy",
]
