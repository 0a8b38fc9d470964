"""
Conversation session store.

Owns the per-session message history. Sessions are created lazily with the
system turn as their first message and leased to one exchange at a time.

Eviction is pluggable: the store asks its EvictionPolicy which idle
sessions to drop whenever a session is created or leased. Sessions with an
exchange in flight are never offered to the policy.

Dependencies: langchain_core
System role: Conversation state owner
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from langchain_core.messages import BaseMessage, SystemMessage

from kbcopilot.core.exceptions import SessionBusyError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    Conversation state of one session.

    Attributes:
        session_id: Client-chosen session identifier
        history: Ordered turns, system turn first
        last_used: Clock reading of the last lease release
        in_flight: True while an exchange holds the lease
    """

    session_id: str
    history: list[BaseMessage] = field(default_factory=list)
    last_used: float = 0.0
    in_flight: bool = False


class EvictionPolicy(ABC):
    """Chooses which idle sessions to drop."""

    @abstractmethod
    def select_victims(self, idle: list[Session], total: int, now: float) -> list[str]:
        """
        Pick sessions to evict.

        Args:
            idle: Sessions without an exchange in flight, least recently used first
            total: Number of sessions currently held, including in-flight ones
            now: Current clock reading

        Returns:
            list[str]: Session IDs to evict
        """


class TtlLruEvictionPolicy(EvictionPolicy):
    """Drop sessions idle longer than a TTL, then the least recently used over a cap."""

    def __init__(self, ttl_seconds: float | None = 3600, max_sessions: int | None = 1000) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_sessions is not None and max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def select_victims(self, idle: list[Session], total: int, now: float) -> list[str]:
        victims: list[str] = []
        remaining = total

        for session in idle:
            expired = self.ttl_seconds is not None and now - session.last_used > self.ttl_seconds
            over_cap = self.max_sessions is not None and remaining > self.max_sessions
            if expired or over_cap:
                victims.append(session.session_id)
                remaining -= 1

        return victims


class NoEvictionPolicy(EvictionPolicy):
    """Keep every session for the lifetime of the process."""

    def select_victims(self, idle: list[Session], total: int, now: float) -> list[str]:
        return []


class SessionStore(ABC):
    """Abstract session store."""

    @abstractmethod
    def lease(self, session_id: str):
        """Async context manager granting exclusive use of a session."""

    @abstractmethod
    def get(self, session_id: str) -> Session | None:
        """Return a session if present."""

    @abstractmethod
    def evict(self, session_id: str) -> bool:
        """Drop a session; return whether it existed."""


class InMemorySessionStore(SessionStore):
    """Process-local session store with pluggable eviction."""

    def __init__(
        self,
        system_prompt: str,
        eviction_policy: EvictionPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize session store.

        Args:
            system_prompt: Content of the system turn placed at the start of every session
            eviction_policy: Policy consulted on every lease (default: 1h TTL, 1000 sessions)
            clock: Monotonic time source
        """
        self._system_prompt = system_prompt
        self._policy = eviction_policy or TtlLruEvictionPolicy()
        self._clock = clock
        # Ordered least recently used first
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def evict(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        if session.in_flight:
            raise SessionBusyError(session_id)
        del self._sessions[session_id]
        logger.info("Session evicted", extra={"session_id": session_id})
        return True

    @asynccontextmanager
    async def lease(self, session_id: str) -> AsyncIterator[Session]:
        """
        Lease a session for one exchange, creating it on first use.

        Args:
            session_id: Session identifier

        Yields:
            Session: The leased session; history changes made by the holder persist

        Raises:
            SessionBusyError: When another exchange holds the session
        """
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(
                session_id=session_id,
                history=[SystemMessage(content=self._system_prompt)],
                last_used=self._clock(),
            )
            self._sessions[session_id] = session
            logger.info("Session created", extra={"session_id": session_id})
        elif session.in_flight:
            raise SessionBusyError(session_id)

        session.in_flight = True
        self._sessions.move_to_end(session_id)
        self._apply_policy()

        try:
            yield session
        finally:
            session.in_flight = False
            session.last_used = self._clock()

    def _apply_policy(self) -> None:
        idle = [session for session in self._sessions.values() if not session.in_flight]
        victims = self._policy.select_victims(idle, len(self._sessions), self._clock())
        for session_id in victims:
            self._sessions.pop(session_id, None)
        if victims:
            logger.info(
                "Sessions evicted by policy",
                extra={"evicted": len(victims), "remaining": len(self._sessions)},
            )
