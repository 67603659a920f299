"""Session persistence interface and the process-memory implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod

from clipdesk.models.session import Session


class SessionStore(ABC):
    @abstractmethod
    async def get(self, session_id: str) -> Session | None:
        """Return the session or None."""

    @abstractmethod
    async def put(self, session: Session) -> None:
        """Insert or replace a session."""

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove a session; return whether it existed."""

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """List stored session ids."""


class InMemorySessionStore(SessionStore):
    """Sessions live for the lifetime of the process only."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def get(self, session_id: str) -> Session | None:
        return self._sessions.get(str(session_id))

    async def put(self, session: Session) -> None:
        self._sessions[session.id] = session

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(str(session_id), None) is not None

    async def list_ids(self) -> list[str]:
        return list(self._sessions)
