"""In-memory registry of live sessions. Nothing outlives the process."""

from __future__ import annotations

import logging

from scholardesk.backends.base import GenerationBackend
from scholardesk.config import Settings, settings
from scholardesk.errors import NotFound
from scholardesk.session.controller import SessionOrchestrator

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[str, SessionOrchestrator] = {}

    def create(
        self, backend: GenerationBackend, config: Settings = settings
    ) -> SessionOrchestrator:
        session = SessionOrchestrator(backend, config)
        self._sessions[session.id] = session
        logger.info("Created session %s (%s backend)", session.id, backend.name)
        return session

    def get(self, session_id: str) -> SessionOrchestrator:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise NotFound(f"Session {session_id} not found") from None

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise NotFound(f"Session {session_id} not found")
        logger.info("Closed session %s", session_id)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
