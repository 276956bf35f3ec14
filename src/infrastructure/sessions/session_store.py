from __future__ import annotations

import logging
import uuid

from src.domain.errors import SessionNotFoundError
from src.domain.services.diff_service import ObjectMatching
from src.infrastructure.cache.generation_cache import GenerationCache
from src.infrastructure.sessions.editing_session import EditingSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Process-local registry of editing sessions."""

    def __init__(
        self,
        cache_max_entries: int | None = None,
        object_matching: ObjectMatching = ObjectMatching.ID,
    ) -> None:
        self.cache_max_entries = cache_max_entries
        self.object_matching = object_matching
        self._sessions: dict[str, EditingSession] = {}

    def create(self) -> EditingSession:
        session = EditingSession(
            id=f"sess_{uuid.uuid4().hex}",
            cache=GenerationCache(max_entries=self.cache_max_entries),
            object_matching=self.object_matching,
        )
        self._sessions[session.id] = session
        logger.info("Created editing session %s", session.id)
        return session

    def get(self, session_id: str) -> EditingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def delete(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Deleted editing session %s", session_id)
        return removed

    def __len__(self) -> int:
        return len(self._sessions)
