"""Helpers for loading and bootstrapping interview sessions."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Protocol

from agents.types import InterviewSession, Stage, UserProfile

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Keyed access to one session per user id.

    Implementations decide where sessions live; the in-memory store is the
    only one shipped and keeps them for the lifetime of the process.
    """

    def get(self, user_id: str) -> Optional[InterviewSession]: ...

    def get_or_create(self, user_id: str) -> InterviewSession: ...

    def update(self, user_id: str, fn: Callable[[InterviewSession], None]) -> InterviewSession: ...


def new_session(user_id: str) -> InterviewSession:
    """Create an Introduction-stage session with a default profile."""

    profile = UserProfile(user_id=user_id)
    return InterviewSession(profile=profile, stage=Stage.INTRODUCTION)


class InMemorySessionStore:
    """Process-local session map; sessions are never evicted nor persisted."""

    def __init__(self) -> None:
        self._sessions: Dict[str, InterviewSession] = {}
        self._guard = threading.Lock()

    def get(self, user_id: str) -> Optional[InterviewSession]:
        return self._sessions.get(user_id)

    def get_or_create(self, user_id: str) -> InterviewSession:
        with self._guard:
            session = self._sessions.get(user_id)
            if session is None:
                session = new_session(user_id)
                self._sessions[user_id] = session
                logger.info("Nouvelle session créée pour l'utilisateur %s", user_id)
            return session

    def update(self, user_id: str, fn: Callable[[InterviewSession], None]) -> InterviewSession:
        session = self.get_or_create(user_id)
        with self._guard:
            fn(session)
            session.touch()
        return session


__all__ = ["InMemorySessionStore", "SessionStore", "new_session"]
