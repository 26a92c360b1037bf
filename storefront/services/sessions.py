"""
In-memory session registry.

Maps a browser session id (cookie) to its StorefrontController. Sessions
are never persisted; the least recently used one is evicted when the
registry is full.
"""

import logging
import secrets
from collections import OrderedDict
from functools import lru_cache
from typing import Callable, Optional

from storefront.controller import StorefrontController
from storefront.core.config import get_settings
from storefront.services.geo import get_geo_service
from storefront.services.notifications import get_notification_service
from storefront.services.validation import OrderFormValidator

logger = logging.getLogger(__name__)

SESSION_COOKIE = "storefront_session"


def build_controller() -> StorefrontController:
    return StorefrontController(
        validator=OrderFormValidator(get_geo_service()),
        notification_service=get_notification_service(),
    )


class SessionRegistry:
    """Bounded LRU map of session id -> controller."""

    def __init__(
        self,
        factory: Callable[[], StorefrontController] = build_controller,
        max_sessions: int = 1000,
    ):
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, StorefrontController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get_or_create(self, session_id: Optional[str]) -> tuple[str, StorefrontController]:
        """Return the session's controller, starting a new session if unknown."""
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return session_id, self._sessions[session_id]

        session_id = secrets.token_urlsafe(16)
        controller = self._factory()
        self._sessions[session_id] = controller

        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Session evicted: {evicted[:8]}...")

        logger.debug(f"Session started: {session_id[:8]}... ({len(self._sessions)} active)")
        return session_id, controller

    def clear(self) -> None:
        self._sessions.clear()


@lru_cache()
def get_session_registry() -> SessionRegistry:
    """Get the process-wide session registry."""
    return SessionRegistry(max_sessions=get_settings().max_sessions)


def reset_session_registry() -> None:
    get_session_registry.cache_clear()
