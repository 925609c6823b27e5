import logging
from collections import OrderedDict
from threading import Lock
from typing import Optional

from ..config import settings
from .scan_session import ScanSession

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory scan sessions keyed by the browser's session cookie.

    Least recently used sessions are evicted once max_sessions is reached.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ScanSession]" = OrderedDict()
        self._lock = Lock()

    def get(self, session_id: Optional[str]) -> Optional[ScanSession]:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def get_or_create(self, session_id: Optional[str]) -> ScanSession:
        session = self.get(session_id)
        if session is not None:
            return session

        session = ScanSession()
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("Evicted scan session %s (store full).", evicted_id)
        logger.info("Created scan session %s", session.session_id)
        return session

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


store = SessionStore(max_sessions=settings.max_sessions)
