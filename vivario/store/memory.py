"""
In-memory session store.

Keeps finished session payloads and per-user check-ins for the HTTP
adapter. Malformed check-ins are dropped on read, never raised. Sessions
are capped at MAX_SESSIONS; the oldest are evicted first.
"""

import logging
import threading
import uuid
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from vivario.planner.adherence import normalize_checkins
from vivario.planner.models import CheckIn

logger = logging.getLogger(__name__)

MAX_SESSIONS = 1000


class SessionStore:
    """Thread-safe dict-backed store."""

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self._lock = threading.Lock()
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._checkins: Dict[str, Dict[str, Any]] = {}

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def save_session(self, kind: str, payload: Dict[str, Any], session_id: Optional[str] = None) -> str:
        """Store a finished payload; returns its session id."""
        session_id = session_id or uuid.uuid4().hex
        record = {
            "session_id": session_id,
            "kind": kind,
            "created_at": datetime.utcnow().isoformat(),
            "payload": payload,
        }
        with self._lock:
            self._sessions[session_id] = record
            self._sessions.move_to_end(session_id)
            evicted = 0
            while len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
                evicted += 1
        if evicted:
            logger.info(f"Evicted {evicted} oldest session(s), cap {self.max_sessions}")
        logger.info(f"Stored {kind} session {session_id}")
        return session_id

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._sessions.get(session_id)

    # -------------------------------------------------------------------------
    # Check-ins
    # -------------------------------------------------------------------------

    def put_checkin(self, user_id: str, day: date, done: bool, note: str = "") -> CheckIn:
        checkin = CheckIn(date=day, done=done, note=note)
        with self._lock:
            self._checkins.setdefault(user_id, {})[day.isoformat()] = checkin.model_dump(mode="json")
        return checkin

    def raw_checkins(self, user_id: str) -> Dict[str, Any]:
        with self._lock:
            return dict(self._checkins.get(user_id, {}))

    def list_checkins(self, user_id: str) -> List[CheckIn]:
        """Readable check-ins, oldest first."""
        records = normalize_checkins(self.raw_checkins(user_id))
        return [records[d] for d in sorted(records)]

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._checkins.clear()


_store: Optional[SessionStore] = None
_store_lock = threading.Lock()


def get_store() -> SessionStore:
    """Process-wide store instance."""
    global _store
    with _store_lock:
        if _store is None:
            _store = SessionStore()
        return _store


def reset_store() -> None:
    global _store
    with _store_lock:
        _store = None
