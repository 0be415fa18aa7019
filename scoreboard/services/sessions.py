"""
Team session management

Sessions are process-held: session-id -> dict of attributes.
A SessionContext is the per-request handle the login flow writes through.
"""
import logging
import secrets
import time
from typing import Any, Dict, Optional

from scoreboard.services.credentials import CredentialService
from scoreboard.tables import Team


logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


DEFAULT_SESSION_TTL = 3600  # seconds of inactivity before a session is dropped


class SessionStore:
    def __init__(self, ttl: float = DEFAULT_SESSION_TTL):
        self.ttl = ttl
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.last_seen: Dict[str, float] = {}

    def _expired(self, session_id: str, now: float) -> bool:
        return now - self.last_seen.get(session_id, now) > self.ttl

    def get(self, session_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return a live session's data and mark it as seen"""
        if not session_id or session_id not in self.sessions:
            return None
        now = time.monotonic()
        if self._expired(session_id, now):
            self.destroy(session_id)
            return None
        self.last_seen[session_id] = now
        return self.sessions[session_id]

    def create(self) -> str:
        self.sweep()
        session_id = new_session_id()
        self.sessions[session_id] = {}
        self.last_seen[session_id] = time.monotonic()
        return session_id

    def rotate(self, session_id: str) -> str:
        """
        Move a session's data to a fresh id

        Runs without yielding to the event loop, so the old id stops
        resolving before any other request is served.
        """
        data = self.sessions.pop(session_id, {})
        self.last_seen.pop(session_id, None)
        new_id = new_session_id()
        self.sessions[new_id] = data
        self.last_seen[new_id] = time.monotonic()
        return new_id

    def destroy(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)
        self.last_seen.pop(session_id, None)

    def sweep(self) -> int:
        """Drop every session idle for longer than the TTL"""
        now = time.monotonic()
        expired = [sid for sid in self.sessions if self._expired(sid, now)]
        for session_id in expired:
            self.destroy(session_id)
        if expired:
            logger.info(f"Dropped {len(expired)} idle sessions")
        return len(expired)

    def clear(self) -> int:
        count = len(self.sessions)
        self.sessions.clear()
        self.last_seen.clear()
        return count


class SessionContext:
    """
    The requester's session, as seen by one request

    Nothing is stored until the first attribute is set, so anonymous
    requests leave no trace in the store.
    """

    def __init__(self, store: SessionStore, session_id: Optional[str], client_ip: str):
        self.store = store
        self.client_ip = client_ip
        self.session_id = session_id if store.get(session_id) is not None else None

    @property
    def data(self) -> Dict[str, Any]:
        if self.session_id is None:
            return {}
        return self.store.sessions.get(self.session_id, {})

    def is_active(self) -> bool:
        """A session is active once a team is logged into it"""
        return "team_id" in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self.session_id not in self.store.sessions:
            self.session_id = self.store.create()
        self.store.sessions[self.session_id][key] = value

    def refresh(self) -> Optional[str]:
        """Rotate the id of a stored session; no-op before anything is stored"""
        if self.session_id is not None:
            self.session_id = self.store.rotate(self.session_id)
        return self.session_id


class SessionIssuer:
    """Writes the authenticated team into the requester's session"""

    def __init__(self, credentials: CredentialService):
        self.credentials = credentials

    def issue(self, context: SessionContext, team: Team) -> None:
        context.refresh()
        if context.is_active():
            logger.info(f"Session already active, kept as is for team {team.id}")
            return

        context.set("team_id", str(team.id))
        context.set("name", team.name)
        context.set("csrf_token", self.credentials.new_session_token())
        context.set("IP", context.client_ip)
        if team.admin:
            context.set("admin", "1")
        logger.info(f"Session opened for team {team.id} from {context.client_ip}")
