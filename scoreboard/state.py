"""
Global application state
Shared resources accessible across all modules, filled in at startup
"""
from typing import Optional

from scoreboard.services.login import LoginResolver
from scoreboard.services.registrar import TeamRegistrar
from scoreboard.services.sessions import SessionStore
from scoreboard.store import BaseStore


STORE: Optional[BaseStore] = None

# Team sessions: session-id -> attributes
SESSIONS: SessionStore = SessionStore()

REGISTRAR: Optional[TeamRegistrar] = None
LOGIN: Optional[LoginResolver] = None
