"""Password hashing, credential checks and CSRF tokens"""
import asyncio
import logging
import secrets
from typing import Optional

import bcrypt

from scoreboard.store import BaseStore
from scoreboard.tables import Team
from scoreboard.utils import to_base62


logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
BCRYPT_MAX_BYTES = 72
CSRF_TOKEN_BYTES = 16


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class CredentialService:
    def __init__(self, store: BaseStore, rounds: int = 12):
        self.store = store
        self.rounds = rounds
        # Checked against when the team does not exist, so both paths run bcrypt
        self._dummy_hash = bcrypt.hashpw(b"", bcrypt.gensalt(rounds))

    def hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(self.rounds)).decode("utf-8")

    async def hash(self, password: str) -> str:
        """Salted bcrypt hash. Runs in a worker thread to keep the loop free."""
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, team_id: int, password: str) -> Optional[Team]:
        """
        Check a password against a team's stored hash

        Returns:
            The team on match, None for an unknown team or a wrong password
        """
        team = await self.store.get_team(team_id)
        stored = team.password_hash.encode("utf-8") if team else self._dummy_hash

        matched = await asyncio.to_thread(bcrypt.checkpw, _encode(password), stored)
        if team and matched:
            return team

        logger.info(f"Credential check failed for team id {team_id}")
        return None

    @staticmethod
    def new_session_token() -> str:
        """16 random bytes from the OS CSPRNG, base62 encoded"""
        return to_base62(secrets.token_bytes(CSRF_TOKEN_BYTES))
