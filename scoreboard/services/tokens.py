"""Single-use registration tokens"""
import logging

from scoreboard.models import ErrorKind, Result
from scoreboard.store import BaseStore


logger = logging.getLogger(__name__)


class TokenService:
    def __init__(self, store: BaseStore):
        self.store = store

    async def check(self, token: str) -> bool:
        """True iff the token exists and has not been used"""
        record = await self.store.get_token(token)
        return record is not None and not record.used

    async def claim(self, token: str) -> Result[str]:
        """
        Mark the token used before the team exists

        The store only flips unused tokens, so of two concurrent claims
        exactly one succeeds.
        """
        if await self.store.claim_token(token):
            return Result.success(token)
        logger.warning(f"Token '{token}' was already used")
        return Result.failure(ErrorKind.TOKEN_ALREADY_USED)

    async def bind(self, token: str, team_id: int) -> None:
        await self.store.bind_token(token, team_id)
        logger.info(f"Token '{token}' bound to team {team_id}")

    async def release(self, token: str) -> None:
        await self.store.release_token(token)
        logger.info(f"Token '{token}' released")

    async def consume(self, token: str, team_id: int) -> Result[str]:
        """Claim and bind in one call"""
        claimed = await self.claim(token)
        if claimed.ok:
            await self.bind(token, team_id)
        return claimed
