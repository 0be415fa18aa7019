"""Team login"""
import logging
from typing import Optional

from scoreboard.models import ErrorKind, Result
from scoreboard.services.config_gate import ConfigGate
from scoreboard.services.credentials import CredentialService
from scoreboard.services.sessions import SessionContext, SessionIssuer
from scoreboard.store import BaseStore


logger = logging.getLogger(__name__)

SURFACE_ADMIN = "admin"
SURFACE_GAME = "game"


class LoginResolver:
    def __init__(
        self,
        store: BaseStore,
        config: ConfigGate,
        credentials: CredentialService,
        issuer: SessionIssuer,
    ):
        self.store = store
        self.config = config
        self.credentials = credentials
        self.issuer = issuer

    async def resolve_team(self, team_id: Optional[int], teamname: Optional[str]) -> Result[int]:
        """
        Find which team is logging in

        With login_select=1 the client picks a team id directly,
        otherwise the team is looked up by name.
        """
        if await self.config.login_by_id():
            if team_id is None:
                return Result.failure(ErrorKind.LOGIN_FAILED)
            return Result.success(team_id)

        team = await self.store.get_team_by_name(teamname) if teamname else None
        if team is None:
            logger.info("Login attempt for unknown team name")
            return Result.failure(ErrorKind.LOGIN_FAILED)
        return Result.success(team.id)

    async def login(self, context: SessionContext, team_id: int, password: str) -> Result[str]:
        """
        Verify credentials and open the session

        Returns:
            Result with the surface to redirect to ('admin' or 'game')
        """
        if not await self.config.enabled("login"):
            logger.info(f"Login refused for team {team_id}: login disabled")
            return Result.failure(ErrorKind.LOGIN_FAILED)

        team = await self.credentials.verify(team_id, password)
        if team is None:
            return Result.failure(ErrorKind.LOGIN_FAILED)

        self.issuer.issue(context, team)
        return Result.success(SURFACE_ADMIN if team.admin else SURFACE_GAME)

    async def login_team(
        self,
        context: SessionContext,
        team_id: Optional[int],
        teamname: Optional[str],
        password: str,
    ) -> Result[str]:
        resolved = await self.resolve_team(team_id, teamname)
        if not resolved.ok:
            return Result.failure(resolved.error)
        return await self.login(context, resolved.value, password)
