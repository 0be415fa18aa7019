"""
Team registration

Checks run in a fixed order and the first failing one decides the outcome.
Every failure folds into the same public "Registration failed" answer, so
a caller cannot learn whether a name is taken or a token is bad.
"""
import logging
from typing import List, Optional

from scoreboard.models import ErrorKind, Result
from scoreboard.services.config_gate import ConfigGate
from scoreboard.services.credentials import CredentialService
from scoreboard.services.login import LoginResolver
from scoreboard.services.logos import LogoResolver
from scoreboard.services.sessions import SessionContext
from scoreboard.services.tokens import TokenService
from scoreboard.store import BaseStore


logger = logging.getLogger(__name__)

MAX_TEAM_NAME_LENGTH = 20


class TeamRegistrar:
    def __init__(
        self,
        store: BaseStore,
        config: ConfigGate,
        tokens: TokenService,
        logos: LogoResolver,
        credentials: CredentialService,
        login: LoginResolver,
    ):
        self.store = store
        self.config = config
        self.tokens = tokens
        self.logos = logos
        self.credentials = credentials
        self.login = login

    async def register(
        self,
        context: SessionContext,
        teamname: str,
        password: str,
        token: Optional[str] = None,
        logo: Optional[str] = None,
        is_custom_logo: bool = False,
        logo_type: Optional[str] = None,
        with_roster: bool = False,
        names: Optional[List[str]] = None,
        emails: Optional[List[str]] = None,
    ) -> Result[str]:
        """
        Create a team and log it in

        Args:
            context: Requester's session
            teamname: Requested name, trimmed and cut to 20 characters
            password: Plaintext password
            token: Registration token (required when registration_type is 2)
            logo: Stock logo name, or base64 image data when is_custom_logo
            logo_type: Client's claimed file type, never trusted
            with_roster: Store names[i]/emails[i] pairs for the team

        Returns:
            Result of the login that follows, or a registration failure
        """
        if not await self.config.enabled("registration"):
            logger.info("Registration refused: registration disabled")
            return Result.failure(ErrorKind.REGISTRATION_DISABLED)

        tokenized = await self.config.tokenized_registration()
        if tokenized and (not token or not await self.tokens.check(token)):
            logger.info("Registration refused: missing or invalid token")
            return Result.failure(ErrorKind.REGISTRATION_DISABLED)

        final_logo = await self.logos.resolve(logo, is_custom_logo, logo_type)
        if not final_logo.ok:
            return Result.failure(final_logo.error)

        if not teamname or not teamname.strip():
            logger.info("Registration refused: empty team name")
            return Result.failure(ErrorKind.REGISTRATION_DISABLED)

        shortname = teamname.strip()[:MAX_TEAM_NAME_LENGTH]

        # Early exit only; the store's unique constraint is what guarantees it
        if await self.store.team_exists(shortname):
            logger.info(f"Registration refused: team '{shortname}' exists")
            return Result.failure(ErrorKind.TEAM_CONFLICT)

        # Token is spent before the team row exists, so a lost race leaves no orphan team
        if tokenized:
            claimed = await self.tokens.claim(token)
            if not claimed.ok:
                return Result.failure(claimed.error)

        try:
            password_hash = await self.credentials.hash(password)
            team_id = await self.store.create_team(shortname, password_hash, final_logo.value)
        except Exception:
            if tokenized:
                logger.warning(f"Team '{shortname}' could not be created, releasing token")
                await self.tokens.release(token)
            raise

        if not team_id:
            logger.info(f"Registration refused: team '{shortname}' created concurrently")
            if tokenized:
                await self.tokens.release(token)
            return Result.failure(ErrorKind.TEAM_CONFLICT)

        # Bound as soon as the team exists, so a later failure cannot strand the token
        if tokenized:
            await self.tokens.bind(token, team_id)

        if with_roster:
            for name, email in zip(names or [], emails or []):
                await self.store.add_roster_entry(name, email, team_id)

        logger.info(f"Team '{shortname}' registered with id {team_id}")
        return await self.login.login(context, team_id, password)
