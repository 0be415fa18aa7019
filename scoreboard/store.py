"""
Async persistence layer

Two implementations share one contract:
- MemoryStore: process-held dicts, for development and tests
- SQLStore: SQLModel tables, blocking calls pushed to a worker thread

Uniqueness of team and logo names and the unused -> used token transition
are enforced here, not by the callers' existence checks.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, create_engine, select

from scoreboard.tables import ConfigEntry, Logo, RosterEntry, Team, Token


logger = logging.getLogger(__name__)


class BaseStore(ABC):
    """Typed accessors used by the services"""

    async def init(self) -> None:
        """Prepare the backing storage"""

    # Configuration

    @abstractmethod
    async def get_config(self, name: str) -> Optional[str]: ...

    @abstractmethod
    async def set_config(self, name: str, value: str, overwrite: bool = True) -> None: ...

    # Teams

    @abstractmethod
    async def get_team(self, team_id: int) -> Optional[Team]: ...

    @abstractmethod
    async def get_team_by_name(self, name: str) -> Optional[Team]: ...

    async def team_exists(self, name: str) -> bool:
        return await self.get_team_by_name(name) is not None

    @abstractmethod
    async def create_team(
        self, name: str, password_hash: str, logo: str, admin: bool = False
    ) -> Optional[int]:
        """Insert a team. Returns the new id, or None if the name is taken."""

    @abstractmethod
    async def add_roster_entry(self, name: str, email: str, team_id: int) -> RosterEntry: ...

    @abstractmethod
    async def roster(self, team_id: int) -> List[RosterEntry]: ...

    # Registration tokens

    @abstractmethod
    async def create_token(self, token: str) -> Optional[Token]: ...

    @abstractmethod
    async def get_token(self, token: str) -> Optional[Token]: ...

    @abstractmethod
    async def claim_token(self, token: str) -> bool:
        """Mark an unused token as used. False if it is missing or already used."""

    @abstractmethod
    async def bind_token(self, token: str, team_id: int) -> None: ...

    @abstractmethod
    async def release_token(self, token: str) -> None:
        """Undo a claim that was never bound to a team"""

    # Logos

    @abstractmethod
    async def get_logo(self, name: str) -> Optional[Logo]: ...

    @abstractmethod
    async def all_logos(self) -> List[Logo]: ...

    @abstractmethod
    async def create_logo(
        self,
        name: str,
        path: str,
        used: bool = False,
        enabled: bool = True,
        protected: bool = False,
        custom: bool = False,
    ) -> Optional[Logo]:
        """Insert a logo. Returns None if the name is taken."""

    @abstractmethod
    async def set_logo_enabled(self, logo_id: int, enabled: bool) -> None: ...


class MemoryStore(BaseStore):
    """
    In-process store

    Each mutating method runs without awaiting between its check and its
    write, so it is atomic with respect to other tasks on the event loop.
    """

    def __init__(self):
        self.config: Dict[str, str] = {}
        self.teams: Dict[int, Team] = {}
        self.roster_entries: List[RosterEntry] = []
        self.tokens: Dict[str, Token] = {}
        self.logos: Dict[str, Logo] = {}
        self._next_team_id = 1
        self._next_logo_id = 1

    async def get_config(self, name: str) -> Optional[str]:
        return self.config.get(name)

    async def set_config(self, name: str, value: str, overwrite: bool = True) -> None:
        if overwrite or name not in self.config:
            self.config[name] = value

    async def get_team(self, team_id: int) -> Optional[Team]:
        return self.teams.get(team_id)

    async def get_team_by_name(self, name: str) -> Optional[Team]:
        for team in self.teams.values():
            if team.name == name:
                return team
        return None

    async def create_team(
        self, name: str, password_hash: str, logo: str, admin: bool = False
    ) -> Optional[int]:
        if any(team.name == name for team in self.teams.values()):
            return None
        team_id = self._next_team_id
        self._next_team_id += 1
        self.teams[team_id] = Team(
            id=team_id, name=name, password_hash=password_hash, logo=logo, admin=admin
        )
        return team_id

    async def add_roster_entry(self, name: str, email: str, team_id: int) -> RosterEntry:
        entry = RosterEntry(
            id=len(self.roster_entries) + 1, name=name, email=email, team_id=team_id
        )
        self.roster_entries.append(entry)
        return entry

    async def roster(self, team_id: int) -> List[RosterEntry]:
        return [e for e in self.roster_entries if e.team_id == team_id]

    async def create_token(self, token: str) -> Optional[Token]:
        if token in self.tokens:
            return None
        record = Token(id=len(self.tokens) + 1, token=token)
        self.tokens[token] = record
        return record

    async def get_token(self, token: str) -> Optional[Token]:
        return self.tokens.get(token)

    async def claim_token(self, token: str) -> bool:
        record = self.tokens.get(token)
        if record is None or record.used:
            return False
        record.used = True
        record.use_ts = datetime.now(timezone.utc)
        return True

    async def bind_token(self, token: str, team_id: int) -> None:
        self.tokens[token].team_id = team_id

    async def release_token(self, token: str) -> None:
        record = self.tokens.get(token)
        if record is not None and record.team_id is None:
            record.used = False
            record.use_ts = None

    async def get_logo(self, name: str) -> Optional[Logo]:
        return self.logos.get(name)

    async def all_logos(self) -> List[Logo]:
        return list(self.logos.values())

    async def create_logo(
        self,
        name: str,
        path: str,
        used: bool = False,
        enabled: bool = True,
        protected: bool = False,
        custom: bool = False,
    ) -> Optional[Logo]:
        if name in self.logos:
            return None
        logo = Logo(
            id=self._next_logo_id,
            name=name,
            logo=path,
            used=used,
            enabled=enabled,
            protected=protected,
            custom=custom,
        )
        self._next_logo_id += 1
        self.logos[name] = logo
        return logo

    async def set_logo_enabled(self, logo_id: int, enabled: bool) -> None:
        for logo in self.logos.values():
            if logo.id == logo_id:
                logo.enabled = enabled


class SQLStore(BaseStore):
    """SQLModel-backed store. Each call opens its own session in a worker thread."""

    def __init__(self, database_url: str):
        # Use check_same_thread only for SQLite
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine = create_engine(database_url, echo=False, connect_args=connect_args)

    async def init(self) -> None:
        await asyncio.to_thread(SQLModel.metadata.create_all, self.engine)
        logger.info(f"Tables ready on {self.engine.url.render_as_string(hide_password=True)}")

    def _first(self, statement):
        with Session(self.engine) as session:
            return session.exec(statement).first()

    def _all(self, statement):
        with Session(self.engine) as session:
            return list(session.exec(statement).all())

    def _insert(self, row):
        """Add one row. Returns it refreshed, or None on a constraint violation."""
        with Session(self.engine) as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return None
            session.refresh(row)
            return row

    def _execute(self, statement) -> int:
        with Session(self.engine) as session:
            result = session.execute(statement)
            session.commit()
            return result.rowcount

    async def get_config(self, name: str) -> Optional[str]:
        entry = await asyncio.to_thread(
            self._first, select(ConfigEntry).where(ConfigEntry.field == name)
        )
        return entry.value if entry else None

    async def set_config(self, name: str, value: str, overwrite: bool = True) -> None:
        inserted = await asyncio.to_thread(self._insert, ConfigEntry(field=name, value=value))
        if inserted is None and overwrite:
            await asyncio.to_thread(
                self._execute,
                update(ConfigEntry).where(ConfigEntry.field == name).values(value=value),
            )

    async def get_team(self, team_id: int) -> Optional[Team]:
        return await asyncio.to_thread(self._first, select(Team).where(Team.id == team_id))

    async def get_team_by_name(self, name: str) -> Optional[Team]:
        return await asyncio.to_thread(self._first, select(Team).where(Team.name == name))

    async def create_team(
        self, name: str, password_hash: str, logo: str, admin: bool = False
    ) -> Optional[int]:
        team = await asyncio.to_thread(
            self._insert,
            Team(name=name, password_hash=password_hash, logo=logo, admin=admin),
        )
        return team.id if team else None

    async def add_roster_entry(self, name: str, email: str, team_id: int) -> RosterEntry:
        entry = await asyncio.to_thread(
            self._insert, RosterEntry(name=name, email=email, team_id=team_id)
        )
        if entry is None:
            raise RuntimeError(f"Could not store roster entry for team {team_id}")
        return entry

    async def roster(self, team_id: int) -> List[RosterEntry]:
        return await asyncio.to_thread(
            self._all, select(RosterEntry).where(RosterEntry.team_id == team_id)
        )

    async def create_token(self, token: str) -> Optional[Token]:
        return await asyncio.to_thread(self._insert, Token(token=token))

    async def get_token(self, token: str) -> Optional[Token]:
        return await asyncio.to_thread(self._first, select(Token).where(Token.token == token))

    async def claim_token(self, token: str) -> bool:
        rowcount = await asyncio.to_thread(
            self._execute,
            update(Token)
            .where(Token.token == token, Token.used == False)  # noqa: E712
            .values(used=True, use_ts=datetime.now(timezone.utc)),
        )
        return rowcount == 1

    async def bind_token(self, token: str, team_id: int) -> None:
        await asyncio.to_thread(
            self._execute, update(Token).where(Token.token == token).values(team_id=team_id)
        )

    async def release_token(self, token: str) -> None:
        await asyncio.to_thread(
            self._execute,
            update(Token)
            .where(Token.token == token, Token.team_id == None)  # noqa: E711
            .values(used=False, use_ts=None),
        )

    async def get_logo(self, name: str) -> Optional[Logo]:
        return await asyncio.to_thread(self._first, select(Logo).where(Logo.name == name))

    async def all_logos(self) -> List[Logo]:
        return await asyncio.to_thread(self._all, select(Logo))

    async def create_logo(
        self,
        name: str,
        path: str,
        used: bool = False,
        enabled: bool = True,
        protected: bool = False,
        custom: bool = False,
    ) -> Optional[Logo]:
        return await asyncio.to_thread(
            self._insert,
            Logo(
                name=name,
                logo=path,
                used=used,
                enabled=enabled,
                protected=protected,
                custom=custom,
            ),
        )

    async def set_logo_enabled(self, logo_id: int, enabled: bool) -> None:
        await asyncio.to_thread(
            self._execute, update(Logo).where(Logo.id == logo_id).values(enabled=enabled)
        )


def create_store(database_url: str) -> BaseStore:
    """Pick the store for a database URL (empty -> memory)"""
    if not database_url:
        return MemoryStore()
    return SQLStore(database_url)
