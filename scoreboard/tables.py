"""
Persistent entities. Used as SQL tables by SQLStore and as plain records by MemoryStore.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Team(SQLModel, table=True):
    __tablename__ = "teams"
    __table_args__ = (UniqueConstraint("name", name="uq_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=20)  # case-sensitive
    password_hash: str
    logo: str  # Logo.name, not id
    admin: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RosterEntry(SQLModel, table=True):
    __tablename__ = "teams_data"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    team_id: int = Field(foreign_key="teams.id", index=True)


class Token(SQLModel, table=True):
    __tablename__ = "registration_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True)
    used: bool = False
    team_id: Optional[int] = Field(default=None, foreign_key="teams.id")
    use_ts: Optional[datetime] = None


class Logo(SQLModel, table=True):
    __tablename__ = "logos"
    __table_args__ = (UniqueConstraint("name", name="uq_logo_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    logo: str  # storage path
    used: bool = False
    enabled: bool = True
    protected: bool = False
    custom: bool = False


class ConfigEntry(SQLModel, table=True):
    __tablename__ = "configuration"

    id: Optional[int] = Field(default=None, primary_key=True)
    field: str = Field(unique=True, index=True)
    value: str
