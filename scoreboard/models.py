"""
Data models for the registration server
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class LogoEntry(BaseModel):
    """Stock logo as declared in the settings file"""
    name: str
    logo: str  # path served to the browser
    used: bool = False
    enabled: bool = True
    protected: bool = False
    custom: bool = False


class Settings(BaseModel):
    """Server settings loaded from YAML"""
    database_url: str = ""  # empty -> in-memory store
    logo_dir: str = "data/customlogos"
    logo_url_prefix: str = "/data/customlogos/"
    bcrypt_rounds: int = 12
    session_ttl: int = 3600  # idle seconds before a session is dropped
    flags: Dict[str, str] = {}
    logos: List[LogoEntry] = []
    tokens: List[str] = []


class ErrorKind(str, Enum):
    """Internal failure reasons. Never shown to the caller as-is."""
    REGISTRATION_DISABLED = "registration_disabled"
    TEAM_CONFLICT = "team_conflict"
    LOGO_INVALID = "logo_invalid"
    TOKEN_ALREADY_USED = "token_already_used"
    LOGIN_FAILED = "login_failed"
    INVALID_ACTION = "invalid_action"


# Internal kind -> (category, message) seen by the caller.
# Deliberately coarse: a caller cannot tell a taken name from a bad token.
PUBLIC_ERRORS: Dict[ErrorKind, Tuple[str, str]] = {
    ErrorKind.REGISTRATION_DISABLED: ("registration", "Registration failed"),
    ErrorKind.TEAM_CONFLICT: ("registration", "Registration failed"),
    ErrorKind.LOGO_INVALID: ("registration", "Registration failed"),
    ErrorKind.TOKEN_ALREADY_USED: ("registration", "Registration failed"),
    ErrorKind.LOGIN_FAILED: ("login", "Login failed"),
    ErrorKind.INVALID_ACTION: ("index", "Invalid action"),
}


@dataclass
class Result(Generic[T]):
    """Outcome of one service step: either a value or an ErrorKind"""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind) -> "Result[T]":
        return cls(error=error)


class ActionRequest(BaseModel):
    """
    Body of POST /index/ajax

    Field names follow the browser form, so camelCase aliases are accepted.
    """
    model_config = ConfigDict(populate_by_name=True)

    action: str = Field(pattern=r"^[\w-]+$")
    team_id: Optional[int] = None
    teamname: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = Field(None, pattern=r"^\w+$")
    logo: Optional[str] = Field(None, pattern=r"^[\w+,./ \-]+={0,2}$")
    is_custom_logo: bool = Field(False, alias="isCustomLogo")
    logo_type: Optional[str] = Field(None, alias="logoType")
    names: List[str] = []
    emails: List[str] = []


class ActionResponse(BaseModel):
    """Body returned by every index action"""
    status: str  # "ok" | "error"
    message: str
    redirect: str

    @classmethod
    def ok_response(cls, message: str, redirect: str) -> "ActionResponse":
        return cls(status="ok", message=message, redirect=redirect)

    @classmethod
    def error_response(cls, message: str, redirect: str) -> "ActionResponse":
        return cls(status="error", message=message, redirect=redirect)

    @classmethod
    def from_error(cls, error: ErrorKind) -> "ActionResponse":
        category, message = PUBLIC_ERRORS[error]
        return cls.error_response(message, category)
