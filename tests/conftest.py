"""
Shared fixtures: a seeded memory store and services wired on top of it
"""
import asyncio
import base64

import pytest

from scoreboard import state
from scoreboard.config import seed_store
from scoreboard.main import build_services
from scoreboard.models import LogoEntry, Settings
from scoreboard.services.sessions import SessionContext, SessionStore
from scoreboard.store import MemoryStore


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 24
BMP_BYTES = b"BM" + b"\x00" * 40


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def make_settings(tmp_path, **flags) -> Settings:
    base_flags = {
        "registration": "1",
        "registration_type": "1",
        "login": "1",
        "login_select": "0",
    }
    base_flags.update(flags)
    return Settings(
        database_url="",
        logo_dir=str(tmp_path / "customlogos"),
        bcrypt_rounds=4,
        flags=base_flags,
        logos=[
            LogoEntry(name="bat", logo="/static/svg/bat.svg"),
            LogoEntry(name="bird", logo="/static/svg/bird.svg"),
            LogoEntry(name="ghost", logo="/static/svg/ghost.svg", enabled=False),
            LogoEntry(name="admin", logo="/static/svg/admin.svg", protected=True),
        ],
        tokens=["invite1", "invite2"],
    )


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def store(settings):
    store = MemoryStore()
    asyncio.run(seed_store(store, settings))
    return store


@pytest.fixture
def services(store, settings):
    """Services published in scoreboard.state"""
    build_services(store, settings)
    return state


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def context(sessions):
    return SessionContext(sessions, None, "10.0.0.1")
