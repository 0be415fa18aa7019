"""
Tests for the SQLModel-backed store against a temporary SQLite file
"""
import asyncio

import pytest

from scoreboard.config import seed_store
from scoreboard.store import SQLStore


@pytest.fixture
def sql_store(tmp_path, settings):
    store = SQLStore(f"sqlite:///{tmp_path / 'scoreboard.db'}")
    asyncio.run(store.init())
    asyncio.run(seed_store(store, settings))
    return store


def test_seeded_flags(sql_store):
    assert asyncio.run(sql_store.get_config("registration")) == "1"
    assert asyncio.run(sql_store.get_config("undefined")) is None


def test_seed_keeps_existing_values(sql_store, settings):
    asyncio.run(sql_store.set_config("registration", "0"))
    asyncio.run(seed_store(sql_store, settings))
    assert asyncio.run(sql_store.get_config("registration")) == "0"


def test_team_name_unique(sql_store):
    first = asyncio.run(sql_store.create_team("Hackers", "hash", "bat"))
    second = asyncio.run(sql_store.create_team("Hackers", "hash", "bird"))
    assert first is not None
    assert second is None

    team = asyncio.run(sql_store.get_team(first))
    assert team.name == "Hackers"
    assert team.admin is False
    assert asyncio.run(sql_store.team_exists("Hackers")) is True
    assert asyncio.run(sql_store.team_exists("hackers")) is False


def test_roster(sql_store):
    team_id = asyncio.run(sql_store.create_team("Crew", "hash", "bat"))
    asyncio.run(sql_store.add_roster_entry("Ada", "ada@example.com", team_id))
    roster = asyncio.run(sql_store.roster(team_id))
    assert [(r.name, r.email) for r in roster] == [("Ada", "ada@example.com")]


def test_claim_token_once(sql_store):
    assert asyncio.run(sql_store.claim_token("invite1")) is True
    assert asyncio.run(sql_store.claim_token("invite1")) is False
    assert asyncio.run(sql_store.claim_token("unknown")) is False


def test_bind_and_release(sql_store):
    team_id = asyncio.run(sql_store.create_team("Crew", "hash", "bat"))

    asyncio.run(sql_store.claim_token("invite1"))
    asyncio.run(sql_store.release_token("invite1"))
    assert asyncio.run(sql_store.get_token("invite1")).used is False

    asyncio.run(sql_store.claim_token("invite1"))
    asyncio.run(sql_store.bind_token("invite1", team_id))
    asyncio.run(sql_store.release_token("invite1"))
    record = asyncio.run(sql_store.get_token("invite1"))
    assert record.used is True
    assert record.team_id == team_id


def test_logo_name_unique(sql_store):
    assert asyncio.run(sql_store.create_logo("bat", "/again.svg")) is None
    logos = {l.name: l for l in asyncio.run(sql_store.all_logos())}
    assert set(logos) == {"bat", "bird", "ghost", "admin"}

    asyncio.run(sql_store.set_logo_enabled(logos["bat"].id, False))
    assert asyncio.run(sql_store.get_logo("bat")).enabled is False
