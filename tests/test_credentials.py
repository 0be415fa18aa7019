"""
Tests for password hashing, credential checks and CSRF tokens
"""
import asyncio

import pytest

from scoreboard.services.credentials import CredentialService
from scoreboard.utils import BASE62_ALPHABET, to_base62


@pytest.fixture
def credentials(store):
    return CredentialService(store, rounds=4)


def _add_team(store, credentials, name="Hackers", password="s3cret", admin=False):
    return asyncio.run(
        store.create_team(name, credentials.hash_sync(password), "bat", admin=admin)
    )


def test_hash_is_salted(credentials):
    """Same password hashes differently every time"""
    first = asyncio.run(credentials.hash("hunter2"))
    second = asyncio.run(credentials.hash("hunter2"))
    assert first != second
    assert "hunter2" not in first


def test_verify_accepts_both_hashes(store, credentials):
    """verify succeeds for two teams sharing a password with different hashes"""
    a = _add_team(store, credentials, name="Alpha", password="same")
    b = _add_team(store, credentials, name="Bravo", password="same")
    assert asyncio.run(store.get_team(a)).password_hash != asyncio.run(store.get_team(b)).password_hash

    assert asyncio.run(credentials.verify(a, "same")).name == "Alpha"
    assert asyncio.run(credentials.verify(b, "same")).name == "Bravo"


def test_verify_wrong_password(store, credentials):
    team_id = _add_team(store, credentials)
    assert asyncio.run(credentials.verify(team_id, "wrong")) is None


def test_verify_unknown_team(credentials):
    assert asyncio.run(credentials.verify(999, "s3cret")) is None


def test_verify_long_password(store, credentials):
    """Passwords past bcrypt's 72 byte window still hash and verify"""
    password = "x" * 100
    team_id = _add_team(store, credentials, password=password)
    assert asyncio.run(credentials.verify(team_id, password)) is not None


def test_session_token_alphabet():
    token = CredentialService.new_session_token()
    assert token
    assert len(token) <= 22  # 128 bits in base62
    assert all(c in BASE62_ALPHABET for c in token)


def test_session_tokens_differ():
    tokens = {CredentialService.new_session_token() for _ in range(50)}
    assert len(tokens) == 50


def test_base62():
    assert to_base62(b"\x00") == "0"
    assert to_base62(b"\x3d") == "z"
    assert to_base62(b"\x3e") == "10"
    assert to_base62(b"\xff") == "47"
