"""
Tests for single-use registration tokens
"""
import asyncio

import pytest

from scoreboard.models import ErrorKind
from scoreboard.services.tokens import TokenService


@pytest.fixture
def tokens(store):
    return TokenService(store)


def test_check_fresh_token(tokens):
    assert asyncio.run(tokens.check("invite1")) is True


def test_check_unknown_token(tokens):
    assert asyncio.run(tokens.check("nope")) is False


def test_consume_binds_team(store, tokens):
    result = asyncio.run(tokens.consume("invite1", 7))
    assert result.ok

    record = asyncio.run(store.get_token("invite1"))
    assert record.used is True
    assert record.team_id == 7
    assert asyncio.run(tokens.check("invite1")) is False


def test_consume_twice_fails(tokens):
    assert asyncio.run(tokens.consume("invite1", 1)).ok

    second = asyncio.run(tokens.consume("invite1", 2))
    assert second.error == ErrorKind.TOKEN_ALREADY_USED


def test_concurrent_claims_single_winner(tokens):
    """Two redeemers of the same token: exactly one wins"""
    async def race():
        return await asyncio.gather(tokens.claim("invite2"), tokens.claim("invite2"))

    results = asyncio.run(race())
    assert sorted(r.ok for r in results) == [False, True]


def test_release_unbound_claim(tokens):
    assert asyncio.run(tokens.claim("invite1")).ok
    asyncio.run(tokens.release("invite1"))
    assert asyncio.run(tokens.check("invite1")) is True


def test_release_keeps_bound_token(tokens):
    asyncio.run(tokens.consume("invite1", 3))
    asyncio.run(tokens.release("invite1"))
    assert asyncio.run(tokens.check("invite1")) is False
