"""
Shared fixtures. Rate limiting is switched off before `main` is imported so
the settings object picks it up; the limiter itself is tested separately.
"""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from solders.keypair import Keypair

from keys import encode_secret


def seeded_keypair(n: int) -> Keypair:
    return Keypair.from_seed(bytes([n]) * 32)


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_keypair():
    return seeded_keypair


@pytest.fixture
def keypair():
    return seeded_keypair(7)


@pytest.fixture
def secret(keypair):
    return encode_secret(keypair)


@pytest.fixture
def addresses():
    """Three distinct, valid base58 addresses."""
    return {
        "alice": str(seeded_keypair(1).pubkey()),
        "bob": str(seeded_keypair(2).pubkey()),
        "mint": str(seeded_keypair(3).pubkey()),
    }
