"""
Shared fixtures for the Launchpad test suite.
"""

import pytest

from shared.config import get_config


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_config():
    """Build a service config that ignores any local .env file."""

    def _make(**overrides):
        settings = {
            "_env_file": None,
            "rpc_endpoint": "https://rpc.test",
            "raydium_pools_url": "https://raydium.test/pools",
            "dexscreener_url": "https://dex.test/latest/dex",
            "openai_base_url": "https://ai.test/v1",
            "admin_token": "test-admin-token",
        }
        settings.update(overrides)
        return get_config("launchpad", 8000, **settings)

    return _make
