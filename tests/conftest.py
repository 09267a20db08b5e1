"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: a replaying stand-in for
aiohttp.ClientSession, a fetcher that never really sleeps, Roblox settings
and canned API payloads. Ensures tests never touch the network.
"""

import os
from unittest.mock import AsyncMock

import pytest

# Settings are read when gamepass_bot.config is first imported
os.environ.setdefault("BOT_TOKEN", "test_bot_token_placeholder")

from tests.utils.fakes import DummySession  # noqa: E402


@pytest.fixture
def dummy_session() -> DummySession:
    return DummySession()


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that returns immediately."""
    return AsyncMock(return_value=None)


@pytest.fixture
def fetcher(dummy_session, fake_sleep):
    from gamepass_bot.services.http import RateLimitedFetcher

    return RateLimitedFetcher(session=dummy_session, max_retries=3, sleep=fake_sleep)


@pytest.fixture
def roblox_config():
    """Roblox settings with the details-endpoint cookie configured."""
    from gamepass_bot.config import RobloxConfig

    return RobloxConfig(ROBLOSECURITY="test-cookie")


@pytest.fixture
def roblox_config_no_cookie():
    from gamepass_bot.config import RobloxConfig

    return RobloxConfig(ROBLOSECURITY=None)


@pytest.fixture
def pricing_config():
    from gamepass_bot.config import PricingConfig

    return PricingConfig()


@pytest.fixture
def no_experiment_details():
    """Details payload for a pass without regional pricing."""
    return {
        "priceInformation": {
            "defaultPriceInRobux": 100,
            "isInActivePriceOptimizationExperiment": False,
            "enabledFeatures": [],
        }
    }


@pytest.fixture
def experiment_details():
    """Details payload for a pass enrolled in a price optimization experiment."""
    return {
        "priceInformation": {
            "defaultPriceInRobux": 100,
            "isInActivePriceOptimizationExperiment": False,
            "enabledFeatures": ["RegionalPriceExperiment"],
        }
    }
