"""
Global pytest configuration for app_radio tests.
Gives every test its own channel tree and a way to let deferred deliveries run.
"""
import asyncio
import logging

import pytest

from app_radio import message_bus
from app_radio.config import RadioConfig
from app_radio.radio import AppRadio

# Configure logging for tests
logging.getLogger().setLevel(logging.DEBUG)


@pytest.fixture
def config(monkeypatch):
    """Default settings, unaffected by APP_RADIO_* variables of the host environment."""
    for name in ("APP_RADIO_DELIVERY_DELAY_SECONDS", "APP_RADIO_LOG_DELIVERIES", "APP_RADIO_COLLAPSE_EMPTY_SEGMENTS"):
        monkeypatch.delenv(name, raising=False)
    return RadioConfig(_env_file=None)


@pytest.fixture
def radio(config):
    return AppRadio(config=config)


@pytest.fixture
def flush():
    """Yields to the event loop enough times for scheduled deliveries (and their tasks) to run."""
    async def _flush(turns: int = 5):
        for _ in range(turns):
            await asyncio.sleep(0)
    return _flush


@pytest.fixture(autouse=True)
def shared_radio():
    """Every test starts and ends without a process-wide radio."""
    message_bus.reset_radio()
    yield
    message_bus.reset_radio()
