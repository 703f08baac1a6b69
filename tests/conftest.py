"""
Shared Test Fixtures
====================
Fake time sources and a baseline Mixpost configuration.
"""

from typing import List

import pytest

from mixpost_mcp.config import MixpostConfig


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that only records delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config() -> MixpostConfig:
    return MixpostConfig(
        base_url="https://mixpost.test/",
        workspace_uuid="ws-1",
        api_key="secret-key",
        max_retries=2,
        retry_base_delay=0.01,
        retry_max_delay=0.05,
        cb_failure_threshold=5,
        cb_reset_timeout=30.0,
    )
