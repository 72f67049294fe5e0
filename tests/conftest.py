from __future__ import annotations

import pytest

from selfheal.config.schema import HealingConfig
from selfheal.core.session import create_session
from tests.helpers import FakeClock, FakeDriver


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def healing_config():
    return HealingConfig(action_timeout_seconds=0)


@pytest.fixture()
def make_session(healing_config, clock):
    def factory(driver: FakeDriver, config: HealingConfig | None = None):
        return create_session(driver, config or healing_config, clock=clock)

    return factory
