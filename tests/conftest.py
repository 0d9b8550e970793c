from __future__ import annotations

import pytest

from shellout.config import Settings
from shellout.runner import ShellRunner


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture(params=["selector", "thread"])
def runner(request: pytest.FixtureRequest) -> ShellRunner:
    return ShellRunner(settings=Settings(_env_file=None, drain_mode=request.param))
