"""Shared fixtures for the X01 scorekeeper tests."""

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from x01_game.state.manager import STATE_MANAGER


@pytest.fixture(autouse=True)
def _reset_state_manager():
    """Ensure the shared session manager is clean between tests."""

    STATE_MANAGER.reset()
    yield
    STATE_MANAGER.reset()


@pytest.fixture
def anyio_backend() -> str:
    """Run AnyIO tests on asyncio only (python-telegram-bot is asyncio based)."""

    return "asyncio"
