"""Pytest fixtures and configuration."""

from unittest.mock import MagicMock

import pytest

from src.chainkit.config import get_settings
from src.chainkit.memory.base import BaseMemory


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; start and end every test with a fresh read."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_memory() -> MagicMock:
    """Memory supplying 'history' with a fixed recalled value."""
    memory = MagicMock(spec=BaseMemory)
    memory.memory_variables = ["history"]
    memory.load_memory_variables.return_value = {"history": "recalled"}
    return memory
