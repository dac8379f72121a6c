"""Pytest configuration and shared fixtures."""
import copy
from typing import List, Tuple

import pytest

import datatracker.config as config_module


class Recorder:
    """Listener that records a copy of every (old, new) pair it receives.

    new_value is the tracker's live object, so it is copied at call time.
    """

    def __init__(self):
        self.calls: List[Tuple] = []

    def __call__(self, old_value, new_value):
        self.calls.append((copy.deepcopy(old_value), copy.deepcopy(new_value)))

    @property
    def count(self) -> int:
        return len(self.calls)


@pytest.fixture(autouse=True)
def reset_default_config():
    """Restore the process-wide default tracker config after each test."""
    original = config_module._default_config
    yield
    config_module._default_config = original


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_recorder():
    """Factory for tests that need several independent listeners."""
    return Recorder
