"""Shared fixtures for bddy tests."""
from __future__ import annotations

import pytest

from bddy.reporting.recording import RecordingReporter


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


class Recorder:
    """Callable behaviors that log their calls into one shared list."""

    def __init__(self):
        self.calls = []

    def ok(self, name: str):
        def behavior():
            self.calls.append(name)
        return behavior

    def ok_with_data(self, name: str):
        def behavior(data):
            self.calls.append((name, data))
        return behavior

    def fails(self, name: str):
        def behavior():
            self.calls.append(name)
            raise AssertionError(f"{name} failed")
        return behavior

    def raises(self, name: str):
        def behavior():
            self.calls.append(name)
            raise RuntimeError(f"{name} broke")
        return behavior


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
