"""Shared fixtures for daylog tests."""

import pytest

from daylog.rotating_recorder import RotatingLogFileRecorder
from helpers import TODAY, UTC, at


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs" / "daily"


@pytest.fixture
def make_recorder(log_dir):
    """Factory for UTC recorders whose clock is pinned to a fixed day."""
    created = []

    def factory(days_to_keep=3, synchronous_mode=True, today=TODAY, recorder_class=RotatingLogFileRecorder, **kwargs):
        recorder = recorder_class(
            days_to_keep=days_to_keep,
            directory_path=log_dir,
            synchronous_mode=synchronous_mode,
            tz=UTC,
            clock=lambda: at(today),
            **kwargs
        )
        created.append(recorder)
        return recorder

    yield factory

    for recorder in created:
        recorder.shutdown()
