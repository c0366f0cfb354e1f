"""Shared pytest fixtures for the pdfspeech test suite."""

from __future__ import annotations

import io

import pytest

from pdfspeech.telemetry.logger import RunLogger
from tests.fakes import FakeProcessRunner


@pytest.fixture
def log_buffer() -> io.StringIO:
    """Capture everything the run logger emits."""

    return io.StringIO()


@pytest.fixture
def run_logger(log_buffer: io.StringIO) -> RunLogger:
    """Provide a run logger writing into `log_buffer`."""

    return RunLogger(sink=log_buffer)


@pytest.fixture
def fake_runner() -> FakeProcessRunner:
    """Provide a process runner that emulates piper, say, and ffmpeg."""

    return FakeProcessRunner()
