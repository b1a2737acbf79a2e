"""Shared pytest fixtures for the reqlog test suite.

Fixtures
--------
* ``records``      — list the recording handler appends ``LogRecord`` objects to.
* ``record_into``  — attach the recording handler to an existing logger.
* ``make_logger``  — factory building a :class:`~reqlog.RequestLogger` whose sink
  writes into ``records`` (and into a throwaway ``StringIO`` instead of stderr).
"""

import io
import logging
from collections.abc import Callable, Generator
from datetime import timedelta

import pytest

from reqlog.clock import Clock
from reqlog.middleware.access_log import LogOptions, RequestLogger


class StepClock:
    """Deterministic clock returning the given timestamps in order."""

    def __init__(self, *times: float) -> None:
        self._times = list(times)

    def now(self) -> float:
        return self._times.pop(0)

    def since(self, start: float) -> timedelta:
        return timedelta(seconds=self.now() - start)


class RecordingHandler(logging.Handler):
    def __init__(self, records: list[logging.LogRecord]) -> None:
        super().__init__()
        self.records = records

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def records() -> list[logging.LogRecord]:
    return []


@pytest.fixture
def make_logger(records: list[logging.LogRecord]) -> Callable[..., RequestLogger]:
    def _make(
        enable_starting: bool = False,
        clock: Clock | None = None,
        formatter: logging.Formatter | None = None,
        stream: io.StringIO | None = None,
    ) -> RequestLogger:
        options = LogOptions(
            formatter=formatter,
            enable_starting=enable_starting,
            stream=stream if stream is not None else io.StringIO(),
        )
        request_logger = RequestLogger(options, clock=clock)
        request_logger.logger.addHandler(RecordingHandler(records))
        return request_logger

    return _make


@pytest.fixture
def step_clock() -> Callable[..., StepClock]:
    return StepClock


@pytest.fixture
def record_into(records: list[logging.LogRecord]) -> Generator[Callable[[logging.Logger], None]]:
    """Attach the recording handler to an existing logger for one test."""
    attached: list[tuple[logging.Logger, logging.Handler]] = []

    def _attach(logger: logging.Logger) -> None:
        handler = RecordingHandler(records)
        logger.addHandler(handler)
        attached.append((logger, handler))

    yield _attach

    for logger, handler in attached:
        logger.removeHandler(handler)
