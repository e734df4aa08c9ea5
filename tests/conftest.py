"""Shared fixtures."""

import pytest
from sse_starlette.sse import AppStatus


class RecordingObserver:
    """Observer that keeps everything it is sent."""

    def __init__(self):
        self.received = []
        self.closed = False

    def send(self, event, sequence):
        self.received.append((sequence, event))

    def close(self):
        self.closed = True

    @property
    def sequences(self):
        return [sequence for sequence, _ in self.received]

    @property
    def types(self):
        return [event.type for _, event in self.received]


class FailingObserver(RecordingObserver):
    """Observer whose connection is gone."""

    def send(self, event, sequence):
        raise ConnectionError("client went away")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    # sse-starlette keeps its exit event at module level, bound to the first loop.
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def failing_observer():
    return FailingObserver()
