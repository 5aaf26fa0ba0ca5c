import threading

import pytest

from beacon_locator.config import Settings
from beacon_locator.errors import ReportTransportFailure
from beacon_locator.positioning import ReferencePosition


class RecordingSink:
    def __init__(self, error=None):
        self.pushes = []
        self.error = error
        self._lock = threading.Lock()

    def push(self, x, y):
        with self._lock:
            self.pushes.append((x, y))
        if self.error is not None:
            raise self.error


class FakeScheduler:
    def __init__(self):
        self.calls = []
        self.shut_down = False

    def schedule(self, position, interval, sink):
        self.calls.append((position, interval, sink))

    def cancel(self):
        pass

    def shutdown(self, wait=False):
        self.shut_down = True


@pytest.fixture
def settings():
    return Settings(
        reference_positions=(ReferencePosition(0, 0), ReferencePosition(5, 0), ReferencePosition(0, 5)),
        reference_rssi=-59,
        path_loss_exponent=2.0,
        name_filter="ESP32",
        report_interval=0.05,
    )


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def failing_sink():
    return RecordingSink(error=ReportTransportFailure("Failed to send position. Status code: 503", status_code=503))
