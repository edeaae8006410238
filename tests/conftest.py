"""
Pytest configuration and fixtures.

Provides shared test fixtures for fonapy tests.
"""

import logging
import threading
import time

import pytest

from fonapy.core import MockTransport, ModemCore
from fonapy.events import EventHandler
from fonapy import FonaModem


# Enable logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(message)s'
)


class RecordingHandler(EventHandler):
    """
    Event handler that records every callback.

    Each entry is (kind, payload, serial_ready, network_status) where the last
    two are read from the readiness state at callback time, if one is given.
    """

    def __init__(self, readiness=None):
        self.readiness = readiness
        self.events = []
        self._lock = threading.Lock()

    def _record(self, kind, payload=None):
        snapshot = (None, None)
        if self.readiness is not None:
            snapshot = (self.readiness.serial_ready, self.readiness.network_status)
        with self._lock:
            self.events.append((kind, payload) + snapshot)

    def on_sms_message_received(self, event):
        self._record("sms", event)

    def on_error(self, message):
        self._record("error", message)

    def on_serial_ready(self):
        self._record("ready")

    def on_network_status_change(self, status):
        self._record("network", status)

    @property
    def kinds(self):
        with self._lock:
            return [entry[0] for entry in self.events]


def _wait_until(predicate, timeout=2.0, interval=0.01):
    end = time.monotonic() + timeout
    while time.monotonic() < end:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    """
    Poll a predicate until it is true or a timeout passes.

    Example:
        def test_something(wait_until, modem_core):
            handler = modem_core.dispatcher.handler
            assert wait_until(lambda: len(handler.events) == 1)
    """
    return _wait_until


@pytest.fixture
def mock_transport():
    """
    Create a MockTransport instance for testing.

    Example:
        def test_something(mock_transport):
            mock_transport.add_response(["OK"])
            # ... test code ...
    """
    transport = MockTransport()
    yield transport
    transport.close()


@pytest.fixture
def recording_handler():
    """
    The RecordingHandler class, for tests that build their own dispatcher.

    Example:
        def test_something(recording_handler):
            handler = recording_handler(readiness)
    """
    return RecordingHandler


@pytest.fixture
def modem_core(mock_transport):
    """
    Create a started ModemCore instance with MockTransport.

    Example:
        def test_at_command(modem_core, mock_transport):
            mock_transport.add_response(["+CSQ: 24,0", "OK"])
            response = modem_core.command("AT+CSQ")
            assert response == "+CSQ: 24,0\\nOK"
    """
    core = ModemCore(transport=mock_transport, timeout=1.0)
    core.set_event_handler(RecordingHandler(core.readiness))
    core.start()
    yield core
    core.close()


@pytest.fixture
def modem(mock_transport):
    """
    Create a started FonaModem instance with MockTransport.

    Initialization commands are skipped so tests only queue the responses
    they care about.
    """
    modem_instance = FonaModem(transport=mock_transport, timeout=1.0, initialize=False)
    modem_instance.start()
    yield modem_instance
    modem_instance.close()


@pytest.fixture
def mock_signal_response():
    """Mock response for AT+CSQ command."""
    return ["+CSQ: 24,0", "OK"]


@pytest.fixture
def mock_cmgl_response():
    """Mock response for AT+CMGL="ALL" with two messages."""
    return [
        '+CMGL: 1,"REC READ","+16045551234","","14/12/01,13:45:02-32"',
        "Meet at noon",
        '+CMGL: 2,"REC UNREAD","+16045554321","","14/12/02,09:12:40-32"',
        "Running late",
        "OK",
    ]
