"""
Tests for device disconnection handling.
"""

import pytest
import time
from fonapy import FonaModem, MockTransport, DeviceDisconnectedError
from fonapy.exceptions import ModemNotStartedError


def test_disconnection_callback():
    """Test that disconnection callback is called when device disconnects."""
    callback_error = []

    # Create modem with disconnect callback
    transport = MockTransport()
    modem = FonaModem(transport=transport, on_disconnect=callback_error.append, initialize=False)
    modem.start()

    # Verify initial state
    assert modem.is_running is True
    assert modem.is_disconnected is False
    assert callback_error == []

    # Simulate disconnection
    transport.close()

    # Wait for reader thread to detect disconnection
    time.sleep(0.5)

    # Verify callback was called once with the right error
    assert len(callback_error) == 1
    assert isinstance(callback_error[0], DeviceDisconnectedError)

    # Verify modem state
    assert modem.is_disconnected is True
    assert modem.is_running is False

    modem.close()


def test_commands_refused_after_disconnection():
    """Test that a disconnected modem refuses new commands."""
    transport = MockTransport()
    modem = FonaModem(transport=transport, initialize=False)
    modem.start()

    transport.close()
    time.sleep(0.5)

    with pytest.raises(ModemNotStartedError):
        modem.command("AT")

    modem.close()


def test_no_infinite_loop_on_disconnection():
    """Test that disconnection doesn't cause infinite error loop."""
    error_count = [0]

    def on_disconnect(error):
        error_count[0] += 1

    transport = MockTransport()
    modem = FonaModem(transport=transport, on_disconnect=on_disconnect, initialize=False)
    modem.start()

    # Simulate disconnection
    transport.close()

    # Wait a bit longer than normal
    time.sleep(1.0)

    # Callback should only be called once, not looping
    assert error_count[0] == 1
    assert modem.is_running is False

    modem.close()


def test_urcs_before_disconnection_still_dispatched():
    """Test lines read before the link dropped reach the handler on close."""
    transport = MockTransport()
    modem = FonaModem(transport=transport, initialize=False)
    modem.start()

    transport.inject(["RDY"])
    time.sleep(0.3)
    transport.close()
    time.sleep(0.3)

    assert modem.readiness.serial_ready is True

    modem.stop()
    assert not modem._core.dispatcher.is_running()

    modem.close()


@pytest.mark.timeout(10)
def test_consecutive_error_limit():
    """Test that too many consecutive errors stops the reader thread."""
    # Create a custom transport that always raises regular errors
    class ErrorTransport(MockTransport):
        def __init__(self):
            super().__init__()
            self.read_count = 0

        def read_available(self, timeout=None):
            self.read_count += 1
            # Raise regular error (not disconnection)
            raise OSError("Test error")

    transport = ErrorTransport()
    modem = FonaModem(transport=transport, initialize=False)
    modem.start()

    # Wait for error limit to be reached (max 5 errors with backoff)
    # With exponential backoff: 0.1s, 0.2s, 0.4s, 0.8s = ~1.5s total
    time.sleep(3.0)

    # Should have stopped after max errors
    assert modem.is_running is False
    assert modem.is_disconnected is False
    assert transport.read_count == 5

    modem.close()


def test_successful_reads_keep_running():
    """Test that normal traffic does not count as errors."""
    transport = MockTransport()
    modem = FonaModem(transport=transport, initialize=False)
    modem.start()

    transport.add_response(["+CSQ: 24,0", "OK"])
    transport.add_response(["+CGATT: 1", "OK"])
    modem.command("AT+CSQ")
    modem.command("AT+CGATT?")

    time.sleep(0.3)

    assert modem.is_running is True

    modem.close()


def test_restart_after_stop():
    """Test a stopped modem can be started again."""
    transport = MockTransport()
    modem = FonaModem(transport=transport, initialize=False)
    modem.start()
    modem.stop()

    assert modem.is_running is False

    modem.start()
    transport.add_response(["OK"])
    assert modem.command("AT") == "OK"

    modem.close()
