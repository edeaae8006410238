"""
Tests for the line framer.
"""

import queue

import pytest
from fonapy.core import LineFramer, UnsolicitedClassifier


def _drain(q):
    lines = []
    while True:
        try:
            lines.append(q.get_nowait())
        except queue.Empty:
            return lines


@pytest.fixture
def pending():
    """Mutable flag standing in for ATProtocol.is_pending."""
    return [False]


@pytest.fixture
def framer(pending):
    return LineFramer(
        UnsolicitedClassifier(),
        queue.Queue(),
        queue.Queue(),
        is_pending=lambda: pending[0]
    )


def test_lines_split_on_newline(framer):
    """Test a multi-line chunk is routed line by line."""
    framer.data_received(b"\r\n+CSQ: 24,0\r\n\r\nOK\r\n")

    assert _drain(framer.solicited_queue) == ["+CSQ: 24,0", "OK"]
    assert _drain(framer.unsolicited_queue) == []


def test_partial_line_waits_for_rest(framer):
    """Test a line split across reads is delivered once, when complete."""
    framer.data_received(b"\r\nO")
    assert _drain(framer.solicited_queue) == []

    framer.data_received(b"K\r\n")
    assert _drain(framer.solicited_queue) == ["OK"]


def test_line_split_at_every_byte(framer):
    """Test byte-at-a-time delivery."""
    for byte in b'\r\n+CMTI: "SM",3\r\n':
        framer.data_received(bytes([byte]))

    assert _drain(framer.unsolicited_queue) == ['+CMTI: "SM",3']


def test_blank_lines_dropped(framer):
    """Test that empty lines between framed replies are skipped."""
    framer.data_received(b"\r\n\r\n\r\nOK\r\n\r\n")

    assert _drain(framer.solicited_queue) == ["OK"]


def test_blank_lines_preserved_when_enabled(framer):
    """Test the option to keep blank lines."""
    framer.preserve_blank_lines = True
    framer.data_received(b"OK\r\n\r\n")

    assert _drain(framer.solicited_queue) == ["OK", ""]


def test_whitespace_trimmed(framer):
    """Test surrounding whitespace and carriage returns are removed."""
    framer.data_received(b"  +CSQ: 24,0 \r\r\n")

    assert _drain(framer.solicited_queue) == ["+CSQ: 24,0"]


def test_unsolicited_routed_separately(framer):
    """Test interleaved solicited and unsolicited lines keep their order per queue."""
    framer.data_received(b"\r\nRING\r\n\r\n+CSQ: 24,0\r\n\r\n+CGREG: 1\r\n\r\nOK\r\n")

    assert _drain(framer.solicited_queue) == ["+CSQ: 24,0", "OK"]
    assert _drain(framer.unsolicited_queue) == ["RING", "+CGREG: 1"]


def test_error_report_solicited_while_pending(framer, pending):
    """Test a +CME ERROR terminates the pending command."""
    pending[0] = True
    framer.data_received(b"\r\n+CME ERROR: 10\r\n")

    assert _drain(framer.solicited_queue) == ["+CME ERROR: 10"]
    assert _drain(framer.unsolicited_queue) == []


def test_error_report_unsolicited_when_idle(framer):
    """Test a +CMS ERROR with no command in flight goes to the dispatcher."""
    framer.data_received(b"\r\n+CMS ERROR: 500\r\n")

    assert _drain(framer.solicited_queue) == []
    assert _drain(framer.unsolicited_queue) == ["+CMS ERROR: 500"]


def test_other_urcs_unsolicited_while_pending(framer, pending):
    """Test that only error reports are redirected during a command."""
    pending[0] = True
    framer.data_received(b"\r\nRING\r\n")

    assert _drain(framer.unsolicited_queue) == ["RING"]


def test_invalid_bytes_ignored(framer):
    """Test undecodable bytes are dropped rather than raising."""
    framer.data_received(b"\xffOK\xfe\r\n")

    assert _drain(framer.solicited_queue) == ["OK"]


def test_reset_discards_partial_line(framer):
    """Test reset drops buffered bytes."""
    framer.data_received(b"+CSQ: 2")
    framer.reset()
    framer.data_received(b"OK\r\n")

    assert _drain(framer.solicited_queue) == ["OK"]


def test_default_is_pending_is_false():
    """Test a framer without a pending check treats error reports as unsolicited."""
    framer = LineFramer(UnsolicitedClassifier(), queue.Queue(), queue.Queue())
    framer.data_received(b"+CME ERROR: 3\r\n")

    assert _drain(framer.unsolicited_queue) == ["+CME ERROR: 3"]
