"""
Transport layer abstraction for modem communication.

Provides abstractions for serial communication with dependency injection support.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Optional
import serial
from serial import SerialException

from ..exceptions import TransportError, DeviceDisconnectedError

logger = logging.getLogger(__name__)

# pyserial messages that mean the device itself went away
DISCONNECT_PHRASES = (
    "device disconnected",
    "device reports readiness to read but returned no data",
    "no such device",
    "device not configured",
    "input/output error",
)


class Transport(ABC):
    """Abstract base class for modem transport."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """
        Write data to the transport.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes written

        Raises:
            TransportError: If write fails
        """
        pass

    @abstractmethod
    def read_available(self, timeout: Optional[float] = None) -> bytes:
        """
        Wait for data, then return everything currently available.

        Args:
            timeout: Longest time to wait for the first byte, in seconds

        Returns:
            Bytes read (empty if nothing arrived in time)

        Raises:
            TransportError: If read fails
        """
        pass

    @abstractmethod
    def reset_input_buffer(self) -> None:
        """Clear the input buffer."""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if transport is open."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the transport."""
        pass


class SerialTransport(Transport):
    """Serial port transport implementation."""

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: float = 0.1
    ) -> None:
        """
        Initialize serial transport.

        Args:
            port: Serial port path (e.g., /dev/ttyUSB0)
            baudrate: Baud rate. SIM800 auto-bauds, 115200 is typical.
            timeout: Default wait for incoming data in seconds

        Raises:
            TransportError: If serial port cannot be opened
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                timeout=timeout
            )
            logger.info(f"Opened serial port {port} at {baudrate} baud")
        except SerialException as e:
            logger.error(f"Failed to open serial port {port}: {e}")
            raise TransportError(f"Can't open {port}: {e}") from e

    def write(self, data: bytes) -> int:
        """Write data to serial port."""
        try:
            written = self._serial.write(data)
            logger.debug(f"Wrote {written} bytes: {data}")
            return written
        except SerialException as e:
            logger.error(f"Serial write failed: {e}")
            raise self._translate(e, "Serial write failed") from e

    def read_available(self, timeout: Optional[float] = None) -> bytes:
        """Read whatever the serial port has, waiting up to timeout for it."""
        try:
            if timeout is not None and timeout != self._serial.timeout:
                self._serial.timeout = timeout

            # Block for one byte, then drain the rest of the OS buffer
            data = self._serial.read(self._serial.in_waiting or 1)
            if data and self._serial.in_waiting:
                data += self._serial.read(self._serial.in_waiting)

            if data:
                logger.debug(f"Read {len(data)} bytes: {data}")

            return data
        except SerialException as e:
            raise self._translate(e, "Serial read failed") from e

    def _translate(self, error: SerialException, context: str) -> TransportError:
        """Map a pyserial failure to the library's error types."""
        error_str = str(error).lower()

        if any(phrase in error_str for phrase in DISCONNECT_PHRASES):
            logger.error(f"Device disconnected: {error}")
            return DeviceDisconnectedError(
                f"Serial device disconnected: {error}",
                response=str(error)
            )

        logger.error(f"{context}: {error}")
        return TransportError(f"{context}: {error}")

    def reset_input_buffer(self) -> None:
        """Clear the serial input buffer."""
        try:
            self._serial.reset_input_buffer()
            logger.debug("Reset input buffer")
        except SerialException as e:
            logger.error(f"Failed to reset input buffer: {e}")
            raise TransportError(f"Failed to reset input buffer: {e}") from e

    def is_open(self) -> bool:
        """Check if serial port is open."""
        return bool(self._serial and self._serial.is_open)

    def close(self) -> None:
        """Close the serial port."""
        if self._serial and self._serial.is_open:
            self._serial.close()
            logger.info(f"Closed serial port {self.port}")


class MockTransport(Transport):
    """
    Mock transport for testing.

    Simulates a modem: each write releases the next queued response, and
    unsolicited output can be injected at any time.
    """

    def __init__(self) -> None:
        """Initialize mock transport."""
        self._open = True
        self._rx = bytearray()
        self._response_queue: Deque[list[str]] = deque()
        self._cond = threading.Condition()
        self.written: list[bytes] = []
        logger.info("Initialized MockTransport")

    @staticmethod
    def _frame(lines: list[str]) -> bytes:
        """Frame lines the way the modem does (<CR><LF>line<CR><LF>)."""
        return b"".join(f"\r\n{line}\r\n".encode("utf-8") for line in lines)

    def add_response(self, lines: list[str]) -> None:
        """
        Queue the reply to the next write.

        Args:
            lines: List of response lines (e.g., ["+CSQ: 24,99", "OK"]).
                An empty list simulates a modem that stays silent.
        """
        with self._cond:
            self._response_queue.append(list(lines))
            logger.debug(f"Added mock response: {lines}")

    def inject(self, lines: list[str]) -> None:
        """
        Deliver lines immediately, as if the modem sent them unprompted.

        Args:
            lines: Lines to deliver (e.g., ["RDY", "+CGREG: 1"])
        """
        self.feed(self._frame(lines))

    def feed(self, data: bytes) -> None:
        """Deliver raw bytes immediately."""
        with self._cond:
            self._rx.extend(data)
            self._cond.notify_all()

    def write(self, data: bytes) -> int:
        """Record the write and release the next queued response."""
        if not self._open:
            raise DeviceDisconnectedError(
                "MockTransport is closed (simulating device disconnection)",
                response="MockTransport closed"
            )

        logger.debug(f"Mock write: {data}")
        with self._cond:
            self.written.append(data)
            if self._response_queue:
                self._rx.extend(self._frame(self._response_queue.popleft()))
                self._cond.notify_all()
        return len(data)

    def read_available(self, timeout: Optional[float] = None) -> bytes:
        """Return buffered bytes, waiting up to timeout for some to arrive."""
        with self._cond:
            if not self._rx and self._open:
                self._cond.wait(timeout)

            if not self._open:
                raise DeviceDisconnectedError(
                    "MockTransport is closed (simulating device disconnection)",
                    response="MockTransport closed"
                )

            data = bytes(self._rx)
            self._rx.clear()

        if data:
            logger.debug(f"Mock read: {data}")
        return data

    def reset_input_buffer(self) -> None:
        """Clear mock input buffer."""
        with self._cond:
            self._rx.clear()
            logger.debug("Reset mock input buffer")

    def is_open(self) -> bool:
        """Check if mock transport is open."""
        return self._open

    def close(self) -> None:
        """Close mock transport."""
        with self._cond:
            self._open = False
            self._cond.notify_all()
        logger.info("Closed MockTransport")

    def clear_responses(self) -> None:
        """Clear all queued responses (useful for testing)."""
        with self._cond:
            self._response_queue.clear()
            logger.debug("Cleared mock response queue")

    @property
    def commands(self) -> list[str]:
        """Written data decoded, without the trailing carriage return."""
        return [data.decode("utf-8").rstrip("\r") for data in self.written]
