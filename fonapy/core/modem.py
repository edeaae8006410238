"""
Core modem class coordinating transport, framing, commands and URC handling.

This is the foundation that feature managers build upon.
"""

import logging
import queue
import threading
import time
from typing import Callable, Optional

from .classifier import UnsolicitedClassifier
from .framer import LineFramer
from .protocol import ATProtocol, DEFAULT_TIMEOUT
from .readiness import ReadinessState
from .transport import Transport
from .urc import URCDispatcher
from ..events import EventHandler
from ..exceptions import DeviceDisconnectedError, ModemNotStartedError
from ..types import ReadyTarget

logger = logging.getLogger(__name__)


class ModemCore:
    """
    Core modem functionality.

    Coordinates:
    - Transport layer (serial communication)
    - Line framer (bytes to classified lines)
    - Protocol layer (AT command execution)
    - URC dispatcher (unsolicited events and readiness)
    - Reader thread (continuous modem monitoring)

    Owns the transport, both line queues and the readiness state. The
    dispatcher only ever sees the unsolicited queue, so writes to the modem
    have a single owner.
    """

    READ_POLL_INTERVAL = 0.1

    def __init__(
        self,
        transport: Transport,
        timeout: float = DEFAULT_TIMEOUT,
        classifier: Optional[UnsolicitedClassifier] = None,
        event_handler: Optional[EventHandler] = None,
        log_urcs: bool = False,
        on_disconnect: Optional[Callable[[Exception], None]] = None
    ) -> None:
        """
        Initialize modem core.

        Args:
            transport: Transport instance for communication
            timeout: Default timeout for AT commands in seconds
            classifier: Unsolicited pattern table (default table if None)
            event_handler: Application handler for unsolicited events
            log_urcs: Whether to log URCs at INFO level
            on_disconnect: Optional callback for disconnection events
        """
        self.transport = transport
        self.readiness = ReadinessState()

        self._solicited: queue.Queue = queue.Queue()
        self._unsolicited: queue.Queue = queue.Queue()

        self.protocol = ATProtocol(transport, self._solicited, default_timeout=timeout)
        self.framer = LineFramer(
            classifier or UnsolicitedClassifier(),
            self._solicited,
            self._unsolicited,
            is_pending=self.protocol.is_pending
        )
        self.dispatcher = URCDispatcher(
            self._unsolicited,
            self.readiness,
            handler=event_handler,
            log_urcs=log_urcs
        )

        # Reader thread management
        self._reader_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = False
        self._on_disconnect = on_disconnect

        # Error handling
        self._consecutive_errors = 0
        self._max_consecutive_errors = 5
        self._disconnected = False

        logger.info("Initialized ModemCore")

    def start(self) -> None:
        """
        Start the reader and dispatcher threads.

        The reader thread continuously reads from the transport and feeds the
        framer, which routes lines to the protocol (solicited responses) or
        the dispatcher (unsolicited result codes).
        """
        if self._running:
            logger.warning("ModemCore already started")
            return

        # Reset disconnected state on start
        self._disconnected = False
        self._consecutive_errors = 0

        self.dispatcher.start()

        self._stop_event.clear()
        self._reader_thread = threading.Thread(
            target=self._reader_loop,
            daemon=True,
            name="ModemReaderThread"
        )
        self._reader_thread.start()
        self._running = True
        logger.info("Started modem reader thread")

    def stop(self) -> None:
        """
        Stop the reader and dispatcher threads.

        Unsolicited lines already read are dispatched before the dispatcher
        exits.
        """
        if self._reader_thread is None and not self.dispatcher.is_running():
            return

        logger.info("Stopping modem reader thread...")
        self._stop_event.set()

        if self._reader_thread:
            self._reader_thread.join(timeout=1.0)
            if self._reader_thread.is_alive():
                logger.warning("Reader thread did not terminate in time")
            self._reader_thread = None

        self.dispatcher.stop()

        self._running = False
        logger.info("Stopped modem reader thread")

    def close(self) -> None:
        """
        Close the modem connection.

        Stops both threads, closes the transport and resets readiness.
        """
        logger.info("Closing modem connection")
        self.stop()
        self.transport.close()
        self.framer.reset()
        self.readiness.reset()
        logger.info("Modem connection closed")

    def _reader_loop(self) -> None:
        """
        Continuously read bytes from the modem and hand them to the framer.
        """
        logger.debug("Reader thread started")

        while not self._stop_event.is_set():
            try:
                data = self.transport.read_available(timeout=self.READ_POLL_INTERVAL)

                # Reset error counter on successful read
                self._consecutive_errors = 0

                if data:
                    self.framer.data_received(data)

            except DeviceDisconnectedError as e:
                # Device is actually disconnected - stop the reader thread
                logger.error("Device disconnected, stopping reader thread")
                self._running = False
                self._disconnected = True

                # Call disconnect callback if provided
                if self._on_disconnect:
                    self._on_disconnect(e)

                break
            except Exception as e:
                # Handle consecutive errors with backoff
                self._consecutive_errors += 1
                logger.error(f"Error in reader loop ({self._consecutive_errors}/{self._max_consecutive_errors}): {e}")

                if self._consecutive_errors >= self._max_consecutive_errors:
                    logger.error(f"Too many consecutive errors ({self._consecutive_errors}), stopping reader thread")
                    self._running = False
                    break

                # Exponential backoff: 0.1s, 0.2s, 0.4s, 0.8s, 1.6s
                backoff_time = 0.1 * (2 ** (self._consecutive_errors - 1))
                time.sleep(backoff_time)

        logger.debug("Reader thread stopped")

    def set_event_handler(self, handler: Optional[EventHandler]) -> None:
        """
        Register the application event handler.

        Only one handler is active at a time; this replaces any previous one.
        """
        self.dispatcher.set_handler(handler)

    def _ensure_running(self, command: Optional[str] = None) -> None:
        if not self._running:
            raise ModemNotStartedError(
                "Modem reader thread is not running; call start() first",
                command=command
            )

    def write(self, command: str) -> None:
        """Write a command without waiting for its response."""
        self._ensure_running(command)
        self.protocol.write(command)

    def read(self, timeout: Optional[float] = None) -> str:
        """Read a response ending in OK or ERROR."""
        self._ensure_running()
        return self.protocol.read(timeout)

    def expect(self, keyword: str, timeout: Optional[float] = None) -> str:
        """Read a response ending with a line containing keyword."""
        self._ensure_running()
        return self.protocol.expect(keyword, timeout)

    def command(self, command: str, timeout: Optional[float] = None) -> str:
        """
        Send an AT command and return its raw response.

        Args:
            command: AT command (e.g., "AT+CSQ")
            timeout: Command timeout (uses default if None)

        Returns:
            Response lines joined with newlines

        Raises:
            ATTimeoutError: If command times out
            ModemNotStartedError: If start() has not been called
        """
        self._ensure_running(command)
        return self.protocol.command(command, timeout)

    def command_expect_ok(self, command: str, timeout: Optional[float] = None) -> str:
        """
        Send an AT command and fail unless it answers OK.

        Raises:
            ProtocolError: If the response does not end with OK
            ATTimeoutError: If command times out
        """
        self._ensure_running(command)
        return self.protocol.command_expect_ok(command, timeout)

    def flush(self) -> list[str]:
        """Discard stray response lines before an unrelated sequence."""
        return self.protocol.flush()

    def wait_for_ready(
        self,
        timeout: float,
        target: ReadyTarget = ReadyTarget.BOTH
    ) -> None:
        """
        Block until the module reports readiness.

        Raises:
            ATTimeoutError: If the target is not reached in time
        """
        self.readiness.wait_for_ready(timeout, target)

    def is_running(self) -> bool:
        """
        Check if the reader thread is running.

        Returns:
            True if running
        """
        return self._running

    def is_disconnected(self) -> bool:
        """
        Check if the device was disconnected during operation.

        This typically indicates a physical disconnection or USB port issue.

        Returns:
            True if device was disconnected, False otherwise
        """
        return self._disconnected

    def __enter__(self):
        """Context manager entry."""
        if not self._running:
            self.start()
        return self

    def __exit__(self, *exc):
        """Context manager exit."""
        self.close()
