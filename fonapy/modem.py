"""
Main FonaModem class.

User-facing API that coordinates all feature managers.
"""

import logging
from typing import Callable, Optional

from .core import ModemCore, SerialTransport, Transport, UnsolicitedClassifier
from .core.protocol import DEFAULT_TIMEOUT
from .core.readiness import ReadinessState
from .events import EventHandler
from .features import DeviceManager, NetworkManager, SMSManager
from .types import ReadyTarget

logger = logging.getLogger(__name__)


class FonaModem:
    """
    Main interface for SIM800 / FONA modem control.

    Provides a high-level API for modem operations through feature managers:

    - device: Link check, signal, provider, functionality mode, reset
    - network: Registration status and GPRS bearer
    - sms: SMS messaging in text mode

    Example usage with context manager:

    .. code-block:: python

        class Handler(EventHandler):
            def on_sms_message_received(self, event):
                print(f"New SMS in slot {event.message_id}")

        with FonaModem(port="/dev/ttyUSB0", event_handler=Handler()) as modem:
            modem.wait_for_ready(timeout=30)
            signal = modem.device.get_signal_quality()
            print(f"Signal: {signal.rssi_dbm} dBm")

    Example usage with manual lifecycle management:

    .. code-block:: python

        modem = FonaModem(port="/dev/ttyUSB0")
        modem.start()
        # ... use modem ...
        modem.close()
    """

    # Factory defaults, echo off, +CGREG notifications on
    INIT_COMMANDS = ("AT&F", "ATE0", "AT+CGREG=1")

    def __init__(
        self,
        port: Optional[str] = None,
        transport: Optional[Transport] = None,
        baudrate: int = 115200,
        timeout: float = DEFAULT_TIMEOUT,
        classifier: Optional[UnsolicitedClassifier] = None,
        event_handler: Optional[EventHandler] = None,
        log_urcs: bool = False,
        auto_start: bool = False,
        on_disconnect: Optional[Callable[[Exception], None]] = None,
        initialize: bool = True
    ) -> None:
        """
        Initialize FonaModem.

        Args:
            port: Serial port path (e.g., "/dev/ttyUSB0"). Either port or transport required.
            transport: Custom transport instance (for testing). Overrides port if provided.
            baudrate: Serial port baud rate (default: 115200)
            timeout: Default AT command timeout in seconds (default: 5.0)
            classifier: Unsolicited pattern table (default: SERIAL_PATTERNS)
            event_handler: Receives SMS, readiness, network and error events
            log_urcs: Log URCs at INFO level instead of DEBUG (default: False)
            auto_start: Automatically start reader thread (default: False)
            on_disconnect: Optional callback function called when device disconnects.
                          Signature: callback(exception: Exception) -> None
            initialize: Send the initialization commands on start (default: True)

        Raises:
            ValueError: If neither port nor transport is provided
            TransportError: If serial port cannot be opened

        Example:

        .. code-block:: python

            # Using serial port
            modem = FonaModem(port="/dev/ttyUSB0")

            # Using custom transport (for testing)
            from fonapy.core import MockTransport
            modem = FonaModem(transport=MockTransport(), initialize=False)
        """
        if transport is None and port is None:
            raise ValueError("Either 'port' or 'transport' must be provided")

        if transport is None:
            transport = SerialTransport(port=port, baudrate=baudrate)
            logger.info(f"Created serial transport for {port}")

        self.initialize = initialize

        self._core = ModemCore(
            transport=transport,
            timeout=timeout,
            classifier=classifier,
            event_handler=event_handler,
            log_urcs=log_urcs,
            on_disconnect=on_disconnect
        )

        self.device = DeviceManager(self._core)
        self.network = NetworkManager(self._core)
        self.sms = SMSManager(self._core)

        logger.info("Initialized FonaModem")

        if auto_start:
            self.start()

    def start(self) -> None:
        """
        Start the reader and dispatcher threads, then initialize the module.

        Must be called before using the modem (unless auto_start=True or using context manager).

        If initialization fails the connection is closed before the error
        propagates, since a failing ``__enter__`` never reaches ``__exit__``.

        Raises:
            ProtocolError: If the module rejects the factory reset
            ATTimeoutError: If an initialization command goes unanswered
        """
        self._core.start()
        if self.initialize:
            try:
                self._core.command_expect_ok(self.INIT_COMMANDS[0])
                for cmd in self.INIT_COMMANDS[1:]:
                    self._core.command(cmd)
            except BaseException:
                logger.error("Modem initialization failed, closing connection")
                self._core.close()
                raise
        logger.info("Modem started")

    def stop(self) -> None:
        """Stop the reader and dispatcher threads."""
        self._core.stop()
        logger.info("Modem stopped")

    def close(self) -> None:
        """
        Close the modem connection.

        Stops both threads, closes the transport and resets readiness.
        """
        self._core.close()
        logger.info("Modem closed")

    def set_event_handler(self, handler: Optional[EventHandler]) -> None:
        """
        Replace the application event handler.

        Args:
            handler: New handler, or None to only track readiness
        """
        self._core.set_event_handler(handler)

    def command(self, cmd: str, timeout: Optional[float] = None) -> str:
        """
        Send a raw AT command.

        For advanced users who need to send commands not covered by feature managers.

        Args:
            cmd: AT command (e.g., "AT+CBC")
            timeout: Command timeout in seconds (uses default if None)

        Returns:
            Raw response, lines joined with newlines

        Raises:
            ATTimeoutError: If command times out

        Example:

        .. code-block:: python

            response = modem.command("AT+CBC")
            print(response)
        """
        return self._core.command(cmd, timeout)

    def command_expect_ok(self, cmd: str, timeout: Optional[float] = None) -> str:
        """
        Send a raw AT command and fail unless it answers OK.

        Raises:
            ProtocolError: If the response does not end with OK
        """
        return self._core.command_expect_ok(cmd, timeout)

    def expect(self, keyword: str, timeout: Optional[float] = None) -> str:
        """Read lines until one contains keyword."""
        return self._core.expect(keyword, timeout)

    def flush(self) -> list[str]:
        """Discard stray response lines."""
        return self._core.flush()

    def wait_for_ready(
        self,
        timeout: float,
        target: ReadyTarget = ReadyTarget.BOTH
    ) -> None:
        """
        Block until the module reports readiness.

        Args:
            timeout: Maximum time to wait in seconds
            target: SERIAL (RDY seen), NETWORK (registered) or BOTH

        Raises:
            ATTimeoutError: If the target is not reached in time
        """
        self._core.wait_for_ready(timeout, target)

    @property
    def readiness(self) -> ReadinessState:
        """Readiness state of this connection."""
        return self._core.readiness

    @property
    def is_running(self) -> bool:
        """
        Check if the modem reader thread is running.

        Returns:
            True if running, False otherwise
        """
        return self._core.is_running()

    @property
    def is_disconnected(self) -> bool:
        """
        Check if the device was disconnected.

        Returns:
            True if device disconnected, False otherwise
        """
        return self._core.is_disconnected()

    def __enter__(self):
        """
        Context manager entry.

        Automatically starts the modem if not already running.
        """
        if not self.is_running:
            self.start()
        return self

    def __exit__(self, *exc):
        """
        Context manager exit.

        Automatically closes the modem connection.
        """
        self.close()

    def __repr__(self) -> str:
        """String representation of modem."""
        status = "running" if self.is_running else "stopped"
        return f"<FonaModem status={status} {self.readiness!r}>"
