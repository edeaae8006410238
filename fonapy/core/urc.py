"""
Unsolicited Result Code (URC) dispatcher.

Consumes the unsolicited queue on a background thread, decodes each line into
a typed event, updates the readiness state and notifies the event handler.
"""

import logging
import queue
import re
import threading
from typing import Optional

from .readiness import ReadinessState
from ..events import (
    EventHandler,
    NetworkStatusChanged,
    SerialReady,
    SmsArrived,
    Unrecognized,
    UnsolicitedEvent,
)
from ..exceptions import DecodeError
from ..types import NetworkStatus

logger = logging.getLogger(__name__)

_SMS_PATTERN = re.compile(r'\+CMTI: "([A-Z]+)",([0-9]+)')
_NETWORK_PATTERN = re.compile(r"\+CGREG: ([0-5])")


class Shutdown:
    """Queue message telling the dispatcher to exit."""

    def __repr__(self) -> str:
        return "<SHUTDOWN>"


SHUTDOWN = Shutdown()


def decode_unsolicited(line: str) -> UnsolicitedEvent:
    """
    Decode one unsolicited line.

    Decoders are tried in order: new SMS, serial ready, network status.

    Args:
        line: Unsolicited line as framed

    Returns:
        The decoded event, or Unrecognized
    """
    match = _SMS_PATTERN.search(line)
    if match:
        return SmsArrived(message_id=int(match.group(2)), folder=match.group(1))

    if "RDY" in line:
        return SerialReady()

    match = _NETWORK_PATTERN.search(line)
    if match:
        return NetworkStatusChanged(status=NetworkStatus(int(match.group(1))))

    return Unrecognized(raw=line)


class URCDispatcher:
    """
    Background consumer of unsolicited result codes.

    Features:
    - One thread, one line at a time, in arrival order
    - Readiness state updated before the handler runs
    - Misbehaving handlers are logged, never fatal
    - Clean shutdown: everything queued before stop() is still handled
    """

    def __init__(
        self,
        urc_queue: queue.Queue,
        readiness: ReadinessState,
        handler: Optional[EventHandler] = None,
        log_urcs: bool = False
    ) -> None:
        """
        Initialize URC dispatcher.

        Args:
            urc_queue: Unsolicited queue filled by the framer
            readiness: Connection readiness state to update
            handler: Application event handler
            log_urcs: Whether to log URCs at INFO level
        """
        self.queue = urc_queue
        self.readiness = readiness
        self.handler = handler
        self.log_urcs = log_urcs

        self._thread: Optional[threading.Thread] = None

        logger.info("Initialized URC dispatcher")

    def set_handler(self, handler: Optional[EventHandler]) -> None:
        """
        Replace the event handler.

        Args:
            handler: New handler, or None to only track readiness
        """
        self.handler = handler
        logger.info(f"Event handler set: {type(handler).__name__}")

    def start(self) -> None:
        """Start the dispatcher thread."""
        if self.is_running():
            logger.warning("URC dispatcher already started")
            return

        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="URCDispatcherThread"
        )
        self._thread.start()
        logger.info("Started URC dispatcher thread")

    def stop(self, timeout: float = 1.0) -> None:
        """
        Stop the dispatcher thread.

        Lines queued before this call are still dispatched.

        Args:
            timeout: Time to wait for the thread to finish
        """
        if not self.is_running():
            return

        logger.info("Stopping URC dispatcher thread...")
        self.queue.put(SHUTDOWN)

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("URC dispatcher thread did not terminate in time")
        else:
            logger.info("Stopped URC dispatcher thread")

    def is_running(self) -> bool:
        """Check if the dispatcher thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        """Take messages off the queue until the shutdown sentinel."""
        logger.debug("URC dispatcher thread started")

        while True:
            message = self.queue.get()
            if isinstance(message, Shutdown):
                break
            self.dispatch(message)

        logger.debug("URC dispatcher thread stopped")

    def dispatch(self, line: str) -> UnsolicitedEvent:
        """
        Decode a line, update readiness, then notify the handler.

        Args:
            line: Unsolicited line

        Returns:
            The decoded event
        """
        if self.log_urcs:
            logger.info(f"URC received: {line}")
        else:
            logger.debug(f"URC received: {line}")

        event = decode_unsolicited(line)
        self.readiness.apply(event)
        self._notify(event)
        return event

    def _notify(self, event: UnsolicitedEvent) -> None:
        """Forward an event to the handler, containing its failures."""
        handler = self.handler

        if isinstance(event, Unrecognized):
            error = DecodeError(f"Unknown unsolicited response: {event.raw}")
            logger.debug(str(error))
            if handler is None:
                return
            callback, args = handler.on_error, (str(error),)
        elif handler is None:
            return
        elif isinstance(event, SmsArrived):
            callback, args = handler.on_sms_message_received, (event,)
        elif isinstance(event, SerialReady):
            callback, args = handler.on_serial_ready, ()
        else:
            callback, args = handler.on_network_status_change, (event.status,)

        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Event handler {callback.__name__} failed: {e}", exc_info=True)
