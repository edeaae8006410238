"""
Line framer.

Turns the raw byte stream from the transport into lines and routes each one
to the solicited or the unsolicited queue.
"""

import logging
import queue
from typing import Callable, Optional

from .classifier import UnsolicitedClassifier

logger = logging.getLogger(__name__)


class LineFramer:
    """
    Splits incoming bytes into lines and enqueues them.

    Runs on the reader thread. ``data_received`` never blocks: both queues
    are unbounded, and every complete line in the buffer is routed before it
    returns. A trailing partial line waits for the rest of its bytes.
    """

    TERMINATOR = b"\n"
    ENCODING = "utf-8"

    def __init__(
        self,
        classifier: UnsolicitedClassifier,
        solicited_queue: queue.Queue,
        unsolicited_queue: queue.Queue,
        is_pending: Optional[Callable[[], bool]] = None
    ) -> None:
        """
        Initialize framer.

        Args:
            classifier: Decides which lines are unsolicited
            solicited_queue: Destination for command responses
            unsolicited_queue: Destination for unsolicited result codes
            is_pending: Reports whether a command is awaiting its reply
        """
        self.classifier = classifier
        self.solicited_queue = solicited_queue
        self.unsolicited_queue = unsolicited_queue
        self._is_pending = is_pending or (lambda: False)
        self.preserve_blank_lines = False
        self._buffer = bytearray()

    def data_received(self, data: bytes) -> None:
        """
        Buffer received bytes and route every complete line.

        Args:
            data: Bytes read from the transport
        """
        self._buffer.extend(data)

        while True:
            index = self._buffer.find(self.TERMINATOR)
            if index < 0:
                break
            packet = bytes(self._buffer[:index])
            del self._buffer[:index + 1]
            self.handle_line(packet.decode(self.ENCODING, errors="ignore").strip())

    def handle_line(self, line: str) -> None:
        """
        Classify one line and put it on the matching queue.

        Args:
            line: Decoded line without terminators
        """
        if not line and not self.preserve_blank_lines:
            return

        if self.classifier.is_unsolicited(line):
            # A +CME/+CMS report ends the command that is waiting for it
            if self.classifier.is_error_report(line) and self._is_pending():
                logger.debug(f"Error report for pending command: {line}")
                self.solicited_queue.put(line)
                return

            logger.debug(f"Unsolicited read: {line}")
            self.unsolicited_queue.put(line)
        else:
            logger.debug(f"Read: {line}")
            self.solicited_queue.put(line)

    def reset(self) -> None:
        """Discard any partial line."""
        if self._buffer:
            logger.debug(f"Discarding partial line: {bytes(self._buffer)!r}")
        self._buffer.clear()
