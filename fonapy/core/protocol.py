"""
AT command protocol handler.

Manages AT command execution and response collection from the solicited
line queue.
"""

import logging
import queue
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .transport import Transport
from ..exceptions import ATTimeoutError, ProtocolError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
GPRS_TIMEOUT = 10.0
SMS_SEND_TIMEOUT = 60.0

LINE_SEPARATOR = "\n"


@dataclass
class PendingCommand:
    """The single command awaiting its terminator."""
    command: str
    timeout: float
    expect: Optional[str] = None
    issued_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        """Seconds since the command was written."""
        return time.monotonic() - self.issued_at


class ATProtocol:
    """
    AT command protocol handler.

    Writes commands and collects their responses from the solicited queue
    filled by the LineFramer.

    The modem is strictly half-duplex. Callers must serialize access: a new
    command must not be written before the previous one's terminator has been
    read. This is a precondition, not something enforced with a lock.
    """

    def __init__(
        self,
        transport: Transport,
        solicited_queue: queue.Queue,
        default_timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        """
        Initialize AT protocol handler.

        Args:
            transport: Transport instance for communication
            solicited_queue: Queue of response lines filled by the framer
            default_timeout: Default timeout for AT commands in seconds
        """
        self.transport = transport
        self.lines = solicited_queue
        self.default_timeout = default_timeout
        self.pending: Optional[PendingCommand] = None

        logger.info("Initialized AT protocol handler")

    def write(self, command: str) -> None:
        """
        Write a command, adding the carriage return the modem expects.

        Args:
            command: Command text without line terminators

        Raises:
            TransportError: If the write fails
        """
        if self.pending is not None:
            logger.warning(
                f"Writing {command!r} while {self.pending.command!r} "
                f"is still awaiting its response"
            )

        # Lines left over from an earlier exchange never belong to this one
        stray = self._drain()
        if stray:
            logger.warning(
                f"Discarded {len(stray)} unread lines before {command!r}: {stray}"
            )

        self.pending = PendingCommand(command=command, timeout=self.default_timeout)
        logger.debug(f"Sending AT command: {command}")

        try:
            self.transport.write(f"{command}\r".encode("utf-8"))
        except Exception:
            self.pending = None
            raise

    def read(self, timeout: Optional[float] = None) -> str:
        """
        Read a response that finishes with OK or ERROR.

        Args:
            timeout: Longest wait for each line, in seconds (default if None)

        Returns:
            Response lines joined with a newline, terminator included

        Raises:
            ATTimeoutError: If no line arrives within the timeout
        """
        return self._collect(
            lambda line: line == "OK" or "ERROR" in line,
            timeout=timeout
        )

    def expect(self, keyword: str, timeout: Optional[float] = None) -> str:
        """
        Read a response that finishes with a line containing a keyword.

        Used for multi-stage exchanges whose last line is not OK/ERROR.

        Args:
            keyword: Text contained in the last line of the response
            timeout: Longest wait for each line, in seconds (default if None)

        Returns:
            Response lines joined with a newline, keyword line included

        Raises:
            ATTimeoutError: If no line arrives within the timeout
        """
        return self._collect(
            lambda line: keyword in line,
            timeout=timeout,
            keyword=keyword
        )

    def _collect(
        self,
        is_last: Callable[[str], bool],
        timeout: Optional[float] = None,
        keyword: Optional[str] = None
    ) -> str:
        """Take lines from the solicited queue until is_last() matches."""
        timeout_val = timeout if timeout is not None else self.default_timeout
        pending = self.pending
        if pending is not None:
            pending.timeout = timeout_val
            pending.expect = keyword

        lines: list[str] = []
        try:
            while True:
                try:
                    line = self.lines.get(timeout=timeout_val)
                except queue.Empty:
                    command = pending.command if pending else None
                    logger.error(f"Read timed out waiting for {command!r}")
                    raise ATTimeoutError(
                        "Read timed out.",
                        command=command,
                        response=LINE_SEPARATOR.join(lines) or None
                    ) from None

                # Strip echo if present (detection-based, not state-based)
                if not lines and pending is not None and line == pending.command:
                    logger.debug(f"Stripping echo line: {line}")
                    continue

                lines.append(line)
                if is_last(line):
                    break
        finally:
            self.pending = None

        response = LINE_SEPARATOR.join(lines)
        if pending is not None:
            logger.debug(
                f"Received response to {pending.command!r} "
                f"in {pending.elapsed:.3f}s: {lines}"
            )
        return response

    def command(self, command: str, timeout: Optional[float] = None) -> str:
        """
        Send an AT command and wait for its OK/ERROR response.

        Args:
            command: AT command (e.g., "AT+CSQ")
            timeout: Command timeout in seconds (uses default if None)

        Returns:
            Raw response text, terminator included

        Raises:
            ATTimeoutError: If command times out
            TransportError: If the write fails
        """
        self.write(command)
        return self.read(timeout)

    def command_expect_ok(self, command: str, timeout: Optional[float] = None) -> str:
        """
        Send an AT command and fail unless the response ends with OK.

        Args:
            command: AT command
            timeout: Command timeout in seconds (uses default if None)

        Returns:
            Raw response text

        Raises:
            ProtocolError: If the last line is anything other than OK
            ATTimeoutError: If command times out
        """
        response = self.command(command, timeout)
        if response.split(LINE_SEPARATOR)[-1] != "OK":
            logger.error(f"AT command failed: {command} -> {response!r}")
            raise ProtocolError(
                "AT command failed",
                command=command,
                response=response
            )
        return response

    def flush(self) -> list[str]:
        """
        Discard pending input and any unread response lines.

        Returns:
            The discarded lines
        """
        self.transport.reset_input_buffer()

        stray = self._drain()
        if stray:
            logger.warning(f"Discarded {len(stray)} unread lines: {stray}")
        self.pending = None
        return stray

    def _drain(self) -> list[str]:
        """Take every line currently queued without waiting."""
        lines = []
        while True:
            try:
                lines.append(self.lines.get_nowait())
            except queue.Empty:
                return lines

    def is_pending(self) -> bool:
        """
        Check if we're currently waiting for a command response.

        Returns:
            True if response is pending
        """
        return self.pending is not None
