"""
Exceptions for fonapy.

Provides detailed error information for debugging modem communication issues.
"""

from typing import Optional


class FonaError(Exception):
    """
    Base exception for SIM800 modem errors.

    All fonapy exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        response: Optional[str] = None
    ) -> None:
        """
        Initialize exception with context.

        Args:
            message: Error description
            command: AT command that caused the error (if applicable)
            response: Raw modem response text (if applicable)
        """
        self.command = command
        self.response = response
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        parts = [super().__str__()]

        if self.command:
            parts.append(f"Command: {self.command}")

        if self.response:
            parts.append(f"Response: {self.response!r}")

        return " | ".join(parts)


class TransportError(FonaError):
    """
    Raised when the serial link fails.

    Fatal to the current operation. Nothing is retried automatically.
    """
    pass


class DeviceDisconnectedError(TransportError):
    """
    Raised when the device is disconnected during operation.

    This is a fatal error that requires closing and reopening the connection.
    """
    pass


class ATTimeoutError(FonaError):
    """
    Raised when no terminator is observed within the timeout budget.

    The connection remains usable afterwards.
    """
    pass


class ProtocolError(FonaError):
    """
    Raised when a command terminated with ERROR or an unexpected value.

    The raw response is kept on the exception for diagnostics.
    """
    pass


class ATParseError(ProtocolError):
    """
    Raised when an AT command response cannot be parsed.

    This indicates:
    - Unexpected response format
    - Missing expected fields
    - Invalid data in response
    """
    pass


class DecodeError(FonaError):
    """
    An unsolicited line matched no known decoder.

    Only ever reported through the event handler's ``on_error``, since it
    originates on the dispatcher thread.
    """
    pass


class ModemNotStartedError(FonaError):
    """
    Raised when attempting to use modem before starting reader thread.
    """
    pass


class InvalidTransitionError(FonaError):
    """
    Raised for a functionality mode change the modem does not allow directly.
    """
    pass


class NetworkError(FonaError):
    """
    Raised when network operations fail.

    This indicates:
    - GPRS attach or bearer setup rejected
    - Not registered to network
    """
    pass


class SMSError(FonaError):
    """
    Raised when SMS operations fail.

    This indicates:
    - SMS send failure
    - Message too long
    - Invalid message index
    """
    pass
