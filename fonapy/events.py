"""
Unsolicited events and the application event handler.

The dispatcher decodes every unsolicited line into one of the event types
below and hands it to the registered EventHandler.
"""

from dataclasses import dataclass
from typing import Union

from .types import NetworkStatus


@dataclass(frozen=True)
class SmsArrived:
    """A new SMS was stored by the modem (+CMTI)."""
    message_id: int
    folder: str = "SM"


@dataclass(frozen=True)
class SerialReady:
    """The module finished booting and accepts commands (RDY)."""


@dataclass(frozen=True)
class NetworkStatusChanged:
    """GPRS registration status changed (+CGREG)."""
    status: NetworkStatus


@dataclass(frozen=True)
class Unrecognized:
    """An unsolicited line no decoder understood."""
    raw: str


UnsolicitedEvent = Union[SmsArrived, SerialReady, NetworkStatusChanged, Unrecognized]


class EventHandler:
    """
    Application hooks for asynchronous modem events.

    Subclass and override the methods you care about, then pass an instance
    to FonaModem. All methods run on the dispatcher thread, after the
    connection's readiness state has already been updated.
    """

    def on_sms_message_received(self, event: SmsArrived) -> None:
        """Called when a new SMS message is received."""

    def on_error(self, message: str) -> None:
        """Called when an unsolicited line cannot be handled."""

    def on_serial_ready(self) -> None:
        """Called when the module reports RDY."""

    def on_network_status_change(self, status: NetworkStatus) -> None:
        """Called when the network registration status changes."""
