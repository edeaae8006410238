"""
Data types and structures for fonapy.

Provides type-safe representations of modem data.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


class NetworkStatus(IntEnum):
    """Network registration status values (+CGREG stat)."""
    UNREGISTERED = 0
    REGISTERED = 1
    SEARCHING = 2
    DENIED = 3
    UNKNOWN = 4
    ROAMING = 5

    @property
    def is_registered(self) -> bool:
        """Check if registered to network (home or roaming)."""
        return self in (NetworkStatus.REGISTERED, NetworkStatus.ROAMING)


class FunctionalityMode(IntEnum):
    """Phone functionality levels (AT+CFUN)."""
    MIN = 0
    FULL = 1
    FLIGHT = 4


class ReadyTarget(Enum):
    """What a caller waits for in wait_for_ready()."""
    SERIAL = "serial"
    NETWORK = "network"
    BOTH = "both"


class SMSFolder(Enum):
    """SMS storage folders as named by AT+CMGL / AT+CMGR."""
    UNREAD = "REC UNREAD"
    READ = "REC READ"
    UNSENT = "STO UNSENT"
    SENT = "STO SENT"
    ALL = "ALL"


@dataclass
class SignalQuality:
    """
    Signal quality from AT+CSQ.

    RSSI (Received Signal Strength Indicator):
        0: -115 dBm or less
        1: -111 dBm
        2...30: -110 to -54 dBm
        31: -52 dBm or greater
        99: Not known or not detectable
    """
    rssi: int
    ber: int

    @property
    def rssi_dbm(self) -> Optional[int]:
        """Convert RSSI to dBm value."""
        if self.rssi == 99:
            return None
        if self.rssi == 0:
            return -115
        if self.rssi == 1:
            return -111
        if self.rssi == 31:
            return -52
        return (self.rssi * 2) - 114

    @property
    def is_valid(self) -> bool:
        """Check if signal quality reading is valid."""
        return self.rssi != 99


@dataclass
class SMSMessage:
    """
    SMS message data.

    Represents a text-mode message read back from modem storage.
    """
    message_id: int
    folder: SMSFolder
    sender: str
    timestamp: Optional[datetime]
    text: str = ""
