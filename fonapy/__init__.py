"""
fonapy - Python library for SIM800 / Adafruit FONA cellular modems.
"""

from .version import __version__
from .modem import FonaModem
from .core import MockTransport, SerialTransport, UnsolicitedClassifier

from .types import (
    NetworkStatus,
    FunctionalityMode,
    ReadyTarget,
    SignalQuality,
    SMSFolder,
    SMSMessage,
)

from .events import (
    EventHandler,
    SmsArrived,
    SerialReady,
    NetworkStatusChanged,
    Unrecognized,
)

from .exceptions import (
    FonaError,
    TransportError,
    DeviceDisconnectedError,
    ATTimeoutError,
    ProtocolError,
    ATParseError,
    DecodeError,
    ModemNotStartedError,
    InvalidTransitionError,
    NetworkError,
    SMSError,
)

__all__ = [
    "__version__",
    "FonaModem",
    "MockTransport",
    "SerialTransport",
    "UnsolicitedClassifier",
    "NetworkStatus",
    "FunctionalityMode",
    "ReadyTarget",
    "SignalQuality",
    "SMSFolder",
    "SMSMessage",
    "EventHandler",
    "SmsArrived",
    "SerialReady",
    "NetworkStatusChanged",
    "Unrecognized",
    "FonaError",
    "TransportError",
    "DeviceDisconnectedError",
    "ATTimeoutError",
    "ProtocolError",
    "ATParseError",
    "DecodeError",
    "ModemNotStartedError",
    "InvalidTransitionError",
    "NetworkError",
    "SMSError",
]
