"""
Core modem infrastructure.

Provides low-level building blocks for modem communication:
- Transport: Serial communication abstraction
- Classifier / Framer: Bytes to solicited and unsolicited lines
- Protocol: AT command execution
- URC: Unsolicited event dispatching
- Readiness: Boot and registration state
- ModemCore: Coordination of all core components
"""

from .transport import Transport, SerialTransport, MockTransport
from .classifier import (
    UnsolicitedClassifier,
    classify,
    SERIAL_PATTERNS,
    LEGACY_PATTERNS,
    OPTIONAL_PATTERNS,
    DEFAULT_PATTERNS,
)
from .framer import LineFramer
from .protocol import ATProtocol, PendingCommand
from .readiness import (
    ReadinessState,
    plan_functionality_transition,
    validate_functionality_transition,
)
from .urc import URCDispatcher, decode_unsolicited, SHUTDOWN
from .modem import ModemCore

__all__ = [
    "Transport",
    "SerialTransport",
    "MockTransport",
    "UnsolicitedClassifier",
    "classify",
    "SERIAL_PATTERNS",
    "LEGACY_PATTERNS",
    "OPTIONAL_PATTERNS",
    "DEFAULT_PATTERNS",
    "LineFramer",
    "ATProtocol",
    "PendingCommand",
    "ReadinessState",
    "plan_functionality_transition",
    "validate_functionality_transition",
    "URCDispatcher",
    "decode_unsolicited",
    "SHUTDOWN",
    "ModemCore",
]
