"""
Unsolicited result code classifier.

Decides, line by line, whether the modem sent something on its own or in
reply to the command in flight. Matching is a plain prefix test against a
versioned pattern table; nothing is remembered between calls.
"""

import logging
from typing import Iterable

logger = logging.getLogger(__name__)

# Full list of unsolicited result codes from the SIM800 AT manual (section
# 9.1), minus the codes that are only ever returned as a direct reply to a
# command we issue. Those are read as solicited responses instead.
SERIAL_PATTERNS: tuple[str, ...] = (
    "+CME ERROR:",
    "+CMS ERROR:",
    "+CCWA:",           # call waiting
    "+CLIP:",           # calling line identity
    "+CRING:",          # incoming call
    "+CREG:",           # network registration change
    "+CCWV:",           # call meter about to reach max
    "+CMTI:",           # new SMS stored
    "+CMT:",            # new SMS delivered directly
    "+CBM:",            # cell broadcast
    "+CDS:",            # SMS status report
    "+COLP:",
    "+CSSU:",
    "+CSSI:",
    "+CLCC:",
    "*PSNWID:",         # network name refresh
    "*PSUTTZ:",         # time and timezone refresh
    "+CTZV:",
    "DST:",
    "+CSMINS:",         # SIM inserted or removed
    "+CDRIND:",
    "+CHF:",
    "+CENG:",
    "MO RING",
    "MO CONNECTED",
    "+CPIN:",
    "+CSQN:",
    "+SIMTONE:",
    "+STTONE:",
    "+CR:",
    "+CUSD:",
    "RING",
    "NORMAL POWER DOWN",
    "UNDER-VOLTAGE",
    "OVER-VOLTAGE",
    "CHARGE-ONLY MODE",
    "RDY",
    "CONNECT",          # TCP/UDP connection info
    "SEND OK",
    "CLOSED",
    "RECV FROM",
    "+IPD",
    "+RECEIVE",
    "REMOTE IP:",
    "+CDNSGIP",
    "+PDP DEACT",       # GPRS dropped by network
    "+FTPGET:",
    "+FTPPUT:",
    "+FTPDELE:",
    "+FTPSIZE:",
    "+FTPMKD:",
    "+FTPRMD:",
    "+FTPLIST:",
    "Call Ready",
    "SMS Ready",
    "+CGREG:",
)

# Earlier firmware table: reports +CFUN: asynchronously and has no
# boot-progress or +CGREG: entries.
LEGACY_PATTERNS: tuple[str, ...] = tuple(
    p for p in SERIAL_PATTERNS if p not in ("Call Ready", "SMS Ready", "+CGREG:")
) + ("+CFUN:",)

# Codes that are also direct replies on some firmware. Not enabled unless a
# caller extends a table with them.
OPTIONAL_PATTERNS: tuple[str, ...] = (
    "+CMTE:",           # temperature alarm
    "+CFUN:",
    "+SAPBR",           # bearer
    "+HTTPACTION:",
)

DEFAULT_PATTERNS = SERIAL_PATTERNS

# Unsolicited on their own, but also the terminator of a failing command.
ERROR_REPORT_PATTERNS: tuple[str, ...] = ("+CME ERROR:", "+CMS ERROR:")


class UnsolicitedClassifier:
    """
    Prefix-table classifier for modem output lines.

    Example:

    .. code-block:: python

        classifier = UnsolicitedClassifier(SERIAL_PATTERNS + ("+CMTE:",))
        classifier.is_unsolicited("+CMTI: \"SM\",3")  # True
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_PATTERNS) -> None:
        """
        Initialize classifier.

        Args:
            patterns: Ordered line prefixes that mark an unsolicited code
        """
        self.patterns: tuple[str, ...] = tuple(patterns)
        if not self.patterns:
            raise ValueError("At least one unsolicited pattern is required")
        logger.debug(f"Initialized classifier with {len(self.patterns)} patterns")

    def is_unsolicited(self, line: str) -> bool:
        """
        Check if a line is an unsolicited result code.

        Args:
            line: Decoded line without terminators

        Returns:
            True if the line starts with a known unsolicited code
        """
        return line.startswith(self.patterns)

    @staticmethod
    def is_error_report(line: str) -> bool:
        """Check if a line is a +CME/+CMS error report."""
        return line.startswith(ERROR_REPORT_PATTERNS)


_default_classifier = UnsolicitedClassifier()


def classify(line: str) -> bool:
    """Classify a line against the default pattern table."""
    return _default_classifier.is_unsolicited(line)
