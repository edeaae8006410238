"""
Response parsers for AT command responses.

Provides type-safe parsing of modem responses into structured data.
"""

from .base import ResponseParser, PrefixedValueParser, IntValueParser, response_lines
from .network import SignalQualityParser, ProviderParser, FunctionalityParser
from .sms import SMSParser, parse_timestamp

__all__ = [
    "ResponseParser",
    "PrefixedValueParser",
    "IntValueParser",
    "response_lines",
    "SignalQualityParser",
    "ProviderParser",
    "FunctionalityParser",
    "SMSParser",
    "parse_timestamp",
]
