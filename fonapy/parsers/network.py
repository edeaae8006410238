"""
Device and network response parsers.

Parses responses for signal, provider and functionality commands.
"""

import logging

from .base import PrefixedValueParser, ResponseParser
from ..types import FunctionalityMode, SignalQuality
from ..exceptions import ATParseError

logger = logging.getLogger(__name__)


class SignalQualityParser(ResponseParser[SignalQuality]):
    """Parser for AT+CSQ (signal quality) response."""

    def __init__(self) -> None:
        self._value = PrefixedValueParser("+CSQ:")

    def parse(self, response: str) -> SignalQuality:
        """
        Parse AT+CSQ response.

        Expected format: "+CSQ: 24,0"
        """
        value = self._value.parse(response)

        try:
            rssi_str, ber_str = value.split(",")
            return SignalQuality(rssi=int(rssi_str), ber=int(ber_str))
        except ValueError as e:
            raise ATParseError(
                f"Failed to parse signal quality: {value}",
                command="AT+CSQ",
                response=response
            ) from e


class ProviderParser(ResponseParser[str]):
    """Parser for AT+CSPN? (service provider name) response."""

    def __init__(self) -> None:
        self._value = PrefixedValueParser("+CSPN:")

    def parse(self, response: str) -> str:
        """
        Parse AT+CSPN? response.

        Expected format: '+CSPN: "Rogers",0'
        """
        value = self._value.parse(response)
        name, _, _display_mode = value.rpartition(",")
        if not name:
            raise ATParseError(
                f"Failed to parse service provider: {value}",
                command="AT+CSPN?",
                response=response
            )
        return name.strip('"')


class FunctionalityParser(ResponseParser[FunctionalityMode]):
    """Parser for AT+CFUN? response."""

    def __init__(self) -> None:
        self._value = PrefixedValueParser("+CFUN:")

    def parse(self, response: str) -> FunctionalityMode:
        """
        Parse AT+CFUN? response.

        Expected format: "+CFUN: 1"
        """
        value = self._value.parse(response)

        try:
            return FunctionalityMode(int(value))
        except ValueError as e:
            raise ATParseError(
                f"Unknown functionality mode: {value}",
                command="AT+CFUN?",
                response=response
            ) from e
