"""
Base parser classes and utilities.

Provides reusable parsing functionality for AT command responses.
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

from ..exceptions import ATParseError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def response_lines(response: str) -> list[str]:
    """
    Split a raw response into lines, dropping the final OK.

    Args:
        response: Response text as returned by ModemCore.command()

    Returns:
        Payload lines
    """
    lines = response.split("\n") if response else []
    if lines and lines[-1] == "OK":
        lines = lines[:-1]
    return lines


class ResponseParser(ABC, Generic[T]):
    """
    Abstract base class for response parsers.

    Parsers convert raw AT command responses into typed data structures.
    """

    @abstractmethod
    def parse(self, response: str) -> T:
        """
        Parse AT command response.

        Args:
            response: Raw response text from the modem

        Returns:
            Parsed data structure

        Raises:
            ATParseError: If response cannot be parsed
        """
        pass


class PrefixedValueParser(ResponseParser[str]):
    """Parser for the value of a "+CMD: value" line."""

    def __init__(self, prefix: str):
        """
        Initialize parser.

        Args:
            prefix: Response prefix including the colon (e.g., "+CSQ:")
        """
        self.prefix = prefix

    def parse(self, response: str) -> str:
        """Return the text after the prefix on the first matching line."""
        for line in response_lines(response):
            if line.startswith(self.prefix):
                return line[len(self.prefix):].strip()

        raise ATParseError(
            f"No {self.prefix} line in response",
            response=response
        )


class IntValueParser(PrefixedValueParser):
    """Parser for integer value responses (e.g., "+CGATT: 1")."""

    def parse(self, response: str) -> int:
        """Parse integer value."""
        value = super().parse(response)

        try:
            return int(value.split(",")[0])
        except ValueError as e:
            raise ATParseError(
                f"Failed to parse integer: {value}",
                response=response
            ) from e
