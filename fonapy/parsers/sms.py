"""
SMS response parsers for AT commands.

Parses text-mode responses from:
- AT+CMGL (List messages)
- AT+CMGR (Read message)
"""

import re
from datetime import datetime
from typing import Optional

from .base import response_lines
from ..types import SMSFolder, SMSMessage
from ..exceptions import ATParseError

# +CMGL: <index>,"<stat>","<sender>","<alpha>","<yy/MM/dd,HH:mm:ss><tz>"
_CMGL_HEADER = re.compile(
    r'\+CMGL:\s*(\d+),"([A-Z ]+)","([^"]*)",(?:"[^"]*")?,"([0-9/,:]+)[-+]\d+"'
)
# +CMGR: "<stat>","<sender>","<alpha>","<yy/MM/dd,HH:mm:ss><tz>"
_CMGR_HEADER = re.compile(
    r'\+CMGR:\s*"([A-Z ]+)","([^"]*)",(?:"[^"]*")?,"([0-9/,:]+)[-+]\d+"'
)

TIMESTAMP_FORMAT = "%y/%m/%d,%H:%M:%S"


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a modem timestamp without its timezone suffix.

    Args:
        value: Timestamp like "14/12/01,13:45:02"

    Returns:
        Naive datetime, or None if the value is malformed
    """
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _folder(stat: str, response: str) -> SMSFolder:
    try:
        return SMSFolder(stat)
    except ValueError as e:
        raise ATParseError(f"Unknown SMS folder: {stat}", response=response) from e


class SMSParser:
    """Parser for SMS-related AT command responses."""

    @staticmethod
    def parse_cmgr(response: str, message_id: int) -> SMSMessage:
        """
        Parse AT+CMGR response in text mode.

        Expected format:
            +CMGR: "REC READ","+16045551234","","14/12/01,13:45:02-32"
            Message content here
            OK

        Args:
            response: Response text from AT+CMGR
            message_id: Index the message was read from

        Returns:
            SMSMessage object

        Raises:
            ATParseError: If the header is missing or malformed
        """
        lines = response_lines(response)
        if not lines:
            raise ATParseError("Invalid SMS message number", response=response)

        match = _CMGR_HEADER.match(lines[0])
        if not match:
            raise ATParseError(f"Could not parse CMGR header: {lines[0]}", response=response)

        return SMSMessage(
            message_id=message_id,
            folder=_folder(match.group(1), response),
            sender=match.group(2),
            timestamp=parse_timestamp(match.group(3)),
            text="\n".join(lines[1:])
        )

    @staticmethod
    def parse_cmgl(response: str) -> list[SMSMessage]:
        """
        Parse AT+CMGL response in text mode.

        Expected format (multiple messages):
            +CMGL: 1,"REC READ","+16045551234","","14/12/01,13:45:02-32"
            Message 1 content
            +CMGL: 2,"REC UNREAD","+16045554321","","14/12/02,09:12:40-32"
            Message 2 content
            OK

        Args:
            response: Response text from AT+CMGL

        Returns:
            List of SMSMessage objects (empty if the folder is empty)
        """
        messages: list[SMSMessage] = []
        current: Optional[SMSMessage] = None
        body: list[str] = []

        for line in response_lines(response):
            match = _CMGL_HEADER.match(line)
            if match:
                if current is not None:
                    current.text = "\n".join(body)
                    messages.append(current)
                current = SMSMessage(
                    message_id=int(match.group(1)),
                    folder=_folder(match.group(2), response),
                    sender=match.group(3),
                    timestamp=parse_timestamp(match.group(4))
                )
                body = []
            elif current is not None:
                body.append(line)

        if current is not None:
            current.text = "\n".join(body)
            messages.append(current)

        return messages
