"""
SMS manager.

Handles SMS messaging operations (send, read, list, delete) in text mode.
"""

import logging
from typing import TYPE_CHECKING

from ..types import SMSFolder, SMSMessage
from ..parsers.sms import SMSParser
from ..core.protocol import SMS_SEND_TIMEOUT
from ..exceptions import ATParseError, ATTimeoutError, FonaError, SMSError

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 160
CTRL_Z = "\x1a"


class SMSManager:
    """
    Manages SMS messaging operations.

    Every operation switches the modem to text mode first. New messages are
    announced through ``EventHandler.on_sms_message_received``; read them
    with ``read(event.message_id)``.
    """

    # The "> " prompt after AT+CMGS is not a complete line, so waiting for
    # it always times out. This is how long to give the modem to produce it.
    PROMPT_TIMEOUT = 1.0

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize SMS manager.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core
        self._sms_parser = SMSParser()

        logger.debug("Initialized SMSManager")

    def _text_mode(self) -> None:
        self.modem.command_expect_ok("AT+CMGF=1")

    def send(self, phone_number: str, text: str) -> None:
        """
        Send an SMS message.

        Args:
            phone_number: Recipient's phone number
            text: Message body, at most 160 characters

        Raises:
            SMSError: If the message is too long or the modem rejects it

        Example:

        .. code-block:: python

            modem.sms.send("+16045551234", "Hello from fonapy")
        """
        if len(text) > MAX_MESSAGE_LENGTH:
            raise SMSError(f"SMS messages cannot exceed {MAX_MESSAGE_LENGTH} characters.")

        logger.info(f"Sending SMS to {phone_number}")
        self._text_mode()
        self.modem.command_expect_ok('AT+CSCS="GSM"')

        command = f'AT+CMGS="{phone_number}"'
        try:
            response = self.modem.command(command, timeout=self.PROMPT_TIMEOUT)
        except ATTimeoutError:
            logger.debug("Assuming the > prompt was sent")
        else:
            # A complete reply means no prompt; only an error ends it that early
            if "ERROR" in response:
                raise SMSError("SMS Send Failed", command=command, response=response)

        # Up to 60 seconds for the network to accept the message
        response = self.modem.command(text + CTRL_Z, timeout=SMS_SEND_TIMEOUT)
        if "OK" not in response:
            raise SMSError("SMS Send Failed", response=response)

        logger.info(f"SMS sent to {phone_number}")

    def read(self, message_id: int, mark_as_read: bool = True) -> SMSMessage:
        """
        Read an SMS message.

        Args:
            message_id: Index of the message in storage
            mark_as_read: Mark an unread message as read

        Returns:
            SMSMessage

        Raises:
            SMSError: If the index is empty or the read fails
        """
        logger.info(f"Reading SMS {message_id}")
        self._text_mode()

        command = f"AT+CMGR={message_id}"
        if not mark_as_read:
            command += ",1"

        response = self.modem.command(command)
        if "ERROR" in response:
            raise SMSError("Error reading SMS", command=command, response=response)
        if response == "OK":
            raise SMSError("Invalid SMS message number.", command=command, response=response)

        try:
            return self._sms_parser.parse_cmgr(response, message_id)
        except ATParseError as e:
            raise SMSError("Error reading SMS", command=command, response=response) from e

    def list_messages(
        self,
        folder: SMSFolder = SMSFolder.ALL,
        mark_as_read: bool = True
    ) -> list[SMSMessage]:
        """
        List all messages in a folder.

        Args:
            folder: Folder to list
            mark_as_read: Mark unread messages as read

        Returns:
            List of SMSMessage objects (empty if the folder is empty)

        Example:

        .. code-block:: python

            for message in modem.sms.list_messages(SMSFolder.UNREAD):
                print(message.sender, message.text)
        """
        logger.info(f"Listing SMS in {folder.value}")
        self._text_mode()

        command = f'AT+CMGL="{folder.value}"'
        if not mark_as_read:
            command += ",1"

        response = self.modem.command(command)
        if "ERROR" in response:
            raise SMSError("Error reading SMS", command=command, response=response)

        messages = self._sms_parser.parse_cmgl(response)
        logger.debug(f"Found {len(messages)} messages")
        return messages

    def delete(self, message_id: int) -> None:
        """
        Delete an SMS message.

        Args:
            message_id: Index of the message to delete
        """
        logger.info(f"Deleting SMS {message_id}")
        try:
            self.modem.command_expect_ok(f"AT+CMGD={message_id}")
        except FonaError as e:
            raise SMSError(
                f"Failed to delete SMS {message_id}",
                command=e.command,
                response=e.response
            ) from e
