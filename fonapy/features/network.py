"""
Network manager.

Handles network registration status and GPRS bearer operations.
"""

import logging
from typing import TYPE_CHECKING

from ..types import NetworkStatus, ReadyTarget
from ..parsers.base import IntValueParser
from ..core.protocol import GPRS_TIMEOUT
from ..exceptions import ATTimeoutError, FonaError, NetworkError

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)


class NetworkManager:
    """
    Manages network operations.

    Registration status comes from +CGREG notifications tracked by the
    connection; GPRS attach state can also be polled directly.
    """

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize network manager.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core
        self._attach_parser = IntValueParser("+CGATT:")

        logger.debug("Initialized NetworkManager")

    def get_status(self) -> NetworkStatus:
        """
        Get the last reported network registration status.

        Returns:
            NetworkStatus (UNKNOWN until the modem reports one)
        """
        return self.modem.readiness.network_status

    def wait_for_registration(self, timeout: float = 30.0) -> bool:
        """
        Wait for network registration.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if registered, False if timeout

        Example:

        .. code-block:: python

            if modem.network.wait_for_registration(timeout=60):
                print("Registered to network")
        """
        try:
            self.modem.wait_for_ready(timeout, ReadyTarget.NETWORK)
        except ATTimeoutError:
            logger.warning("Network registration timeout")
            return False
        return True

    def is_gprs_attached(self) -> bool:
        """
        Get GPRS attachment status.

        Synchronous fallback for when no event handler tracks registration.

        Returns:
            True if attached to GPRS service, False otherwise
        """
        logger.info("Getting GPRS attachment status")
        response = self.modem.command_expect_ok("AT+CGATT?")
        attached = bool(self._attach_parser.parse(response))
        logger.debug(f"GPRS attached: {attached}")
        return attached

    def enable_gprs(self, apn: str, user: str = "", password: str = "") -> None:
        """
        Attach to GPRS and open bearer profile 1.

        Args:
            apn: Access point name
            user: APN user name
            password: APN password

        Raises:
            NetworkError: If any step is rejected

        Example:

        .. code-block:: python

            modem.network.enable_gprs("internet.com", "wapuser1", "wap")
        """
        logger.info(f"Enabling GPRS (apn={apn})")
        commands = [
            "AT+CGATT=1",
            'AT+SAPBR=3,1,"CONTYPE","GPRS"',
            f'AT+SAPBR=3,1,"APN","{apn}"',
            f'AT+SAPBR=3,1,"USER","{user}"',
            f'AT+SAPBR=3,1,"PWD","{password}"',
            "AT+SAPBR=1,1",
        ]
        for cmd in commands:
            try:
                self.modem.command_expect_ok(cmd, timeout=GPRS_TIMEOUT)
            except FonaError as e:
                raise NetworkError(
                    "GPRS enable failed. Check credentials.",
                    command=cmd,
                    response=e.response
                ) from e
        logger.info("GPRS enabled")

    def disable_gprs(self) -> None:
        """
        Close bearer profile 1 and detach from GPRS.

        Raises:
            NetworkError: If either step is rejected
        """
        logger.info("Disabling GPRS")
        for cmd in ("AT+SAPBR=0,1", "AT+CGATT=0"):
            try:
                self.modem.command_expect_ok(cmd, timeout=GPRS_TIMEOUT)
            except FonaError as e:
                raise NetworkError(
                    "GPRS disable failed.",
                    command=cmd,
                    response=e.response
                ) from e
        logger.info("GPRS disabled")
