"""
Device manager.

Handles device-level operations: link check, signal, provider, functionality
mode and module reset.
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..types import FunctionalityMode, SignalQuality
from ..parsers.network import FunctionalityParser, ProviderParser, SignalQualityParser
from ..core.protocol import GPRS_TIMEOUT
from ..core.readiness import (
    plan_functionality_transition,
    validate_functionality_transition,
)
from ..exceptions import ProtocolError

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)


class DeviceManager:
    """
    Manages device status and functionality.

    Provides methods for checking the link, reading signal quality and the
    service provider, switching functionality modes and resetting the module.
    """

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize device manager.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core

        # Parsers
        self._signal_parser = SignalQualityParser()
        self._provider_parser = ProviderParser()
        self._functionality_parser = FunctionalityParser()

        self._functionality: Optional[FunctionalityMode] = None

        logger.debug("Initialized DeviceManager")

    def check(self) -> bool:
        """
        Check communication with the module.

        Returns:
            True if a bare AT is answered with exactly OK
        """
        return self.modem.command("AT") == "OK"

    def get_signal_quality(self) -> SignalQuality:
        """
        Get signal quality.

        Returns:
            SignalQuality with RSSI and BER values

        Example:

        .. code-block:: python

            signal = modem.device.get_signal_quality()
            if signal.is_valid:
                print(f"Signal: {signal.rssi_dbm} dBm")
        """
        logger.info("Getting signal quality")
        response = self.modem.command_expect_ok("AT+CSQ")
        signal = self._signal_parser.parse(response)
        logger.debug(f"Signal quality: RSSI={signal.rssi}, BER={signal.ber}")
        return signal

    def get_provider(self) -> str:
        """
        Get the service provider name stored on the SIM.

        Returns:
            Provider name
        """
        logger.info("Getting service provider")
        response = self.modem.command_expect_ok("AT+CSPN?")
        return self._provider_parser.parse(response)

    def get_functionality(self, use_cache: bool = True) -> FunctionalityMode:
        """
        Get current functionality mode.

        Args:
            use_cache: Return the last mode set or read, if known

        Returns:
            FunctionalityMode
        """
        if use_cache and self._functionality is not None:
            return self._functionality

        logger.info("Getting functionality mode")
        response = self.modem.command_expect_ok("AT+CFUN?")
        self._functionality = self._functionality_parser.parse(response)
        logger.debug(f"Functionality mode: {self._functionality.name}")
        return self._functionality

    def set_functionality(self, mode: FunctionalityMode) -> list[FunctionalityMode]:
        """
        Switch functionality mode.

        MIN and FLIGHT cannot be switched between directly; such a change is
        made in two steps through FULL.

        Args:
            mode: Target mode

        Returns:
            The modes that were issued, in order

        Example:

        .. code-block:: python

            modem.device.set_functionality(FunctionalityMode.FLIGHT)
        """
        current = self.get_functionality()
        steps = plan_functionality_transition(current, mode)
        if not steps:
            logger.debug(f"Functionality already {mode.name}")
            return steps

        for step in steps:
            validate_functionality_transition(current, step)
            logger.info(f"Switching functionality {current.name} -> {step.name}")
            try:
                self.modem.command_expect_ok(f"AT+CFUN={step.value}", timeout=GPRS_TIMEOUT)
            except ProtocolError:
                # Mode is uncertain after a rejected step
                self._functionality = None
                raise
            current = step
            self._functionality = step

        return steps

    def reset(self) -> None:
        """
        Reset the module.

        Readiness is cleared before the reset is issued; call
        ``wait_for_ready()`` afterwards.
        """
        logger.warning("Resetting module")
        self.modem.readiness.reset()
        self._functionality = None
        self.modem.command_expect_ok("AT+CFUN=1,1", timeout=GPRS_TIMEOUT)
