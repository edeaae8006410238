"""
Readiness state machine.

Tracks module boot readiness and network registration as reported by
unsolicited events, and the rules for moving between functionality modes.
"""

import logging
import time

from ..events import NetworkStatusChanged, SerialReady, UnsolicitedEvent
from ..exceptions import ATTimeoutError, InvalidTransitionError
from ..types import FunctionalityMode, NetworkStatus, ReadyTarget

logger = logging.getLogger(__name__)

# Pairs that must pass through FULL
_FORBIDDEN_STEPS = {
    (FunctionalityMode.MIN, FunctionalityMode.FLIGHT),
    (FunctionalityMode.FLIGHT, FunctionalityMode.MIN),
}


class ReadinessState:
    """
    Per-connection readiness state.

    Written only by the URC dispatcher thread (and by reset()), read from any
    thread. Each update is a single attribute assignment, so readers never
    need a lock.
    """

    def __init__(self) -> None:
        self.serial_ready = False
        self.network_status = NetworkStatus.UNKNOWN

    def reset(self) -> None:
        """Forget everything learned since the connection opened."""
        self.serial_ready = False
        self.network_status = NetworkStatus.UNKNOWN
        logger.debug("Readiness state reset")

    def apply(self, event: UnsolicitedEvent) -> None:
        """
        Update state from a decoded unsolicited event.

        Args:
            event: Event produced by the dispatcher
        """
        if isinstance(event, SerialReady):
            self.serial_ready = True
            logger.info("Serial interface ready")
        elif isinstance(event, NetworkStatusChanged):
            self.network_status = event.status
            logger.info(f"Network status: {event.status.name}")

    def is_ready(self, target: ReadyTarget = ReadyTarget.BOTH) -> bool:
        """Check if the target condition currently holds."""
        if target is ReadyTarget.SERIAL:
            return self.serial_ready
        if target is ReadyTarget.NETWORK:
            return self.network_status.is_registered
        return self.serial_ready and self.network_status.is_registered

    def wait_for_ready(
        self,
        timeout: float,
        target: ReadyTarget = ReadyTarget.BOTH,
        poll_interval: float = 0.01
    ) -> None:
        """
        Block until the target condition holds.

        Args:
            timeout: Maximum time to wait in seconds
            target: SERIAL, NETWORK or BOTH
            poll_interval: Time between checks in seconds

        Raises:
            ATTimeoutError: If the condition does not hold in time
        """
        logger.info(f"Waiting for {target.value} ready (timeout={timeout}s)")
        end_time = time.monotonic() + timeout

        while not self.is_ready(target):
            remaining = end_time - time.monotonic()
            if remaining <= 0:
                logger.error(f"Timed out waiting for {target.value} ready")
                raise ATTimeoutError(
                    f"Timed out waiting for {target.value} ready: "
                    f"serial_ready={self.serial_ready}, "
                    f"network_status={self.network_status.name}"
                )
            time.sleep(min(poll_interval, remaining))

    def __repr__(self) -> str:
        return (
            f"<ReadinessState serial_ready={self.serial_ready} "
            f"network_status={self.network_status.name}>"
        )


def validate_functionality_transition(
    current: FunctionalityMode,
    target: FunctionalityMode
) -> None:
    """
    Reject a single step the modem cannot take.

    Raises:
        InvalidTransitionError: For MIN <-> FLIGHT
    """
    if (current, target) in _FORBIDDEN_STEPS:
        raise InvalidTransitionError(
            f"Cannot switch directly from {current.name} to {target.name}",
            command=f"AT+CFUN={target.value}"
        )


def plan_functionality_transition(
    current: FunctionalityMode,
    target: FunctionalityMode
) -> list[FunctionalityMode]:
    """
    Work out the modes to set, in order, to get from current to target.

    MIN <-> FLIGHT goes through FULL.

    Returns:
        Modes to issue (empty if already there)
    """
    if current == target:
        return []
    if (current, target) in _FORBIDDEN_STEPS:
        return [FunctionalityMode.FULL, target]
    return [target]
