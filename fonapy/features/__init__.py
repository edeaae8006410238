"""
Feature managers for modem functionality.

Provides high-level managers for different modem capabilities:
- DeviceManager: Link check, signal, provider, functionality mode, reset
- NetworkManager: Registration status, GPRS bearer
- SMSManager: SMS messaging in text mode
"""

from .device import DeviceManager
from .network import NetworkManager
from .sms import SMSManager

__all__ = [
    "DeviceManager",
    "NetworkManager",
    "SMSManager",
]
