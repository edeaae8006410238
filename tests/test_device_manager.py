"""
Tests for DeviceManager.
"""

import pytest
from fonapy.types import FunctionalityMode, NetworkStatus, SignalQuality
from fonapy.events import NetworkStatusChanged, SerialReady
from fonapy.exceptions import ATParseError, ProtocolError


def test_check_ok(modem, mock_transport):
    """Test link check."""
    # Setup mock response
    mock_transport.add_response(["OK"])

    # Call method / verify
    assert modem.device.check() is True
    assert mock_transport.commands == ["AT"]


def test_check_error(modem, mock_transport):
    """Test link check with a bad reply."""
    mock_transport.add_response(["ERROR"])

    assert modem.device.check() is False


def test_get_signal_quality(modem, mock_transport, mock_signal_response):
    """Test getting signal quality."""
    # Setup mock response
    mock_transport.add_response(mock_signal_response)

    # Call method
    signal = modem.device.get_signal_quality()

    # Verify
    assert isinstance(signal, SignalQuality)
    assert signal.rssi == 24
    assert signal.ber == 0
    assert signal.rssi_dbm == -66
    assert signal.is_valid


def test_get_signal_quality_unknown(modem, mock_transport):
    """Test signal not detectable."""
    mock_transport.add_response(["+CSQ: 99,99", "OK"])

    signal = modem.device.get_signal_quality()

    assert signal.rssi_dbm is None
    assert not signal.is_valid


@pytest.mark.parametrize("rssi, dbm", [(0, -115), (1, -111), (2, -110), (30, -54), (31, -52)])
def test_rssi_to_dbm(rssi, dbm):
    """Test the RSSI scale."""
    assert SignalQuality(rssi=rssi, ber=0).rssi_dbm == dbm


def test_get_signal_quality_error(modem, mock_transport):
    """Test the modem rejecting AT+CSQ."""
    mock_transport.add_response(["ERROR"])

    with pytest.raises(ProtocolError):
        modem.device.get_signal_quality()


def test_get_provider(modem, mock_transport):
    """Test getting the service provider name."""
    mock_transport.add_response(['+CSPN: "Rogers Wireless",0', "OK"])

    assert modem.device.get_provider() == "Rogers Wireless"
    assert mock_transport.commands == ["AT+CSPN?"]


def test_get_provider_malformed(modem, mock_transport):
    """Test a provider line without its display mode."""
    mock_transport.add_response(["+CSPN: Rogers", "OK"])

    with pytest.raises(ATParseError):
        modem.device.get_provider()


def test_get_functionality_cached(modem, mock_transport):
    """Test the mode is only queried once."""
    mock_transport.add_response(["+CFUN: 1", "OK"])

    assert modem.device.get_functionality() == FunctionalityMode.FULL
    assert modem.device.get_functionality() == FunctionalityMode.FULL
    assert mock_transport.commands == ["AT+CFUN?"]


def test_get_functionality_refresh(modem, mock_transport):
    """Test bypassing the cache."""
    mock_transport.add_response(["+CFUN: 1", "OK"])
    mock_transport.add_response(["+CFUN: 4", "OK"])

    modem.device.get_functionality()
    assert modem.device.get_functionality(use_cache=False) == FunctionalityMode.FLIGHT


def test_set_functionality_min_to_flight(modem, mock_transport):
    """Test MIN -> FLIGHT goes through FULL."""
    mock_transport.add_response(["+CFUN: 0", "OK"])
    mock_transport.add_response(["OK"])
    mock_transport.add_response(["OK"])

    steps = modem.device.set_functionality(FunctionalityMode.FLIGHT)

    assert steps == [FunctionalityMode.FULL, FunctionalityMode.FLIGHT]
    assert mock_transport.commands == ["AT+CFUN?", "AT+CFUN=1", "AT+CFUN=4"]
    assert modem.device.get_functionality() == FunctionalityMode.FLIGHT


def test_set_functionality_single_step(modem, mock_transport):
    """Test FULL -> FLIGHT is one command."""
    mock_transport.add_response(["+CFUN: 1", "OK"])
    mock_transport.add_response(["OK"])

    steps = modem.device.set_functionality(FunctionalityMode.FLIGHT)

    assert steps == [FunctionalityMode.FLIGHT]
    assert mock_transport.commands == ["AT+CFUN?", "AT+CFUN=4"]


def test_set_functionality_already_there(modem, mock_transport):
    """Test no command is issued for the current mode."""
    mock_transport.add_response(["+CFUN: 1", "OK"])

    assert modem.device.set_functionality(FunctionalityMode.FULL) == []
    assert mock_transport.commands == ["AT+CFUN?"]


def test_set_functionality_rejected(modem, mock_transport):
    """Test a rejected step forgets the cached mode."""
    mock_transport.add_response(["+CFUN: 0", "OK"])
    mock_transport.add_response(["OK"])
    mock_transport.add_response(["+CME ERROR: 3"])
    mock_transport.add_response(["+CFUN: 1", "OK"])

    with pytest.raises(ProtocolError):
        modem.device.set_functionality(FunctionalityMode.FLIGHT)

    # Next read goes back to the modem
    assert modem.device.get_functionality() == FunctionalityMode.FULL
    assert mock_transport.commands[-1] == "AT+CFUN?"


def test_reset_clears_readiness_first(modem, mock_transport):
    """Test reset forgets readiness before issuing the reset command."""
    modem.readiness.apply(SerialReady())
    modem.readiness.apply(NetworkStatusChanged(NetworkStatus.REGISTERED))
    mock_transport.add_response(["OK"])

    modem.device.reset()

    assert mock_transport.commands == ["AT+CFUN=1,1"]
    assert modem.readiness.serial_ready is False
    assert modem.readiness.network_status == NetworkStatus.UNKNOWN


def test_reset_then_wait_for_boot(modem, mock_transport):
    """Test readiness comes back from the RDY after a reset."""
    mock_transport.add_response(["OK"])
    modem.device.reset()

    mock_transport.inject(["RDY", "+CGREG: 1"])
    modem.wait_for_ready(2.0)

    assert modem.readiness.serial_ready is True
