"""
Basic connection example.

Demonstrates connecting to a FONA, waiting for it to register and reading
signal and provider information.
"""

from fonapy import FonaModem, ReadyTarget, FonaError

# Replace with your serial port
PORT = "/dev/ttyUSB0"


def main():
    """Main function."""
    print("fonapy - Basic Connection Example\n")

    # Connect to modem using context manager
    # This automatically starts and closes the modem
    with FonaModem(port=PORT) as modem:
        print("Connected to modem!\n")

        if not modem.device.check():
            print("Module did not answer AT")
            return

        try:
            modem.wait_for_ready(timeout=30, target=ReadyTarget.NETWORK)
        except FonaError as e:
            print(f"Not registered: {e}")

        print("=== Device Information ===")
        signal = modem.device.get_signal_quality()
        if signal.is_valid:
            print(f"Signal: {signal.rssi_dbm} dBm (BER {signal.ber})")
        else:
            print("Signal: not detectable")

        print(f"Provider: {modem.device.get_provider()}")
        print(f"Functionality: {modem.device.get_functionality().name}")
        print(f"Network: {modem.network.get_status().name}")

    print("\nConnection closed.")


if __name__ == "__main__":
    main()
