"""
CLI REPL (Read-Eval-Print Loop) for fonapy.

Provides an interactive AT command terminal similar to minicom, printing
unsolicited events as they arrive.
"""

import sys
import logging
from typing import Optional

from .core import UnsolicitedClassifier, LEGACY_PATTERNS, SERIAL_PATTERNS
from .events import EventHandler, SmsArrived
from .modem import FonaModem
from .types import NetworkStatus, ReadyTarget
from .version import __version__
from .exceptions import FonaError


class ConsoleEventHandler(EventHandler):
    """Prints unsolicited events between prompts."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.count = 0

    def _show(self, text: str) -> None:
        self.count += 1
        if self.enabled:
            print(f"\n[URC {self.count}] {text}")
            print("> ", end="", flush=True)

    def on_sms_message_received(self, event: SmsArrived) -> None:
        self._show(f"New SMS in {event.folder} slot {event.message_id}")

    def on_serial_ready(self) -> None:
        self._show("Serial ready")

    def on_network_status_change(self, status: NetworkStatus) -> None:
        self._show(f"Network status: {status.name}")

    def on_error(self, message: str) -> None:
        self._show(message)


class FonaCLI:
    """Interactive AT command REPL."""

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        log_urcs: bool = True,
        legacy_patterns: bool = False
    ):
        """
        Initialize CLI.

        Args:
            port: Serial port path
            baudrate: Baud rate
            log_urcs: Display URCs in real-time
            legacy_patterns: Classify with the older unsolicited table
        """
        self.port = port
        self.baudrate = baudrate
        self.handler = ConsoleEventHandler(enabled=log_urcs)
        self.classifier = UnsolicitedClassifier(
            LEGACY_PATTERNS if legacy_patterns else SERIAL_PATTERNS
        )
        self.modem: Optional[FonaModem] = None

    def run(self):
        """Run the REPL."""
        print(f"fonapy CLI v{__version__}")
        print(f"Connecting to {self.port} at {self.baudrate} baud...")
        print("Type 'help' for commands, 'quit' to exit\n")

        try:
            self.modem = FonaModem(
                port=self.port,
                baudrate=self.baudrate,
                classifier=self.classifier,
                event_handler=self.handler
            )
            self.modem.start()

            print("Connected! Ready for AT commands.\n")

            # REPL loop
            while True:
                try:
                    cmd = input("> ").strip()

                    if not cmd:
                        continue

                    # Handle special commands
                    if cmd.lower() in ("quit", "exit", "q"):
                        break
                    elif cmd.lower() == "help":
                        self._print_help()
                        continue
                    elif cmd.lower() == "status":
                        self._show_status()
                        continue
                    elif cmd.lower() == "ready":
                        self._wait_ready()
                        continue
                    elif cmd.lower() == "clear":
                        print("\033[2J\033[H", end="")  # Clear screen
                        continue

                    self._send_command(cmd)

                except KeyboardInterrupt:
                    print("\nUse 'quit' to exit")
                    continue
                except EOFError:
                    break

        except FonaError as e:
            print(f"\nError: {e}")
            return 1
        except Exception as e:
            print(f"\nUnexpected error: {e}")
            logging.exception("CLI error")
            return 1
        finally:
            if self.modem:
                print("\nClosing connection...")
                self.modem.close()
                print("Goodbye!")

        return 0

    def _send_command(self, cmd: str):
        """Send AT command and display response."""
        try:
            print(self.modem.command(cmd))
        except FonaError as e:
            print(f"Error: {e}")

    def _print_help(self):
        """Print help message."""
        print("""
Available commands:
  <AT command>  - Send AT command to modem (e.g., AT+CSQ)
  help          - Show this help message
  status        - Show readiness and URC counters
  ready         - Wait up to 30s for serial and network ready
  clear         - Clear screen
  quit/exit/q   - Exit CLI

Common AT commands:
  AT            - Check communication
  AT+CSQ        - Check signal quality
  AT+CSPN?      - Service provider name
  AT+CGATT?     - GPRS attach state
  AT+CFUN?      - Functionality mode
  AT+CMGL="ALL" - List SMS messages (text mode, AT+CMGF=1)

For full AT command reference, see the SIM800 Series AT Command Manual.
        """)

    def _show_status(self):
        """Show readiness state."""
        readiness = self.modem.readiness
        print(f"\nSerial ready: {readiness.serial_ready}")
        print(f"Network status: {readiness.network_status.name}")
        print(f"URCs received this session: {self.handler.count}")
        print(f"URC display: {'Enabled' if self.handler.enabled else 'Disabled'}")

    def _wait_ready(self):
        """Block until the module is ready."""
        try:
            self.modem.wait_for_ready(30.0, ReadyTarget.BOTH)
            print("Module ready")
        except FonaError as e:
            print(f"Error: {e}")


def main():
    """Main entry point for CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        description="fonapy CLI - Interactive AT command terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fona-cli /dev/ttyUSB0
  fona-cli /dev/ttyUSB0 --baudrate 9600
  fona-cli /dev/ttyUSB0 --no-urcs
        """
    )

    parser.add_argument(
        "port",
        help="Serial port (e.g., /dev/ttyUSB0, COM3)"
    )
    parser.add_argument(
        "-b", "--baudrate",
        type=int,
        default=115200,
        help="Baud rate (default: 115200)"
    )
    parser.add_argument(
        "--no-urcs",
        action="store_true",
        help="Disable URC display"
    )
    parser.add_argument(
        "--legacy-patterns",
        action="store_true",
        help="Use the older unsolicited code table (+CFUN: reported asynchronously)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format='%(levelname)s: %(message)s'
        )

    cli = FonaCLI(
        port=args.port,
        baudrate=args.baudrate,
        log_urcs=not args.no_urcs,
        legacy_patterns=args.legacy_patterns
    )

    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
