"""
SMS inbox example.

Prints every new message as it arrives, then deletes it from the SIM.
"""

import queue

from fonapy import EventHandler, FonaModem, NetworkStatus, SmsArrived

# Replace with your serial port
PORT = "/dev/ttyUSB0"


class InboxHandler(EventHandler):
    """Hands new message slots to the main thread."""

    def __init__(self):
        self.arrived = queue.Queue()

    def on_sms_message_received(self, event: SmsArrived):
        # Runs on the dispatcher thread; don't send commands from here
        self.arrived.put(event.message_id)

    def on_network_status_change(self, status: NetworkStatus):
        print(f"\n[NETWORK] {status.name}")

    def on_error(self, message: str):
        print(f"\n[URC] {message}")


def main():
    """Main function."""
    print("fonapy - SMS Inbox Example\n")

    handler = InboxHandler()

    with FonaModem(port=PORT, event_handler=handler, log_urcs=True) as modem:
        for message in modem.sms.list_messages():
            print(f"[{message.message_id}] {message.sender}: {message.text}")

        print("Waiting for messages (Ctrl+C to stop)...\n")

        try:
            while True:
                message_id = handler.arrived.get()
                message = modem.sms.read(message_id)
                print(f"{message.timestamp} {message.sender}: {message.text}")
                modem.sms.delete(message_id)

        except KeyboardInterrupt:
            print("\nStopping...")


if __name__ == "__main__":
    main()
