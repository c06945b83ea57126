"""Wake-on-LAN: magic packet construction and a configurable sender."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import socket
import sys
import time
from typing import Callable, Optional, Sequence

log = logging.getLogger(__name__)

DEFAULT_PORT = 9
DEFAULT_REPEATS = 3
DEFAULT_DELAY = 0.1
DEFAULT_BROADCAST = "255.255.255.255"

Sender = Callable[[bytes, str, int], None]

_HEX_DIGITS = frozenset("0123456789ABCDEF")


def is_valid_mac(mac: str) -> bool:
    """Return True if *mac* is 12 hex digits, optionally separated by colons."""
    if not isinstance(mac, str):
        return False
    digits = mac.replace(":", "").upper()
    return len(digits) == 12 and all(c in _HEX_DIGITS for c in digits)


def parse_mac(mac: str) -> bytes:
    """Convert a MAC address string to its six raw bytes."""
    if not is_valid_mac(mac):
        raise ValueError(f"invalid MAC address: {mac!r}")
    return bytes.fromhex(mac.replace(":", ""))


def magic_packet(mac: str, secure_on: Optional[str] = None) -> bytes:
    """Build a magic packet, with an optional SecureOn password appended."""
    packet = b"\xff" * 6 + parse_mac(mac) * 16
    if secure_on:
        packet += parse_mac(secure_on)
    return packet


def broadcast_address(ip: str, netmask: str) -> str:
    """Return the directed broadcast address of the network holding *ip*."""
    network = ipaddress.IPv4Network(f"{ip}/{netmask}", strict=False)
    return str(network.broadcast_address)


def _udp_send(packet: bytes, address: str, port: int) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.sendto(packet, (address, port))


def _clean(text: str) -> str:
    return (text or "").replace('"', "")


class WakeOnLan:
    """A Wake-on-LAN item holding a configured target and sending packets."""

    def __init__(
        self,
        mac: str = "",
        secure_on: str = "",
        port: int = DEFAULT_PORT,
        repeats: int = DEFAULT_REPEATS,
        delay: float = DEFAULT_DELAY,
        broadcast: str = DEFAULT_BROADCAST,
        sender: Optional[Sender] = None,
    ) -> None:
        self.mac = _clean(mac)
        if not is_valid_mac(self.mac):
            log.error("Settings > MAC = %s is not valid", self.mac)
            self.mac = ""
        self.secure_on = _clean(secure_on)
        if self.secure_on and not is_valid_mac(self.secure_on):
            log.error("Settings > SecureOn = %s is not valid", self.secure_on)
            self.secure_on = ""
        self.port = int(port)
        self.repeats = int(repeats)
        self.delay = float(delay)
        self.broadcast = broadcast
        self.sender: Sender = sender or _udp_send
        self.value: float = 0

    def send(
        self, mac: str, secure_on: Optional[str] = None, port: int = DEFAULT_PORT
    ) -> bytes:
        """Send a magic packet ``repeats`` times and return the packet."""
        packet = magic_packet(mac, secure_on)
        for attempt in range(self.repeats):
            if attempt:
                time.sleep(self.delay)
            self.sender(packet, self.broadcast, int(port))
        return packet

    def set_value(self, value: float) -> str:
        """Store *value*; a value of 1 wakes the configured target.

        Returns the event text registered for the value.
        """
        self.value = value
        if value == 1:
            if self.mac and self.secure_on:
                self.send(self.mac, self.secure_on, self.port)
                log.info("setValue, SecureOn = %s", self.secure_on)
            elif self.mac:
                self.send(self.mac, None, self.port)
            else:
                raise ValueError("MAC and/or SecureOn not set or not valid")
        return str(int(value))

    def execute(self, command: str, params: Sequence) -> None:
        """Run a scenario command; ``mac`` sends a packet to the given target."""
        if command != "mac":
            return None
        count = len(params)
        if count == 1 and is_valid_mac(params[0]):
            target = params[0]
            self.send(target)
        elif count == 2 and is_valid_mac(params[0]):
            target = params[0]
            self.send(target, None, int(params[1]))
        elif count == 3 and is_valid_mac(params[0]) and is_valid_mac(params[1]):
            target = params[0]
            self.send(target, params[1], int(params[2]))
        else:
            raise ValueError("MAC and/or SecureOn not valid")
        log.info("execute, Magic Packet sent to %s", target)
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Send a magic packet from the command line."""
    parser = argparse.ArgumentParser(
        prog="wakeonlan", description="Send a Wake-on-LAN magic packet."
    )
    parser.add_argument("mac", help="target MAC address")
    parser.add_argument("--secure-on", default="", help="SecureOn password")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--repeats", type=int, default=DEFAULT_REPEATS)
    parser.add_argument("--broadcast", default=DEFAULT_BROADCAST)
    args = parser.parse_args(argv)

    if not is_valid_mac(args.mac):
        print(f"invalid MAC address: {args.mac}", file=sys.stderr)
        return 2
    if args.secure_on and not is_valid_mac(args.secure_on):
        print(f"invalid SecureOn password: {args.secure_on}", file=sys.stderr)
        return 2

    wol = WakeOnLan(
        args.mac,
        args.secure_on,
        args.port,
        args.repeats,
        broadcast=args.broadcast,
    )
    try:
        wol.send(args.mac, args.secure_on or None, args.port)
    except OSError as exc:
        print(f"send failed: {exc}", file=sys.stderr)
        return 1
    print(f"Magic Packet sent to {args.mac}")
    return 0


if __name__ == "__main__":
    sys.exit(main())