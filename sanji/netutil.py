"""Network helpers."""

from __future__ import annotations

import ipaddress
import socket

_PROBE_ADDRESS = ("0.0.0.0", 2080)


def get_local_ip():
    """Return the local address the system would use for outgoing UDP traffic."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.connect(_PROBE_ADDRESS)
        return ipaddress.ip_address(sock.getsockname()[0])