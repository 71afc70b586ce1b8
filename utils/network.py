"""
Local network helpers: which address the mediator can reach us on, and
which port to listen on.
"""

import ipaddress
import logging
import socket
from typing import Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9000


class NoLocalAddressError(RuntimeError):
    """No usable non-loopback IPv4 address was found."""


def _usable(candidates: Iterable[str]) -> Optional[str]:
    for raw in candidates:
        try:
            ip = ipaddress.ip_address(raw)
        except ValueError:
            continue
        if ip.version == 4 and not ip.is_loopback and not ip.is_unspecified:
            return str(ip)
    return None


def _interface_addresses() -> List[str]:
    """IPv4 addresses of every network interface, in interface order."""
    addresses = []
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family == socket.AF_INET:
                logger.debug(f"interface address: interface={name}, ip={addr.address}")
                addresses.append(addr.address)
    return addresses


def get_local_network_ip() -> str:
    """
    Return the first non-loopback IPv4 address found on the host's interfaces.

    Raises:
        NoLocalAddressError: if the host only has loopback addresses
    """
    ip = _usable(_interface_addresses())
    if ip is None:
        raise NoLocalAddressError("no ip found")
    return ip


def find_free_port(host: str = "localhost") -> int:
    """Ask the OS for a free ephemeral TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]
