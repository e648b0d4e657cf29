"""Port occupancy probe."""

from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)

__all__ = ["probe"]


def probe(port: int, host: str = "0.0.0.0") -> bool:
    """Check if a port is currently in use.

    Tries to claim the port with a listening socket and releases it straight
    away. Any socket error counts as "in use", including a permission error
    on a privileged port or running out of file descriptors.

    Args:
        port: The port to check
        host: The host to bind to (default: 0.0.0.0); an IPv6 literal such
            as "::" probes over IPv6

    Returns:
        True if the port is in use, False otherwise
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        # Don't use SO_REUSEADDR - we want to detect if the port is truly in use
        with socket.socket(family, socket.SOCK_STREAM) as sock:
            sock.bind((host, port))
            sock.listen(1)
    except OSError as e:
        logger.debug(f"Port {port}: bind failed ({e})")
        return True
    return False
