from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)


def lan_address() -> str:
    """Best-effort IPv4 address of the interface facing the LAN."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            # No packet is sent; connect() only selects the outbound interface.
            sock.connect(("10.255.255.255", 1))
            return sock.getsockname()[0]
    except OSError:
        logger.debug("LAN address lookup failed", exc_info=True)
        return "localhost"
