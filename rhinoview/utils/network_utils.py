"""Network utilities for server management."""

import socket


def is_port_available(host: str, port: int) -> bool:
    """Check whether a TCP port can be bound on the given host.

    Args:
        host: The host address to check.
        port: The port number to check.

    Returns:
        True if binding succeeded, False on any OSError.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, port))
        return True
    except OSError:
        return False
