import os
import socket

import requests


def find_free_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for a currently unused TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def compute_url() -> str | None:
    """Rhino.Compute URL to run live tests against, if configured."""
    return os.getenv("RHINO_COMPUTE_URL")


def has_compute_server() -> bool:
    """Check if a Rhino.Compute server is configured and reachable."""
    url = compute_url()
    if not url:
        return False
    try:
        return requests.get(url.rstrip("/") + "/healthcheck", timeout=2).ok
    except requests.exceptions.RequestException:
        return False


def has_definition(name: str) -> bool:
    """Check if a Grasshopper definition file is available locally."""
    return os.path.isfile(name)
