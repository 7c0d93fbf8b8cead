"""Test utilities shared across test modules."""

import os
import socket


def emulator_address() -> tuple[str, int]:
    """Firestore emulator host and port from the environment."""
    host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost")
    port = int(os.environ.get("FIRESTORE_EMULATOR_PORT", "8080"))
    # FIRESTORE_EMULATOR_HOST is often given as host:port
    if ":" in host:
        host, _, host_port = host.partition(":")
        port = int(host_port)
    return host, port


def is_emulator_available() -> bool:
    """Check whether the Firestore emulator accepts connections.

    Returns:
        True if the emulator port is reachable.
    """
    hostname, port = emulator_address()

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(1)
            result = sock.connect_ex((hostname, port))
            return result == 0
    except OSError:
        return False
