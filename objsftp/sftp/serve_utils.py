# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Serving utilities for the objsftp SFTP front end.

This module provides the listener socket, host key loading and signal
handling used by objsftp.sftp.server.serve.
"""

import signal
import socket
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

import paramiko

from objsftp.gateway import AuthMode
from objsftp.gateway.utils import logger

HOST_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)

@dataclass
class ServerConfig:
    """Listener and authentication settings."""
    host: str = "0.0.0.0"
    port: int = 2222
    host_key_path: Optional[str] = None
    auth_mode: AuthMode = AuthMode.CREDENTIALS
    max_auth_failures: int = 3
    auth_timeout: float = 60.0

def parse_bind(bind: str) -> Tuple[str, int]:
    """
    Split "host:port" into its parts.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = bind.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid bind address {bind!r}, expected HOST:PORT")
    return host or "0.0.0.0", int(port)

def load_host_key(path: Optional[str] = None) -> paramiko.PKey:
    """
    Load the server host key, or generate a throwaway RSA key.

    Args:
        path (str, optional): Private key file (Ed25519, ECDSA or RSA).

    Returns:
        paramiko.PKey: The host key.

    Raises:
        paramiko.SSHException: If the file is not a supported private key.
    """
    if path is None:
        logger.warning("No host key given, generating an ephemeral RSA key")
        return paramiko.RSAKey.generate(2048)

    for key_class in HOST_KEY_CLASSES:
        try:
            key = key_class.from_private_key_file(path)
            logger.info(f"Loaded {key.get_name()} host key from {path}")
            return key
        except (paramiko.SSHException, ValueError):
            continue
    raise paramiko.SSHException(f"Unsupported host key file: {path}")

def listen(host: str, port: int, backlog: int = 100) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind((host, port))
    sock.listen(backlog)
    return sock

def setup_signal_handlers(sock):
    """
    Set up signal handlers for a clean shutdown.

    SIGINT and SIGTERM close the listening socket and exit. Sessions already
    running are daemon threads and end with the process.

    Args:
        sock (socket.socket): The listening socket.

    Returns:
        callable: The signal handler function
    """
    def signal_handler(sig, frame):
        logger.info(f"Signal {sig} received, shutting down...")
        sock.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    return signal_handler
