# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""Errors raised by the gateway to the protocol layer.

Each class is an OSError carrying an errno, so a front end can map it to its
own status codes (paramiko's ``SFTPServer.convert_errno`` does exactly that).
"""
import errno
import os

class GatewayError(OSError):
    """Base class for per-request gateway failures."""
    errno_value = errno.EIO

    def __init__(self, message: str = None):
        super().__init__(self.errno_value, message or os.strerror(self.errno_value))

class AuthenticationFailure(GatewayError):
    """Login refused. The message never says which check failed."""
    errno_value = errno.EACCES

    def __init__(self):
        super().__init__("Bad Authentication")

class PermissionDenied(GatewayError):
    errno_value = errno.EACCES

class NotFound(GatewayError):
    errno_value = errno.ENOENT

class IOFailure(GatewayError):
    errno_value = errno.EIO
