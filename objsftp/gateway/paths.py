# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""Translation of protocol paths into store keys."""
import posixpath

from .exceptions import PermissionDenied

AUTHORIZED_KEYS = ".authorized_keys"
AUTHORIZED_PASS = ".authorized_pass"

RESERVED_KEYS = frozenset({AUTHORIZED_KEYS, AUTHORIZED_PASS})

def _clean(path: str) -> str:
    # Anchoring at "/" keeps ".." from climbing above the bucket root
    cleaned = posixpath.normpath("/" + (path or ""))
    return cleaned.lstrip("/")

def is_reserved(key: str) -> bool:
    return key in RESERVED_KEYS

def normalize_path(path: str) -> str:
    """
    Convert a protocol path into a store key.

    The result never starts with "/" and the bucket root is the empty string.
    Normalizing an already normalized key returns it unchanged.

    Raises:
        PermissionDenied: If the key is one of the credential objects.
    """
    key = _clean(path)
    if is_reserved(key):
        raise PermissionDenied(f"Access to {key} is not allowed")
    return key

def clean_path(path: str) -> str:
    """Absolute, cleaned form of ``path`` as reported back to clients."""
    return "/" + _clean(path)

def list_prefix(key: str) -> str:
    """Prefix that enumerates the children of ``key``."""
    return key + "/" if key else ""
