# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
File metadata synthesis.

The store has no directories, only keys. Directory entries shown to clients
come from two places: delimiter prefixes returned by a listing (which carry no
ETag), and paths that have no backing object at all. Both are classified as
emulated directories here.
"""
import posixpath
import stat
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from objsftp.client.types import ObjectInfo

# Fixed permission bits reported for every entry
PERMISSION_BITS = 0o750

FILE_MODE = stat.S_IFREG | PERMISSION_BITS
DIR_MODE = stat.S_IFDIR | PERMISSION_BITS

class EntryKind(Enum):
    FILE = "file"
    EMULATED_DIR = "emulated_dir"

def classify(info: ObjectInfo) -> EntryKind:
    """Objects without a content hash are directory placeholders."""
    if not info.etag:
        return EntryKind.EMULATED_DIR
    return EntryKind.FILE

def _mtime(last_modified) -> float:
    # Directory placeholders report a zero or missing timestamp
    if last_modified is None:
        return time.time()
    if isinstance(last_modified, datetime):
        ts = last_modified.timestamp()
    else:
        ts = float(last_modified)
    return ts if ts > 0 else time.time()

@dataclass(frozen=True)
class FileMetadata:
    """
    One directory entry as exposed to the protocol.

    Attributes:
        name (str): Base name, without trailing slash.
        size (int): Size in bytes.
        mode (int): st_mode bits, FILE_MODE or DIR_MODE.
        mtime (float): Modification time as a POSIX timestamp.
    """
    name: str
    size: int
    mode: int
    mtime: float

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @classmethod
    def from_object(cls, info: ObjectInfo) -> "FileMetadata":
        kind = classify(info)
        return cls(
            name=posixpath.basename(info.key.rstrip("/")),
            size=info.size,
            mode=DIR_MODE if kind is EntryKind.EMULATED_DIR else FILE_MODE,
            mtime=_mtime(info.last_modified),
        )

    @classmethod
    def for_directory(cls, path: str) -> "FileMetadata":
        return cls(name=path.rstrip("/"), size=0, mode=DIR_MODE, mtime=time.time())
