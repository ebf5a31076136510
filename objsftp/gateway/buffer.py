# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Buffer management for objsftp file handles.

Every open file is staged entirely in memory. Read handles hold the object body
fetched at open time; write handles accumulate a sparse image of the object and
upload it in a single PUT when closed.
"""

import time
from enum import Enum
from threading import Lock

from objsftp.client.exceptions import ObjectStoreError
from .exceptions import IOFailure
from .utils import logger, time_function, trace_op

class OpenMode(Enum):
    READ = "read"
    WRITE = "write"

class BufferedFileHandle:
    """
    In-memory staging buffer for one open file.

    Attributes:
        key (str): Store key the handle is bound to.
        mode (OpenMode): Direction the handle was opened in.
        lock (threading.Lock): Guards the buffer against concurrent offset operations.
    """

    def __init__(self, client, key: str, mode: OpenMode, data: bytes = b""):
        """
        Initialize a handle.

        Args:
            client (BucketClient): Scoped client used to commit write handles.
            key (str): Store key for this handle.
            mode (OpenMode): READ or WRITE.
            data (bytes, optional): Initial content, the fetched body for reads.
        """
        self.key = key
        self.mode = mode
        self.lock = Lock()
        self._client = client
        self._content = bytearray(data)
        self._lock_timeout = 5.0  # 5 second timeout for lock acquisition

    @classmethod
    def for_read(cls, client, key: str, data: bytes) -> "BufferedFileHandle":
        return cls(client, key, OpenMode.READ, data)

    @classmethod
    def for_write(cls, client, key: str) -> "BufferedFileHandle":
        return cls(client, key, OpenMode.WRITE)

    def __len__(self):
        return len(self._content)

    def _timed_lock_acquire(self, operation_name):
        """Acquire the handle lock, logging slow acquisitions and failing on timeout."""
        start_time = time.time()
        acquired = self.lock.acquire(timeout=self._lock_timeout)
        elapsed = time.time() - start_time

        if not acquired:
            logger.error(f"Handle lock acquisition timeout ({self._lock_timeout}s) for {operation_name}")
            raise IOFailure(f"Failed to acquire lock for {operation_name}")
        if elapsed > 0.1:
            logger.warning(f"Handle lock acquisition for {operation_name} took {elapsed:.4f} seconds")

    def read_at(self, offset: int, size: int) -> bytes:
        """
        Read up to ``size`` bytes starting at ``offset``.

        Returns:
            bytes: The available bytes; b"" once offset reaches the end (EOF).

        Raises:
            IOFailure: If offset is negative.
        """
        if offset < 0:
            raise IOFailure(f"Invalid read offset {offset} for {self.key}")

        self._timed_lock_acquire(f"read_at({self.key})")
        try:
            if offset >= len(self._content):
                return b""
            return bytes(self._content[offset:offset + size])
        finally:
            self.lock.release()

    def write_at(self, data: bytes, offset: int) -> int:
        """
        Copy ``data`` into the buffer at ``offset``, zero-filling any gap.

        Returns:
            int: Number of bytes written.
        """
        if offset < 0:
            raise IOFailure(f"Invalid write offset {offset} for {self.key}")

        self._timed_lock_acquire(f"write_at({self.key})")
        try:
            end = offset + len(data)
            grow = end - len(self._content)
            if grow > 0:
                self._content.extend(bytes(grow))
            self._content[offset:end] = data
            return len(data)
        finally:
            self.lock.release()

    def close(self) -> None:
        """
        Release the handle, committing write handles to the store.

        The whole buffer goes up as one PUT. Calling close twice uploads twice.

        Raises:
            IOFailure: If the upload fails.
        """
        trace_op("close", self.key, mode=self.mode.value, size=len(self._content))
        start_time = time.time()

        self._timed_lock_acquire(f"close({self.key})")
        try:
            if self.mode is not OpenMode.WRITE:
                self._content = bytearray()
                return

            size = len(self._content)
            try:
                committed = self._client.put_object(self.key, bytes(self._content), size)
            except ObjectStoreError as e:
                logger.error(f"PutObject failed for {self.key}: {e}")
                raise IOFailure(f"Upload of {self.key} failed") from e

            if committed == 0:
                logger.warning(f"PutObject for {self.key} committed a 0 byte upload")
            else:
                logger.info(f"Flushed {size} bytes to {self.key}")
        finally:
            self.lock.release()
            time_function("close", start_time)
