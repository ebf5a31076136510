# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Request routing for the objsftp gateway.

This module turns typed file-operation requests into calls on a bucket-scoped
object store client. It reconciles the tree the protocol expects with the flat
key space the store offers: directories are never stored, listing uses the
path as a key prefix, and paths without an object stat as directories.

Every store error is converted here; nothing from objsftp.client escapes the
router except through the gateway exception family.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from objsftp.client.exceptions import ObjectNotFoundError, ObjectStoreError
from .buffer import BufferedFileHandle
from .exceptions import GatewayError, IOFailure, NotFound, PermissionDenied
from .metadata import FileMetadata
from .paths import is_reserved, list_prefix, normalize_path
from .utils import logger, time_function, trace_op

class RequestKind(Enum):
    STAT = "stat"
    LIST = "list"
    READ = "read"
    WRITE = "write"
    REMOVE = "remove"
    RMDIR = "rmdir"
    MKDIR = "mkdir"
    SETSTAT = "setstat"
    RENAME = "rename"
    LINK = "link"
    SYMLINK = "symlink"

@dataclass(frozen=True)
class Request:
    """
    One file operation.

    Attributes:
        kind (RequestKind): Operation to perform.
        path (str): Protocol path the operation applies to.
        target (str, optional): Second path for RENAME, LINK and SYMLINK.
        attrs (Any, optional): Attribute payload for SETSTAT and MKDIR; ignored.
    """
    kind: RequestKind
    path: str
    target: Optional[str] = None
    attrs: Any = None

class Router:
    """
    Dispatches requests for one session.

    The router keeps no state between requests; open handles belong to the caller.

    Attributes:
        client (BucketClient): Client scoped to the session's bucket.
    """

    def __init__(self, client):
        self.client = client
        self._handlers = {
            RequestKind.STAT: self._stat,
            RequestKind.LIST: self._list,
            RequestKind.READ: self._read,
            RequestKind.WRITE: self._write,
            RequestKind.REMOVE: self._remove,
            RequestKind.RMDIR: self._rmdir,
            RequestKind.MKDIR: self._noop,
            RequestKind.SETSTAT: self._noop,
            RequestKind.RENAME: self._rename,
            RequestKind.LINK: self._deny,
            RequestKind.SYMLINK: self._deny,
        }

    def handle(self, request: Request):
        """
        Run one request.

        Returns:
            FileMetadata for STAT, a list of FileMetadata for LIST, a
            BufferedFileHandle for READ and WRITE, None otherwise.

        Raises:
            GatewayError: PermissionDenied, NotFound or IOFailure.
        """
        trace_op(request.kind.value, request.path, target=request.target)
        start_time = time.time()
        try:
            return self._handlers[request.kind](request)
        except GatewayError:
            raise
        except ObjectStoreError as e:
            logger.error(f"{request.kind.value} failed for {request.path}: {e}")
            raise IOFailure(f"{request.kind.value} failed for {request.path}") from e
        finally:
            time_function(request.kind.value, start_time)

    def _stat(self, request: Request) -> FileMetadata:
        key = normalize_path(request.path)
        if not key:
            return FileMetadata.for_directory(key)
        try:
            info = self.client.stat_object(key)
        except ObjectNotFoundError:
            # Stat never reports "not found": clients stat before mkdir
            logger.debug(f"stat: no object at {key!r}, reporting a directory")
            return FileMetadata.for_directory(key)
        return FileMetadata.from_object(info)

    def _list(self, request: Request) -> list:
        key = normalize_path(request.path)
        prefix = list_prefix(key)
        entries = []
        for info in self.client.list_objects(prefix, recursive=False):
            if is_reserved(info.key) or info.key == prefix:
                continue
            entries.append(FileMetadata.from_object(info))
        logger.debug(f"list: {len(entries)} entries under {prefix!r}")
        return entries

    def _read(self, request: Request) -> BufferedFileHandle:
        key = normalize_path(request.path)
        if not key:
            raise NotFound("The bucket root is not a file")
        try:
            data = self.client.get_object(key)
        except ObjectNotFoundError as e:
            raise NotFound(f"No such file: {request.path}") from e
        logger.debug(f"read: fetched {len(data)} bytes for {key}")
        return BufferedFileHandle.for_read(self.client, key, data)

    def _write(self, request: Request) -> BufferedFileHandle:
        key = normalize_path(request.path)
        if not key:
            raise PermissionDenied("Cannot write to the bucket root")
        return BufferedFileHandle.for_write(self.client, key)

    def _remove(self, request: Request) -> None:
        key = normalize_path(request.path)
        if not key:
            raise PermissionDenied("Refusing to remove the bucket root")
        self.client.remove_object(key)

    def _rmdir(self, request: Request) -> None:
        key = normalize_path(request.path)
        if not key:
            raise PermissionDenied("Refusing to remove the bucket root")
        keys = [info.key for info in self.client.list_objects(list_prefix(key), recursive=True)]
        if not keys:
            return
        errors = self.client.remove_objects(keys)
        if errors:
            for err in errors:
                logger.error(f"rmdir: failed to delete {err.key}: {err.code} {err.message}")
            raise IOFailure(f"rmdir of {request.path} left {len(errors)} objects behind")
        logger.info(f"rmdir: removed {len(keys)} objects under {key}/")

    def _rename(self, request: Request) -> None:
        """Copy then delete. Not atomic; only real objects can be renamed."""
        source = normalize_path(request.path)
        target = normalize_path(request.target or "")
        if not source or not target:
            raise PermissionDenied("Cannot rename the bucket root")
        if source == target:
            return
        try:
            data = self.client.get_object(source)
        except ObjectNotFoundError as e:
            raise PermissionDenied(f"Renaming directories is not supported: {request.path}") from e
        self.client.put_object(target, data, len(data))
        self.client.remove_object(source)
        logger.info(f"rename: moved {source} to {target} ({len(data)} bytes)")

    def _noop(self, request: Request) -> None:
        normalize_path(request.path)

    def _deny(self, request: Request) -> None:
        raise PermissionDenied(f"{request.kind.value} is not supported")
