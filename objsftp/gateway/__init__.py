from .auth import AuthMode, Principal, PrincipalResolver
from .buffer import BufferedFileHandle, OpenMode
from .exceptions import AuthenticationFailure, GatewayError, IOFailure, NotFound, PermissionDenied
from .metadata import EntryKind, FileMetadata, classify
from .paths import clean_path, normalize_path
from .router import Request, RequestKind, Router

__all__ = [
    "AuthMode",
    "AuthenticationFailure",
    "BufferedFileHandle",
    "EntryKind",
    "FileMetadata",
    "GatewayError",
    "IOFailure",
    "NotFound",
    "OpenMode",
    "PermissionDenied",
    "Principal",
    "PrincipalResolver",
    "Request",
    "RequestKind",
    "Router",
    "classify",
    "clean_path",
    "normalize_path",
]
