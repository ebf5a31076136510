from .server import ObjectSFTPHandle, ObjectSFTPServer, ObjectServerInterface, main, serve
from .serve_utils import ServerConfig

__all__ = ["ObjectSFTPHandle", "ObjectSFTPServer", "ObjectServerInterface", "ServerConfig", "main", "serve"]
