# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
SFTP front end for objsftp.

This module plugs the gateway into paramiko. ObjectServerInterface handles SSH
authentication through the PrincipalResolver; ObjectSFTPServer answers SFTP
requests by building gateway Requests and translating gateway errors into SFTP
status codes; ObjectSFTPHandle exposes a BufferedFileHandle as an open file.

Usage:
    # Serve buckets from a local MinIO
    OBJSFTP_ACCESS_KEY=minioadmin OBJSFTP_SECRET_KEY=minioadmin \\
        python -m objsftp.sftp --endpoint 127.0.0.1:9000

    # Log in as the bucket name
    sftp -P 2222 alice@localhost
"""

import argparse
import os
import stat
import sys
import threading
import time

import paramiko

from objsftp.client import ObjectStoreClient, StoreConfig
from objsftp.client.exceptions import ObjectStoreError
from objsftp.gateway import (
    AuthenticationFailure,
    AuthMode,
    GatewayError,
    OpenMode,
    PrincipalResolver,
    Request,
    RequestKind,
    Router,
    clean_path,
)
from objsftp.gateway.metadata import FILE_MODE, FileMetadata
from objsftp.gateway.utils import enable_tracing, logger, set_verbose, time_function, trace_op
from .serve_utils import ServerConfig, listen, load_host_key, parse_bind, setup_signal_handlers

# uid/gid reported for every entry ("nobody")
OWNER_ID = 65534

class ObjectAttributes(paramiko.SFTPAttributes):
    """
    SFTP attributes whose long listing names the bucket as owner and group.

    paramiko sends str(attr) as the "longname" of each directory entry, the
    line clients such as OpenSSH sftp print for "ls -l".
    """

    def __init__(self, owner=None):
        super().__init__()
        self.owner = owner

    def __str__(self):
        if self.owner is None:
            return super().__str__()
        modified = time.strftime("%b %d %H:%M", time.localtime(self.st_mtime or 0))
        return (
            f"{stat.filemode(self.st_mode)} 1 {self.owner:<8} {self.owner:<8} "
            f"{self.st_size:>8} {modified} {self.filename}"
        )

def to_attributes(meta: FileMetadata, owner: str = None) -> paramiko.SFTPAttributes:
    """Convert a gateway metadata record into SFTP attributes."""
    attr = ObjectAttributes(owner)
    attr.filename = meta.name
    attr.st_size = meta.size
    attr.st_uid = OWNER_ID
    attr.st_gid = OWNER_ID
    attr.st_mode = meta.mode
    attr.st_atime = int(meta.mtime)
    attr.st_mtime = int(meta.mtime)
    return attr

def _status(error: OSError) -> int:
    return paramiko.SFTPServer.convert_errno(error.errno)

class ObjectServerInterface(paramiko.ServerInterface):
    """
    SSH-level policy for one connection.

    Attributes:
        resolver (PrincipalResolver): Decides logins.
        principal (Principal): Set once authentication succeeds.
        rejected (threading.Event): Set when the connection used up its login attempts.
    """

    def __init__(self, resolver: PrincipalResolver, max_auth_failures: int = 3):
        self.resolver = resolver
        self.principal = None
        self.max_auth_failures = max_auth_failures
        self.failures = 0
        self.rejected = threading.Event()

    def get_allowed_auths(self, username):
        return ",".join(self.resolver.allowed_auths)

    def check_auth_password(self, username, password):
        try:
            self.principal = self.resolver.authenticate_password(username, password)
        except AuthenticationFailure:
            return self._refuse()
        return paramiko.AUTH_SUCCESSFUL

    def check_auth_publickey(self, username, key):
        try:
            self.principal = self.resolver.authenticate_public_key(
                username, key.get_name(), key.get_base64()
            )
        except AuthenticationFailure:
            return self._refuse()
        return paramiko.AUTH_SUCCESSFUL

    def check_channel_request(self, kind, chanid):
        if kind == "session" and self.principal is not None:
            return paramiko.OPEN_SUCCEEDED
        logger.warning(f"Refusing channel {chanid} of type {kind}")
        return paramiko.OPEN_FAILED_ADMINISTRATIVELY_PROHIBITED

    def _refuse(self):
        self.failures += 1
        if self.failures >= self.max_auth_failures:
            self.rejected.set()
        return paramiko.AUTH_FAILED

class ObjectSFTPHandle(paramiko.SFTPHandle):
    """An open SFTP file backed by a BufferedFileHandle."""

    def __init__(self, handle, flags=0):
        super().__init__(flags)
        self.handle = handle
        self._closed = False

    def read(self, offset, length):
        try:
            return self.handle.read_at(offset, length)
        except GatewayError as e:
            return _status(e)

    def write(self, offset, data):
        if self.handle.mode is not OpenMode.WRITE:
            return paramiko.SFTP_PERMISSION_DENIED
        try:
            self.handle.write_at(data, offset)
        except GatewayError as e:
            return _status(e)
        return paramiko.SFTP_OK

    def close(self):
        # paramiko keeps a handle whose close raised and closes it again at
        # session end; the commit must only be attempted once.
        if self._closed:
            return
        self._closed = True
        # An exception here is reported to the client as SFTP_FAILURE
        self.handle.close()

    def stat(self):
        name = self.handle.key.rsplit("/", 1)[-1]
        return to_attributes(FileMetadata(name=name, size=len(self.handle), mode=FILE_MODE, mtime=time.time()))

    def chattr(self, attr):
        return paramiko.SFTP_OK

class ObjectSFTPServer(paramiko.SFTPServerInterface):
    """
    SFTP request handler for one authenticated session.

    paramiko builds one instance per SFTP subsystem, passing the
    ObjectServerInterface that authenticated the connection.
    """

    def __init__(self, server, *args, **kwargs):
        super().__init__(server, *args, **kwargs)
        self.principal = server.principal
        self.router = Router(server.resolver.scoped_client(server.principal))

    def session_started(self):
        logger.info(f"SFTP session started for {self.principal.identity}")

    def session_ended(self):
        logger.info(f"SFTP session ended for {self.principal.identity}")

    def _call(self, request, convert=None):
        try:
            result = self.router.handle(request)
        except GatewayError as e:
            logger.debug(f"{request.kind.value} {request.path} -> {e}")
            return _status(e)
        if convert is None:
            return paramiko.SFTP_OK
        return convert(result)

    def canonicalize(self, path):
        return clean_path(path)

    def list_folder(self, path):
        return self._call(Request(RequestKind.LIST, path), lambda entries: [to_attributes(m, self.principal.bucket) for m in entries])

    def stat(self, path):
        return self._call(Request(RequestKind.STAT, path), to_attributes)

    def lstat(self, path):
        return self.stat(path)

    def open(self, path, flags, attr):
        trace_op("open", path, flags=flags)
        writing = flags & (os.O_WRONLY | os.O_RDWR)
        kind = RequestKind.WRITE if writing else RequestKind.READ
        return self._call(Request(kind, path, attrs=attr), lambda handle: ObjectSFTPHandle(handle, flags))

    def remove(self, path):
        return self._call(Request(RequestKind.REMOVE, path))

    def rename(self, oldpath, newpath):
        return self._call(Request(RequestKind.RENAME, oldpath, target=newpath))

    def posix_rename(self, oldpath, newpath):
        return self.rename(oldpath, newpath)

    def mkdir(self, path, attr):
        return self._call(Request(RequestKind.MKDIR, path, attrs=attr))

    def rmdir(self, path):
        return self._call(Request(RequestKind.RMDIR, path))

    def chattr(self, path, attr):
        return self._call(Request(RequestKind.SETSTAT, path, attrs=attr))

    def symlink(self, target_path, path):
        return self._call(Request(RequestKind.SYMLINK, path, target=target_path))

def handle_connection(sock, address, host_key, resolver, config: ServerConfig):
    """
    Run the SSH side of one accepted connection until it closes.

    The connection is dropped if authentication does not succeed within
    config.auth_timeout seconds or after config.max_auth_failures refusals.
    """
    start_time = time.time()
    transport = paramiko.Transport(sock)
    transport.add_server_key(host_key)
    transport.set_subsystem_handler("sftp", paramiko.SFTPServer, ObjectSFTPServer)
    server = ObjectServerInterface(resolver, config.max_auth_failures)

    try:
        transport.start_server(server=server)
    except (paramiko.SSHException, EOFError, OSError) as e:
        logger.warning(f"{address} failed to handshake: {e}")
        transport.close()
        return

    deadline = time.time() + config.auth_timeout
    channel = None
    while channel is None and transport.is_active():
        if server.rejected.is_set() or time.time() > deadline:
            break
        channel = transport.accept(timeout=0.5)

    if channel is None:
        logger.warning(f"{address} disconnected without an authenticated session")
        transport.close()
        return

    logger.info(f"{address} SSH session established for bucket {server.principal.bucket}")
    transport.join()
    logger.info(f"{address} connection closed")
    time_function("handle_connection", start_time)

def serve(config: ServerConfig, store_config: StoreConfig):
    """
    Accept connections forever, one thread per connection.

    Args:
        config (ServerConfig): Listener and authentication settings.
        store_config (StoreConfig): Object store connection settings.
    """
    client = ObjectStoreClient(store_config)
    resolver = PrincipalResolver(client, config.auth_mode)
    host_key = load_host_key(config.host_key_path)

    sock = listen(config.host, config.port)
    setup_signal_handlers(sock)
    logger.info(f"Listening on {config.host}:{config.port}, store {store_config.endpoint_url}")

    while True:
        try:
            conn, address = sock.accept()
        except OSError:
            logger.info("Listener closed, exiting")
            break
        threading.Thread(
            target=handle_connection,
            args=(conn, address, host_key, resolver, config),
            daemon=True,
        ).start()

def main(argv=None):
    """
    CLI entry point for the SFTP gateway.

    Usage:
        python -m objsftp.sftp [--bind HOST:PORT] [--endpoint HOST:PORT] [-v]

    Options:
        --secure-endpoint: Reach the object store over HTTPS
        --host-key: Private key file for the server (an ephemeral key is generated otherwise)
        --auth-mode: "credentials" checks .authorized_pass/.authorized_keys, "bucket" only the bucket
        --trace: Enable detailed tracing of file operations for debugging
    """
    parser = argparse.ArgumentParser(description='Serve object store buckets over SFTP')
    parser.add_argument('--bind', default='0.0.0.0:2222', help='SFTP server listen address')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose mode')
    parser.add_argument('--endpoint', default=None, help='Remote object store location (default 127.0.0.1:9000)')
    parser.add_argument('--secure-endpoint', action='store_true', default=None,
                        help='Remote object store uses SSL')
    parser.add_argument('--region', default=None, help='Object store region')
    parser.add_argument('--host-key', default=None, help='Path to the SSH host private key')
    parser.add_argument('--auth-mode', choices=[m.value for m in AuthMode], default=AuthMode.CREDENTIALS.value,
                        help='How logins are checked')
    parser.add_argument('--max-auth-failures', type=int, default=3,
                        help='Failed logins allowed before the connection is dropped')
    parser.add_argument('--trace', action='store_true',
                        help='Enable detailed tracing of file operations for debugging')

    args = parser.parse_args(argv)

    set_verbose(args.verbose)
    if args.trace:
        enable_tracing()

    try:
        host, port = parse_bind(args.bind)
        store_config = StoreConfig.from_env(
            endpoint=args.endpoint, secure=args.secure_endpoint, region=args.region
        )
    except (ValueError, ObjectStoreError) as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Error: {e}")
        sys.exit(2)

    config = ServerConfig(
        host=host,
        port=port,
        host_key_path=args.host_key,
        auth_mode=AuthMode(args.auth_mode),
        max_auth_failures=args.max_auth_failures,
    )
    serve(config, store_config)
