# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Session principal resolution.

A login name is a bucket name. Depending on the auth mode, the bucket either
just has to exist, or it must also hold a credential object (``.authorized_pass``
or ``.authorized_keys``) with a line matching what the client presented.
"""

import hmac
import time
from dataclasses import dataclass
from enum import Enum

from objsftp.client.exceptions import ObjectStoreError
from .exceptions import AuthenticationFailure
from .paths import AUTHORIZED_KEYS, AUTHORIZED_PASS
from .utils import logger, time_function

class AuthMode(Enum):
    CREDENTIALS = "credentials"
    BUCKET = "bucket"

@dataclass(frozen=True)
class Principal:
    """An authenticated caller and the bucket it is confined to."""
    identity: str
    bucket: str

class PrincipalResolver:
    """
    Decides whether a login is allowed and hands out bucket-scoped clients.

    Attributes:
        client (ObjectStoreClient): Process-level store client.
        auth_mode (AuthMode): Which credential checks are applied.
    """

    def __init__(self, client, auth_mode: AuthMode = AuthMode.CREDENTIALS):
        self.client = client
        self.auth_mode = auth_mode

    @property
    def allowed_auths(self):
        if self.auth_mode is AuthMode.CREDENTIALS:
            return ["password", "publickey"]
        return ["password"]

    def authenticate_password(self, identity: str, secret) -> Principal:
        """
        Authenticate with a password.

        Raises:
            AuthenticationFailure: If the bucket is missing or the secret is not listed.
        """
        start_time = time.time()
        try:
            if not self._has_bucket(identity):
                raise AuthenticationFailure()
            if self.auth_mode is AuthMode.CREDENTIALS:
                secret = _as_bytes(secret)
                if not secret or not self._contains_line(identity, AUTHORIZED_PASS, secret):
                    raise AuthenticationFailure()
            logger.info(f"Password login accepted for {identity}")
            return Principal(identity=identity, bucket=identity)
        except AuthenticationFailure:
            logger.warning(f"Password login refused for {identity}")
            raise
        finally:
            time_function("authenticate_password", start_time)

    def authenticate_public_key(self, identity: str, key_type: str, key_base64: str) -> Principal:
        """
        Authenticate with a public key given as its type and base64 blob.

        Only available in CREDENTIALS mode.

        Raises:
            AuthenticationFailure: If public keys are not accepted or the key is not listed.
        """
        start_time = time.time()
        try:
            if self.auth_mode is not AuthMode.CREDENTIALS:
                raise AuthenticationFailure()
            if not self._has_bucket(identity):
                raise AuthenticationFailure()
            wanted = f"{key_type} {key_base64}".encode()
            if not self._contains_line(identity, AUTHORIZED_KEYS, wanted, _key_fields):
                raise AuthenticationFailure()
            logger.info(f"Public key login accepted for {identity}")
            return Principal(identity=identity, bucket=identity)
        except AuthenticationFailure:
            logger.warning(f"Public key login refused for {identity}")
            raise
        finally:
            time_function("authenticate_public_key", start_time)

    def scoped_client(self, principal: Principal):
        """Client restricted to the principal's bucket."""
        return self.client.for_bucket(principal.bucket)

    def _has_bucket(self, name: str) -> bool:
        if not name:
            return False
        return self.client.bucket_exists(name)

    def _contains_line(self, bucket: str, key: str, needle: bytes, transform=None) -> bool:
        try:
            content = self.client.get_object(bucket, key)
        except ObjectStoreError as e:
            logger.debug(f"Could not read {key} in {bucket}: {e}")
            return False
        for line in content.splitlines():
            if transform is not None:
                line = transform(line)
            if hmac.compare_digest(line, needle):
                return True
        return False

def _as_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)

def _key_fields(line: bytes) -> bytes:
    # "<type> <base64> [comment]" -> "<type> <base64>"
    return b" ".join(line.strip().split()[:2])
