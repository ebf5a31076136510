import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .exceptions import ConfigurationError

@dataclass(frozen=True)
class ObjectInfo:
    """Descriptor for one listed or stat'ed object.

    Delimiter prefixes and directory markers carry an empty ``etag``.
    """
    key: str
    size: int = 0
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None

@dataclass(frozen=True)
class RemoveError:
    """Per-key failure reported by a bulk delete."""
    key: str
    code: str
    message: str

@dataclass
class StoreConfig:
    """Connection settings for the S3-compatible store."""
    endpoint: str = "127.0.0.1:9000"
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    secure: bool = False
    region: str = "us-east-1"
    timeout: float = 30.0

    @property
    def endpoint_url(self) -> str:
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}"

    @classmethod
    def from_env(cls, **overrides) -> "StoreConfig":
        """
        Build a config from OBJSFTP_* environment variables.

        Keyword overrides that are not None win over the environment.

        Raises:
            ConfigurationError: If only one half of the key pair is set.
        """
        values = {
            "endpoint": os.environ.get("OBJSFTP_ENDPOINT", cls.endpoint),
            "access_key": os.environ.get("OBJSFTP_ACCESS_KEY"),
            "secret_key": os.environ.get("OBJSFTP_SECRET_KEY"),
            "secure": os.environ.get("OBJSFTP_SECURE", "").lower() in ("true", "1", "yes"),
            "region": os.environ.get("OBJSFTP_REGION", cls.region),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if bool(values["access_key"]) != bool(values["secret_key"]):
            raise ConfigurationError("OBJSFTP_ACCESS_KEY and OBJSFTP_SECRET_KEY must be set together")
        return cls(**values)
