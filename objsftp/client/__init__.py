from .client import BucketClient, ObjectStoreClient
from .types import ObjectInfo, RemoveError, StoreConfig

__all__ = ["BucketClient", "ObjectStoreClient", "ObjectInfo", "RemoveError", "StoreConfig"]
