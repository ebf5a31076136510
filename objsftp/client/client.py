# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Object store client.

This module wraps a boto3 S3 client with the small set of calls the gateway
needs: bucket existence, list by prefix, get, put, stat, delete and bulk delete.
Every call goes through the retry decorator, so callers only ever see
objsftp.client exceptions.

Classes:
    ObjectStoreClient: Process-level client addressing any bucket.
    BucketClient: View of an ObjectStoreClient restricted to one bucket.
"""
import logging
from typing import Iterable, Iterator, List

import boto3
from botocore.config import Config as BotoConfig

from .exceptions import ObjectStoreError
from .retry import retry
from .types import ObjectInfo, RemoveError, StoreConfig

logger = logging.getLogger("ObjSFTP.client")

# S3 DeleteObjects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000

class ObjectStoreClient:
    """
    Client for an S3-compatible object store.

    Attributes:
        config (StoreConfig): Connection settings this client was built from.
    """

    def __init__(self, config: StoreConfig, s3_client=None):
        """
        Initialize the client.

        Args:
            config (StoreConfig): Connection settings.
            s3_client (optional): Pre-built boto3 S3 client, used by tests.
        """
        self.config = config
        if s3_client is None:
            session = boto3.Session(
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                region_name=config.region,
            )
            s3_client = session.client(
                "s3",
                endpoint_url=config.endpoint_url,
                region_name=config.region,
                config=BotoConfig(
                    connect_timeout=config.timeout,
                    read_timeout=config.timeout,
                    # retries are handled by objsftp.client.retry
                    retries={"max_attempts": 1, "mode": "standard"},
                    s3={"addressing_style": "path"},
                ),
            )
        self._s3 = s3_client

    def for_bucket(self, bucket: str) -> "BucketClient":
        return BucketClient(self, bucket)

    def bucket_exists(self, bucket: str) -> bool:
        """
        Check whether a bucket exists and is reachable with our credentials.

        Any store error (missing bucket, access denied, bad name) counts as absent.
        """
        try:
            self._head_bucket(bucket)
            return True
        except ObjectStoreError as e:
            logger.debug(f"bucket_exists({bucket!r}) -> False: {e}")
            return False

    @retry()
    def _head_bucket(self, bucket: str) -> None:
        self._s3.head_bucket(Bucket=bucket)

    def list_objects(self, bucket: str, prefix: str = "", recursive: bool = False) -> List[ObjectInfo]:
        """
        List objects under a prefix.

        Non-recursive listings use "/" as delimiter; the resulting common prefixes
        are returned as ObjectInfo entries with an empty etag.

        Args:
            bucket (str): Bucket name.
            prefix (str): Key prefix. Defaults to "".
            recursive (bool): Descend below the first separator. Defaults to False.

        Returns:
            List[ObjectInfo]: Entries in store order.
        """
        return list(self._list_pages(bucket, prefix, recursive))

    @retry()
    def _list_page(self, bucket: str, prefix: str, recursive: bool, token: str = None) -> dict:
        kwargs = {"Bucket": bucket, "Prefix": prefix}
        if not recursive:
            kwargs["Delimiter"] = "/"
        if token:
            kwargs["ContinuationToken"] = token
        return self._s3.list_objects_v2(**kwargs)

    def _list_pages(self, bucket: str, prefix: str, recursive: bool) -> Iterator[ObjectInfo]:
        token = None
        while True:
            page = self._list_page(bucket, prefix, recursive, token)
            for item in page.get("Contents", []):
                yield ObjectInfo(
                    key=item["Key"],
                    size=item.get("Size", 0),
                    etag=item.get("ETag", "").strip('"'),
                    last_modified=item.get("LastModified"),
                )
            for common in page.get("CommonPrefixes", []):
                yield ObjectInfo(key=common["Prefix"], size=0, etag="")
            if not page.get("IsTruncated"):
                return
            token = page.get("NextContinuationToken")

    @retry()
    def get_object(self, bucket: str, key: str) -> bytes:
        response = self._s3.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    @retry()
    def put_object(self, bucket: str, key: str, data: bytes, length: int) -> int:
        """
        Upload an object in one request.

        Returns:
            int: Number of bytes the store accepted (the content length sent).
        """
        self._s3.put_object(Bucket=bucket, Key=key, Body=bytes(data), ContentLength=length)
        return length

    @retry()
    def stat_object(self, bucket: str, key: str) -> ObjectInfo:
        response = self._s3.head_object(Bucket=bucket, Key=key)
        return ObjectInfo(
            key=key,
            size=response.get("ContentLength", 0),
            etag=response.get("ETag", "").strip('"'),
            last_modified=response.get("LastModified"),
        )

    @retry()
    def remove_object(self, bucket: str, key: str) -> None:
        self._s3.delete_object(Bucket=bucket, Key=key)

    def remove_objects(self, bucket: str, keys: Iterable[str]) -> List[RemoveError]:
        """
        Delete many objects, batching requests.

        Returns:
            List[RemoveError]: One entry per key the store failed to delete;
            empty when everything was removed.
        """
        keys = list(keys)
        errors = []
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            errors.extend(self._remove_batch(bucket, keys[start:start + DELETE_BATCH_SIZE]))
        return errors

    @retry()
    def _remove_batch(self, bucket: str, keys: List[str]) -> List[RemoveError]:
        response = self._s3.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": k} for k in keys], "Quiet": True},
        )
        return [
            RemoveError(key=err.get("Key", ""), code=err.get("Code", ""), message=err.get("Message", ""))
            for err in response.get("Errors", [])
        ]

class BucketClient:
    """
    An ObjectStoreClient bound to a single bucket.

    A session only ever holds one of these, so it has no way to name another bucket.
    """

    def __init__(self, client, bucket: str):
        self._client = client
        self.bucket = bucket

    def __repr__(self):
        return f"BucketClient(bucket={self.bucket!r})"

    def list_objects(self, prefix: str = "", recursive: bool = False) -> List[ObjectInfo]:
        return self._client.list_objects(self.bucket, prefix, recursive)

    def get_object(self, key: str) -> bytes:
        return self._client.get_object(self.bucket, key)

    def put_object(self, key: str, data: bytes, length: int) -> int:
        return self._client.put_object(self.bucket, key, data, length)

    def stat_object(self, key: str) -> ObjectInfo:
        return self._client.stat_object(self.bucket, key)

    def remove_object(self, key: str) -> None:
        self._client.remove_object(self.bucket, key)

    def remove_objects(self, keys: Iterable[str]) -> List[RemoveError]:
        return self._client.remove_objects(self.bucket, keys)
