import hashlib
import os
from datetime import datetime, timezone

import pytest

from objsftp.client import BucketClient, ObjectInfo, RemoveError
from objsftp.client.exceptions import BucketError, ObjectError, ObjectNotFoundError, ObjectStoreError

def pytest_configure(config):
    """Configure test environment."""
    os.environ.setdefault("OBJSFTP_LOG_LEVEL", "DEBUG")

class FakeObjectStore:
    """In-memory stand-in for ObjectStoreClient.

    Objects are kept per bucket as key -> (data, last_modified). Keys listed in
    ``fail_removal`` survive bulk deletes and are reported as errors; method
    names in ``failing`` raise a generic ObjectError; names in ``failing_once``
    raise it on the next call only. Empty keys are rejected the way S3 does.
    """

    def __init__(self):
        self.buckets = {}
        self.calls = []
        self.fail_removal = set()
        self.failing = set()
        self.failing_once = set()

    def create_bucket(self, bucket):
        self.buckets.setdefault(bucket, {})

    def add(self, bucket, key, data):
        self.create_bucket(bucket)
        self.buckets[bucket][key] = (bytes(data), datetime(2024, 5, 1, tzinfo=timezone.utc))

    def data(self, bucket, key):
        return self.buckets[bucket][key][0]

    def for_bucket(self, bucket):
        return BucketClient(self, bucket)

    def _objects(self, method, bucket, key=None):
        self.calls.append(method)
        if method in self.failing:
            raise ObjectError("simulated failure", operation=method)
        if method in self.failing_once:
            self.failing_once.discard(method)
            raise ObjectError("simulated failure", operation=method)
        if key == "":
            raise ObjectStoreError("Invalid length for parameter Key, value: 0")
        if bucket not in self.buckets:
            raise BucketError("Bucket does not exist", operation="ACCESS")
        return self.buckets[bucket]

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def list_objects(self, bucket, prefix="", recursive=False):
        objects = self._objects("list_objects", bucket)
        self.calls.append(("list_objects", prefix, recursive))
        result, seen = [], set()
        for key in sorted(objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if not recursive and "/" in rest:
                sub = prefix + rest.split("/", 1)[0] + "/"
                if sub not in seen:
                    seen.add(sub)
                    result.append(ObjectInfo(key=sub, size=0, etag=""))
                continue
            data, modified = objects[key]
            result.append(ObjectInfo(
                key=key,
                size=len(data),
                etag=hashlib.md5(data).hexdigest(),
                last_modified=modified,
            ))
        return result

    def get_object(self, bucket, key):
        objects = self._objects("get_object", bucket, key)
        if key not in objects:
            raise ObjectNotFoundError(key, operation="GET")
        return objects[key][0]

    def put_object(self, bucket, key, data, length):
        objects = self._objects("put_object", bucket, key)
        assert length == len(data)
        objects[key] = (bytes(data), datetime.now(timezone.utc))
        return length

    def stat_object(self, bucket, key):
        objects = self._objects("stat_object", bucket, key)
        if key not in objects:
            raise ObjectNotFoundError(key, operation="HEAD")
        data, modified = objects[key]
        return ObjectInfo(key=key, size=len(data), etag=hashlib.md5(data).hexdigest(), last_modified=modified)

    def remove_object(self, bucket, key):
        self._objects("remove_object", bucket, key).pop(key, None)

    def remove_objects(self, bucket, keys):
        objects = self._objects("remove_objects", bucket)
        self.calls.append(("remove_objects", list(keys)))
        errors = []
        for key in keys:
            if key in self.fail_removal:
                errors.append(RemoveError(key=key, code="AccessDenied", message="denied"))
            else:
                objects.pop(key, None)
        return errors

@pytest.fixture
def store():
    """Bucket ``alice`` holding a.txt (10 bytes), docs/b.txt (5 bytes) and both credential files."""
    fake = FakeObjectStore()
    fake.add("alice", "a.txt", b"0123456789")
    fake.add("alice", "docs/b.txt", b"hello")
    fake.add("alice", ".authorized_pass", b"first-secret\ns3cret\n")
    fake.add("alice", ".authorized_keys", b"ssh-ed25519 AAAAC3NzaKEY alice@laptop\n")
    return fake

@pytest.fixture
def bucket_client(store):
    return store.for_bucket("alice")
