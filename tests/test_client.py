import io
from datetime import datetime, timezone

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from objsftp.client import ObjectInfo, ObjectStoreClient, RemoveError, StoreConfig
from objsftp.client.exceptions import ConfigurationError, ObjectError, ObjectNotFoundError

MODIFIED = datetime(2024, 5, 1, tzinfo=timezone.utc)

@pytest.fixture
def s3():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )

@pytest.fixture
def stubbed(s3):
    with Stubber(s3) as stubber:
        yield ObjectStoreClient(StoreConfig(), s3_client=s3), stubber
        stubber.assert_no_pending_responses()

def test_list_objects_maps_contents_and_prefixes(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        {
            "Contents": [{"Key": "a.txt", "Size": 10, "ETag": '"abc"', "LastModified": MODIFIED}],
            "CommonPrefixes": [{"Prefix": "docs/"}],
            "IsTruncated": False,
        },
        {"Bucket": "alice", "Prefix": "", "Delimiter": "/"},
    )
    assert client.list_objects("alice", "") == [
        ObjectInfo(key="a.txt", size=10, etag="abc", last_modified=MODIFIED),
        ObjectInfo(key="docs/", size=0, etag=""),
    ]

def test_list_objects_recursive_follows_pages(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        {
            "Contents": [{"Key": "docs/a", "Size": 1, "ETag": '"1"', "LastModified": MODIFIED}],
            "IsTruncated": True,
            "NextContinuationToken": "t1",
        },
        {"Bucket": "alice", "Prefix": "docs/"},
    )
    stubber.add_response(
        "list_objects_v2",
        {
            "Contents": [{"Key": "docs/deep/b", "Size": 2, "ETag": '"2"', "LastModified": MODIFIED}],
            "IsTruncated": False,
        },
        {"Bucket": "alice", "Prefix": "docs/", "ContinuationToken": "t1"},
    )
    keys = [info.key for info in client.list_objects("alice", "docs/", recursive=True)]
    assert keys == ["docs/a", "docs/deep/b"]

def test_get_object_reads_body(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(b"hello"), 5), "ContentLength": 5},
        {"Bucket": "alice", "Key": "docs/b.txt"},
    )
    assert client.get_object("alice", "docs/b.txt") == b"hello"

def test_put_object_sends_content_length(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "put_object",
        {"ETag": '"x"'},
        {"Bucket": "alice", "Key": "k", "Body": ANY, "ContentLength": 3},
    )
    assert client.put_object("alice", "k", b"abc", 3) == 3

def test_stat_object(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "head_object",
        {"ContentLength": 10, "ETag": '"abc"', "LastModified": MODIFIED},
        {"Bucket": "alice", "Key": "a.txt"},
    )
    assert client.stat_object("alice", "a.txt") == ObjectInfo(
        key="a.txt", size=10, etag="abc", last_modified=MODIFIED
    )

def test_stat_missing_object(stubbed):
    client, stubber = stubbed
    stubber.add_client_error(
        "head_object",
        service_error_code="404",
        service_message="Not Found",
        http_status_code=404,
        expected_params={"Bucket": "alice", "Key": "nope"},
    )
    with pytest.raises(ObjectNotFoundError) as excinfo:
        client.stat_object("alice", "nope")
    assert excinfo.value.key == "nope"
    assert excinfo.value.code == "ERR_OBJECT_HEAD"

def test_access_denied_is_not_a_missing_object(stubbed):
    client, stubber = stubbed
    stubber.add_client_error("get_object", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(ObjectError) as excinfo:
        client.get_object("alice", "a.txt")
    assert not isinstance(excinfo.value, ObjectNotFoundError)

def test_remove_objects_reports_failures(stubbed):
    client, stubber = stubbed
    stubber.add_response(
        "delete_objects",
        {"Errors": [{"Key": "b", "Code": "AccessDenied", "Message": "denied"}]},
        {"Bucket": "alice", "Delete": {"Objects": [{"Key": "a"}, {"Key": "b"}], "Quiet": True}},
    )
    assert client.remove_objects("alice", ["a", "b"]) == [
        RemoveError(key="b", code="AccessDenied", message="denied")
    ]

def test_remove_object(stubbed):
    client, stubber = stubbed
    stubber.add_response("delete_object", {}, {"Bucket": "alice", "Key": "a.txt"})
    client.remove_object("alice", "a.txt")

def test_bucket_exists(stubbed):
    client, stubber = stubbed
    stubber.add_response("head_bucket", {}, {"Bucket": "alice"})
    stubber.add_client_error("head_bucket", service_error_code="404", http_status_code=404)
    assert client.bucket_exists("alice") is True
    assert client.bucket_exists("bob") is False

def test_bucket_client_delegates_with_bucket(stubbed):
    client, stubber = stubbed
    stubber.add_response("delete_object", {}, {"Bucket": "alice", "Key": "x"})
    client.for_bucket("alice").remove_object("x")

def test_store_config_from_env(monkeypatch):
    monkeypatch.setenv("OBJSFTP_ENDPOINT", "minio:9000")
    monkeypatch.setenv("OBJSFTP_ACCESS_KEY", "key")
    monkeypatch.setenv("OBJSFTP_SECRET_KEY", "secret")
    monkeypatch.setenv("OBJSFTP_SECURE", "true")
    config = StoreConfig.from_env(region="eu-west-1")
    assert config.endpoint_url == "https://minio:9000"
    assert config.region == "eu-west-1"
    assert (config.access_key, config.secret_key) == ("key", "secret")

def test_store_config_override_wins(monkeypatch):
    monkeypatch.setenv("OBJSFTP_ENDPOINT", "minio:9000")
    monkeypatch.delenv("OBJSFTP_ACCESS_KEY", raising=False)
    monkeypatch.delenv("OBJSFTP_SECRET_KEY", raising=False)
    config = StoreConfig.from_env(endpoint="http://127.0.0.1:9100", secure=None)
    assert config.endpoint_url == "http://127.0.0.1:9100"

def test_store_config_requires_key_pair(monkeypatch):
    monkeypatch.setenv("OBJSFTP_ACCESS_KEY", "key")
    monkeypatch.delenv("OBJSFTP_SECRET_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        StoreConfig.from_env()
