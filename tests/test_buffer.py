import logging
import threading

import pytest

from objsftp.gateway import BufferedFileHandle, IOFailure, OpenMode

def test_sparse_writes_zero_fill(store, bucket_client):
    handle = BufferedFileHandle.for_write(bucket_client, "sparse.bin")
    assert handle.write_at(b"ABCDE", 3) == 5
    assert handle.write_at(b"xy", 0) == 2
    handle.close()
    assert store.data("alice", "sparse.bin") == b"xy\x00ABCDE"

def test_overlapping_writes_overwrite_in_place(bucket_client):
    handle = BufferedFileHandle.for_write(bucket_client, "f")
    handle.write_at(b"aaaaaa", 0)
    handle.write_at(b"bb", 2)
    assert handle.read_at(0, 10) == b"aabbaa"

def test_write_handle_makes_no_call_until_close(store, bucket_client):
    handle = BufferedFileHandle.for_write(bucket_client, "later.txt")
    handle.write_at(b"data", 0)
    assert "put_object" not in store.calls
    handle.close()
    assert store.calls.count("put_object") == 1

def test_close_twice_uploads_twice(store, bucket_client):
    handle = BufferedFileHandle.for_write(bucket_client, "twice.txt")
    handle.write_at(b"x", 0)
    handle.close()
    handle.close()
    assert store.calls.count("put_object") == 2

def test_zero_byte_commit_is_logged(store, bucket_client, caplog):
    handle = BufferedFileHandle.for_write(bucket_client, "empty.txt")
    with caplog.at_level(logging.WARNING, logger="ObjSFTP"):
        handle.close()
    assert store.data("alice", "empty.txt") == b""
    assert "0 byte upload" in caplog.text

def test_failed_commit_raises_io_failure(store, bucket_client):
    store.failing.add("put_object")
    handle = BufferedFileHandle.for_write(bucket_client, "x.txt")
    handle.write_at(b"x", 0)
    with pytest.raises(IOFailure):
        handle.close()

def test_read_at_semantics(bucket_client):
    handle = BufferedFileHandle.for_read(bucket_client, "a.txt", b"0123456789")
    assert handle.mode is OpenMode.READ
    assert handle.read_at(0, 4) == b"0123"
    assert handle.read_at(8, 4) == b"89"
    assert handle.read_at(10, 4) == b""
    assert handle.read_at(50, 4) == b""
    with pytest.raises(IOFailure):
        handle.read_at(-1, 4)

def test_read_handle_close_does_not_upload(store, bucket_client):
    handle = BufferedFileHandle.for_read(bucket_client, "a.txt", b"0123456789")
    handle.close()
    assert "put_object" not in store.calls

def test_concurrent_writes_on_one_handle(store, bucket_client):
    handle = BufferedFileHandle.for_write(bucket_client, "chunks.bin")
    chunk = 1024

    def writer(i):
        handle.write_at(bytes([i]) * chunk, i * chunk)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(16)]
    for t in reversed(threads):
        t.start()
    for t in threads:
        t.join()
    handle.close()

    data = store.data("alice", "chunks.bin")
    assert len(data) == 16 * chunk
    assert all(data[i * chunk:(i + 1) * chunk] == bytes([i]) * chunk for i in range(16))

def test_two_handles_last_close_wins(store, bucket_client):
    first = BufferedFileHandle.for_write(bucket_client, "race.txt")
    second = BufferedFileHandle.for_write(bucket_client, "race.txt")
    first.write_at(b"first", 0)
    second.write_at(b"second", 0)
    second.close()
    first.close()
    assert store.data("alice", "race.txt") == b"first"
