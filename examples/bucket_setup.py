# Copyright 2026 The objsftp Authors. All Rights Reserved.
from objsftp.client import ObjectStoreClient, StoreConfig
from objsftp.gateway.paths import AUTHORIZED_KEYS, AUTHORIZED_PASS
import os

def main():
    # Reads OBJSFTP_ENDPOINT, OBJSFTP_ACCESS_KEY and OBJSFTP_SECRET_KEY
    client = ObjectStoreClient(StoreConfig.from_env())
    bucket = "alice"

    if not client.bucket_exists(bucket):
        print(f"Bucket {bucket} does not exist, create it in the store first")
        return

    # Allow password logins with "s3cret"
    passwords = b"s3cret\n"
    client.put_object(bucket, AUTHORIZED_PASS, passwords, len(passwords))
    print(f"Wrote {AUTHORIZED_PASS}")

    # Allow the local user's public key
    pubkey_path = os.path.expanduser("~/.ssh/id_ed25519.pub")
    if os.path.exists(pubkey_path):
        with open(pubkey_path, "rb") as f:
            keys = f.read()
        client.put_object(bucket, AUTHORIZED_KEYS, keys, len(keys))
        print(f"Wrote {AUTHORIZED_KEYS} from {pubkey_path}")

    # Show what an SFTP login will see
    for info in client.list_objects(bucket):
        print(f"- {info.key} ({info.size} bytes)")

if __name__ == "__main__":
    main()
