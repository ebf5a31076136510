# Copyright 2026 The objsftp Authors. All Rights Reserved.
import paramiko

def main():
    # Connect to a gateway started with: python -m objsftp.sftp --bind 127.0.0.1:2222
    transport = paramiko.Transport(("127.0.0.1", 2222))
    transport.connect(username="alice", password="s3cret")
    sftp = paramiko.SFTPClient.from_transport(transport)

    try:
        # Upload a file; it becomes the object "reports/hello.txt" on close
        with sftp.open("/reports/hello.txt", "w") as f:
            f.write(b"Hello, World!")
        print("Uploaded reports/hello.txt")

        # Directories are key prefixes
        print("Root listing:")
        for attr in sftp.listdir_attr("/"):
            print(f"- {attr.filename} {attr.st_size}")

        # Download it again
        with sftp.open("/reports/hello.txt", "r") as f:
            print(f"Downloaded content: {f.read().decode()}")

        # Rename copies then deletes
        sftp.rename("/reports/hello.txt", "/reports/hello-old.txt")
        print("Renamed to reports/hello-old.txt")

        # Removing the directory deletes every object under the prefix
        sftp.rmdir("/reports")
        print("Removed reports/")

    finally:
        sftp.close()
        transport.close()

if __name__ == "__main__":
    main()
