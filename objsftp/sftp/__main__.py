# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""Entry point for ``python -m objsftp.sftp``."""
from .server import main

if __name__ == '__main__':
    main()
