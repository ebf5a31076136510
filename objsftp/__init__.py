# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""SFTP gateway that serves one object-store bucket per authenticated user."""

__version__ = "0.1.0"
