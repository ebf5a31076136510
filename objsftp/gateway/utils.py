# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Utility functions for the objsftp gateway.

This module provides logging configuration and timing/tracing helpers
shared by the gateway and the SFTP front end.
"""

import logging
import time
import os

# Enable a debug trace for all file operations if requested
TRACE_OPERATIONS = os.environ.get('OBJSFTP_TRACE_OPS', '').lower() in ('true', '1', 'yes')

LOG_LEVEL = os.environ.get('OBJSFTP_LOG_LEVEL', 'INFO').upper()

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'
)
logger = logging.getLogger('ObjSFTP')
logger.setLevel(LOG_LEVEL)

def set_verbose(verbose: bool) -> None:
    """Switch the ObjSFTP loggers between DEBUG and the configured level."""
    logger.setLevel(logging.DEBUG if verbose else LOG_LEVEL)

def enable_tracing() -> None:
    global TRACE_OPERATIONS
    TRACE_OPERATIONS = True

def time_function(func_name, start_time):
    """
    Helper function for timing operations.

    Calculates and logs the elapsed time for a function call.

    Args:
        func_name (str): Name of the function being timed
        start_time (float): Start time from time.time()

    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.debug(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed

def trace_op(operation, path, **details):
    """
    Trace a file operation for debugging purposes.

    Logs detailed information about file operations when the
    OBJSFTP_TRACE_OPS environment variable is set or --trace is given.

    Args:
        operation (str): The file operation being performed
        path (str): The path of the file being operated on
        **details: Additional details to log
    """
    if TRACE_OPERATIONS:
        detail_str = ', '.join(f"{k}={v}" for k, v in details.items())
        logger.info(f"TRACE: {operation} on {path} {detail_str}")
