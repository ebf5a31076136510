# Copyright 2026 The objsftp Authors. All Rights Reserved.
"""
Retry Module.

This module provides a retry decorator with exponential backoff for object store
client operations. It retries transient failures (connection drops, timeouts,
throttling and 5xx responses) and converts every botocore error that escapes into
the objsftp.client exception family.

Functions:
    retry: Decorator for retrying functions with exponential backoff.
    _convert_client_error: Helper function to convert botocore errors to store exceptions.
"""
import logging
import time
from functools import wraps
from typing import Type, Callable, Any, Tuple

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from .exceptions import (
    AuthenticationError,
    BucketError,
    ObjectError,
    ObjectNotFoundError,
    ObjectStoreError,
)

logger = logging.getLogger("ObjSFTP.client")

RETRYABLE_ERROR_CODES = {
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestTimeout",
    "ServiceUnavailable",
    "InternalError",
    "500",
    "502",
    "503",
    "504",
}

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}

CONNECTION_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))

def _is_retryable(e: Exception) -> bool:
    if isinstance(e, CONNECTION_ERRORS):
        return True
    if isinstance(e, ClientError):
        return _error_code(e) in RETRYABLE_ERROR_CODES
    return False

def _convert_client_error(e: Exception, operation: str = None, key: str = None) -> ObjectStoreError:
    """
    Convert botocore errors to objsftp.client errors.

    Args:
        e (Exception): The botocore error to convert.
        operation (str, optional): The operation being performed. Defaults to None.
        key (str, optional): The object key involved, used for not-found errors.

    Returns:
        ObjectStoreError: The converted error.
    """
    if isinstance(e, NoCredentialsError):
        return AuthenticationError("No credentials available for the object store")

    if not isinstance(e, ClientError):
        if isinstance(e, CONNECTION_ERRORS):
            return ObjectStoreError(str(e), code="ERR_UNAVAILABLE")
        return ObjectStoreError(str(e))

    code = _error_code(e)
    message = e.response.get("Error", {}).get("Message") or str(e)

    if code == "NoSuchBucket":
        return BucketError("Bucket does not exist", operation="ACCESS")
    if code in ("InvalidAccessKeyId", "SignatureDoesNotMatch"):
        return AuthenticationError(message)
    if code in ("AccessDenied", "403", "Forbidden"):
        return ObjectError("Access denied", operation="AUTH")

    if operation in ("HEAD", "GET", "PUT", "DELETE", "LIST"):
        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(key or "", operation=operation)
        if code == "EntityTooLarge":
            return ObjectError("Object size exceeds limits", operation=operation)
        return ObjectError(message, operation=operation)

    if code in ("RequestTimeout", "504"):
        return ObjectStoreError("Request timed out", code="ERR_TIMEOUT")
    if code in ("SlowDown", "Throttling", "ThrottlingException"):
        return ObjectStoreError("Rate limit exceeded", code="ERR_RATE_LIMIT")
    if code in ("ServiceUnavailable", "503"):
        return ObjectStoreError("Service unavailable", code="ERR_UNAVAILABLE")
    if code in ("InternalError", "500"):
        return ObjectStoreError("Internal server error", code="ERR_INTERNAL")

    return ObjectStoreError(message)

def retry(
    max_attempts: int = 5,
    initial_backoff: float = 0.1,
    max_backoff: float = 5.0,
    backoff_multiplier: float = 2.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (ClientError, BotoCoreError),
) -> Callable:
    """
    Decorator for retrying a store call with exponential backoff.

    The wrapped function's name selects the operation tag used in error codes
    (``stat_object`` -> ``HEAD``, ``get_object`` -> ``GET`` and so on). When the
    wrapped call takes a ``key`` argument it is attached to not-found errors.

    Args:
        max_attempts (int): Maximum number of attempts. Defaults to 5.
        initial_backoff (float): Initial backoff time in seconds. Defaults to 0.1.
        max_backoff (float): Maximum backoff time in seconds. Defaults to 5.0.
        backoff_multiplier (float): Multiplier for exponential backoff. Defaults to 2.0.
        retryable_exceptions (Tuple[Type[Exception], ...]): Exceptions inspected for retry.
            Defaults to (ClientError, BotoCoreError).

    Returns:
        Callable: A decorator that wraps the function.
    """
    def decorator(func: Callable) -> Callable:
        operation = {
            "stat_object": "HEAD",
            "get_object": "GET",
            "put_object": "PUT",
            "remove_object": "DELETE",
            "_remove_batch": "DELETE",
            "_list_page": "LIST",
        }.get(func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception = None
            backoff = initial_backoff
            key = kwargs.get("key", args[2] if len(args) > 2 and isinstance(args[2], str) else None)

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    last_exception = e
                    if not _is_retryable(e):
                        raise _convert_client_error(e, operation, key) from e

                    logger.warning(
                        f"Retryable error during {func.__name__} "
                        f"(attempt {attempt + 1}/{max_attempts}): {e}"
                    )
                    if attempt < max_attempts - 1:
                        time.sleep(backoff)
                        backoff = min(backoff * backoff_multiplier, max_backoff)

            logger.error(f"{func.__name__} failed after {max_attempts} attempts: {last_exception}")
            raise _convert_client_error(last_exception, operation, key) from last_exception

        return wrapper
    return decorator
