class ObjectStoreError(Exception):
    """Base exception for object store client errors."""
    def __init__(self, message: str, code: str = "ERR_UNKNOWN"):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

class AuthenticationError(ObjectStoreError):
    """Store rejected the client credentials."""
    def __init__(self, message: str):
        super().__init__(message, code="ERR_AUTH")

class BucketError(ObjectStoreError):
    """Bucket operation failed."""
    def __init__(self, message: str, operation: str = None):
        code = "ERR_BUCKET"
        if operation:
            code = f"ERR_BUCKET_{operation.upper()}"
        super().__init__(message, code=code)

class ObjectError(ObjectStoreError):
    """Object operation failed."""
    def __init__(self, message: str, operation: str = None):
        code = "ERR_OBJECT"
        if operation:
            code = f"ERR_OBJECT_{operation.upper()}"
        super().__init__(message, code=code)

class ObjectNotFoundError(ObjectError):
    """The addressed object does not exist."""
    def __init__(self, key: str, operation: str = None):
        self.key = key
        super().__init__(f"Object does not exist: {key}", operation=operation)

class ConfigurationError(ObjectStoreError):
    """Configuration or credential error."""
    def __init__(self, message: str):
        super().__init__(message, code="ERR_CONFIG")
