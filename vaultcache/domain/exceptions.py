"""Error taxonomy for the cache.

Every error raised on purpose by vaultcache derives from CacheError so
callers can catch the whole family at once. Errors about malformed keys also
derive from ValueError, matching what Python callers expect for bad input.
"""

from typing import Optional


class CacheError(Exception):
    """Base class for all cache errors."""


class InvalidCacheKeyError(CacheError, ValueError):
    """Raised when a cache key is empty, too long or contains control characters."""

    def __init__(self, key: str = "", reason: str = ""):
        self.key = key
        self.reason = reason
        message = "Invalid cache key"
        if key:
            message += f": '{key}'"
        if reason:
            message += f" - {reason}"
        super().__init__(message)


class InvalidCachePrefixError(CacheError, ValueError):
    """Raised when a prefix could escape the cache directory."""

    def __init__(self, prefix: str = "", reason: str = ""):
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"Invalid cache prefix: '{prefix}'" + (f" - {reason}" if reason else ""))


class NoKeyAvailableError(CacheError):
    """Raised when encryption is required but no valid key can be resolved."""


class InvalidKeyFormatError(CacheError, ValueError):
    """Raised when a key handed to the key manager is not 64 hex characters."""


class InvalidEncryptionKeyError(CacheError, ValueError):
    """Raised when an item is constructed with a malformed secret key."""


class CacheStorageError(CacheError):
    """Raised on file system failures and unreadable cache records."""

    def __init__(self, message: str = "Cache storage operation failed"):
        super().__init__(message)


class EncryptionFailedError(CacheError):
    """Raised when a payload cannot be encrypted (e.g. unknown algorithm)."""


class DecryptionFailedError(CacheError):
    """Raised when stored ciphertext cannot be turned back into plaintext."""


class PayloadDecodeError(CacheError):
    """Raised when serialized payload bytes cannot be decoded into a value."""


class PayloadEncodeError(CacheError):
    """Raised when a value cannot be serialized by the configured codec."""


class CacheDriverError(CacheError):
    """Raised when an object that is not a Storage is used as a cache driver."""

    def __init__(self, driver_name: str = "", operation: str = "", cause: Optional[Exception] = None):
        self.driver_name = driver_name
        self.operation = operation
        message = "Cache driver error"
        if driver_name:
            message += f" in driver '{driver_name}'"
        if operation:
            message += f" during operation '{operation}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
