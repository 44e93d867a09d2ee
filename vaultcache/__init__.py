"""vaultcache: a file-backed TTL cache with optional per-item encryption.

The public entry points are re-exported here so callers can write
``from vaultcache import Cache, FileStorage, KeyManager``.
"""

from vaultcache.core.cache import Cache, validate_key
from vaultcache.core.item import Item, validate_prefix
from vaultcache.domain.exceptions import (
    CacheDriverError,
    CacheError,
    CacheStorageError,
    DecryptionFailedError,
    EncryptionFailedError,
    InvalidCacheKeyError,
    InvalidCachePrefixError,
    InvalidEncryptionKeyError,
    InvalidKeyFormatError,
    NoKeyAvailableError,
    PayloadDecodeError,
    PayloadEncodeError,
)
from vaultcache.domain.interfaces.storage import Storage
from vaultcache.infrastructure.config.security import SecurityConfig
from vaultcache.infrastructure.crypto.key_manager import KeyManager
from vaultcache.infrastructure.storage.file_storage import FileStorage

__version__ = "1.0.0"

__all__ = [
    "Cache",
    "CacheDriverError",
    "CacheError",
    "CacheStorageError",
    "DecryptionFailedError",
    "EncryptionFailedError",
    "FileStorage",
    "InvalidCacheKeyError",
    "InvalidCachePrefixError",
    "InvalidEncryptionKeyError",
    "InvalidKeyFormatError",
    "Item",
    "KeyManager",
    "NoKeyAvailableError",
    "PayloadDecodeError",
    "PayloadEncodeError",
    "SecurityConfig",
    "Storage",
    "validate_key",
    "validate_prefix",
]
