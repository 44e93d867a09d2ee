"""The cache entry.

An Item owns its key, payload, TTL, creation time and prefix together with
the security settings used to encrypt its payload. Items built by a caller
hold the live value; items rebuilt by a storage backend hold the stored
bytes until get_data_decrypted() is called.
"""

import logging
import os
import time
from typing import Any, Optional

from vaultcache.domain.exceptions import (
    InvalidCachePrefixError,
    InvalidEncryptionKeyError,
    NoKeyAvailableError,
)
from vaultcache.domain.interfaces.key_provider import KeyProvider
from vaultcache.domain.interfaces.serializer import PayloadSerializer
from vaultcache.infrastructure.config.security import SecurityConfig
from vaultcache.infrastructure.crypto import ciphers
from vaultcache.infrastructure.crypto.key_manager import KeyManager, is_valid_key
from vaultcache.infrastructure.serialization.serializers import PickleSerializer

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60


def validate_prefix(prefix: Optional[str]) -> str:
    """Returns the stripped prefix.

    Prefixes become part of a file name, so they may not contain path
    separators or "..".

    Raises:
        InvalidCachePrefixError: If the prefix could point outside the cache directory.
    """
    prefix = (prefix or '').strip()
    separators = [sep for sep in (os.sep, os.altsep, '/') if sep]
    if any(sep in prefix for sep in separators):
        raise InvalidCachePrefixError(prefix, 'Cache prefix cannot contain path separators')
    if '..' in prefix:
        raise InvalidCachePrefixError(prefix, "Cache prefix cannot contain '..'")
    return prefix


class Item:
    """A single cache entry and its crypto operations."""

    def __init__(
        self,
        key: str = 'item',
        data: Any = '',
        ttl: int = DEFAULT_TTL_SECONDS,
        secret_key: str = '',
        *,
        security_config: Optional[SecurityConfig] = None,
        key_provider: Optional[KeyProvider] = None,
        serializer: Optional[PayloadSerializer] = None,
        created_at: Optional[int] = None,
    ):
        """Creates an item.

        Args:
            key: The caller supplied cache key.
            data: The payload.
            ttl: Time to live in seconds. Negative values are ignored (TTL stays 0).
            secret_key: Optional 64-hex-character key used instead of the provider's.
            security_config: Settings snapshot; read from configuration when omitted.
            key_provider: Fallback source of the encryption key. A KeyManager
                reading CACHE_ENCRYPTION_KEY is created when omitted.
            serializer: Payload codec; pickle when omitted.
            created_at: Unix timestamp; now when omitted.

        Raises:
            InvalidEncryptionKeyError: If secret_key is non-empty and malformed.
        """
        self.security_config = security_config or SecurityConfig.from_environment()
        self.key_provider = key_provider or KeyManager()
        self.serializer = serializer or PickleSerializer()
        self.key = key
        self.data = data
        self._ttl = 0
        self.ttl = ttl
        self._created_at = int(time.time())
        if created_at is not None:
            self.created_at = created_at
        self._prefix = ''
        self.secret_key = secret_key
        self.data_is_encrypted = False
        self.data_from_storage = False

    def __repr__(self) -> str:
        return (f"Item(key={self.key!r}, prefix={self.prefix!r}, ttl={self.ttl}, "
                f"created_at={self.created_at}, encrypted={self.data_is_encrypted})")

    @staticmethod
    def generate_key() -> str:
        """Generates a random key suitable for secret_key."""
        return KeyManager.generate_key()

    # --- Attributes with validation ---

    @property
    def ttl(self) -> int:
        return self._ttl

    @ttl.setter
    def ttl(self, ttl: int) -> None:
        # Negative values keep the previous TTL.
        if ttl >= 0:
            self._ttl = int(ttl)
        else:
            logger.debug(f"Ignoring negative TTL {ttl} for key '{self.key}'")

    @property
    def created_at(self) -> int:
        return self._created_at

    @created_at.setter
    def created_at(self, timestamp: int) -> None:
        if timestamp > 0:
            self._created_at = int(timestamp)
        else:
            logger.debug(f"Ignoring non-positive creation time {timestamp} for key '{self.key}'")

    @property
    def prefix(self) -> str:
        return self._prefix

    @prefix.setter
    def prefix(self, prefix: Optional[str]) -> None:
        self._prefix = validate_prefix(prefix)

    @property
    def secret_key(self) -> str:
        return self._secret_key

    @secret_key.setter
    def secret_key(self, secret: str) -> None:
        if secret and not is_valid_key(secret):
            raise InvalidEncryptionKeyError('Invalid encryption key provided. Must be 64 hexadecimal characters.')
        self._secret_key = secret or ''

    @property
    def expiry_time(self) -> int:
        return self.created_at + self.ttl

    def get_expiry_time(self) -> int:
        return self.expiry_time

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (time.time() if now is None else now) > self.expiry_time

    # --- Payload encoding ---

    def get_data_encrypted(self) -> bytes:
        """Serializes the payload and encrypts it when encryption is enabled.

        Returns:
            The serialized payload, or base64(iv || ciphertext) as ASCII bytes.

        Raises:
            NoKeyAvailableError: If encryption is enabled and no key resolves.
            EncryptionFailedError: If the configured algorithm is unsupported.
            PayloadEncodeError: If the serializer rejects the payload.
        """
        serialized = self.serializer.dumps(self.data)
        if not self.security_config.encryption_enabled:
            return serialized
        return ciphers.encrypt(self.security_config.algorithm, self._effective_key(), serialized)

    def get_data_decrypted(self) -> Any:
        """Returns the payload in its original form.

        Raises:
            DecryptionFailedError: If stored ciphertext cannot be decrypted.
            NoKeyAvailableError: If the payload is encrypted and no key resolves.
            PayloadDecodeError: If the decrypted bytes cannot be deserialized.
        """
        if not self.data_is_encrypted:
            if self.data_from_storage:
                return self.serializer.loads(self.data)
            return self.data

        plaintext = ciphers.decrypt(self.security_config.algorithm, self._effective_key(), self.data)
        return self.serializer.loads(plaintext)

    def _effective_key(self) -> bytes:
        if self.secret_key:
            return bytes.fromhex(self.secret_key)
        encryption_key = self.key_provider.resolve_key()
        if encryption_key is None:
            raise NoKeyAvailableError(f"No valid encryption key available for item '{self.key}'")
        return bytes.fromhex(encryption_key)
