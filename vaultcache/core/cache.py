"""Cache facade.

Validates keys, implements read-through (get with a generator) and
write-through (set), and decides whether an entry is stored encrypted.
Encryption problems never fail a write: when no key can be resolved the
entry is stored unencrypted and an EncryptionDowngraded event is emitted.
"""

import logging
from typing import Any, Callable, Optional, Sequence

# Domain Layer Imports
from vaultcache.domain.events.cache_events import (
    CorruptEntryDiscarded,
    DomainEvent,
    EncryptionDowngraded,
    EventListener,
)
from vaultcache.domain.exceptions import (
    CacheDriverError,
    DecryptionFailedError,
    InvalidCacheKeyError,
    NoKeyAvailableError,
    PayloadDecodeError,
)
from vaultcache.domain.interfaces.key_provider import KeyProvider
from vaultcache.domain.interfaces.storage import Storage
from vaultcache.domain.models.common import MAX_KEY_LENGTH

# Core / Infrastructure Imports
from vaultcache.core.item import DEFAULT_TTL_SECONDS, Item, validate_prefix
from vaultcache.infrastructure.config.security import SecurityConfig
from vaultcache.infrastructure.crypto.key_manager import KeyManager

logger = logging.getLogger(__name__)


def validate_key(key: str) -> None:
    """Checks a cache key.

    Raises:
        InvalidCacheKeyError: If the key is empty or whitespace only, longer
            than 250 bytes, or contains ASCII control characters.
    """
    if not isinstance(key, str) or not key.strip():
        raise InvalidCacheKeyError(key if isinstance(key, str) else '', 'Cache key cannot be empty')

    if len(key.encode('utf-8')) > MAX_KEY_LENGTH:
        raise InvalidCacheKeyError(key, f'Cache key exceeds maximum length of {MAX_KEY_LENGTH} bytes')

    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in key):
        raise InvalidCacheKeyError(key, 'Cache key contains invalid control characters')


class Cache:
    """Read-through/write-through cache over a Storage driver."""

    def __init__(
        self,
        driver: Storage,
        enabled: bool = True,
        prefix: str = '',
        *,
        key_provider: Optional[KeyProvider] = None,
        on_event: Optional[EventListener] = None,
    ):
        """Initializes the cache.

        Args:
            driver: The storage backend.
            enabled: When False, generated values are returned but not stored.
            prefix: Namespace for every key of this instance.
            key_provider: Source of the encryption key. A KeyManager reading
                CACHE_ENCRYPTION_KEY is created when omitted.
            on_event: Optional listener for security-relevant events.

        Raises:
            InvalidCachePrefixError: If prefix contains path separators or "..".
            CacheDriverError: If driver is not a Storage.
        """
        self.driver = driver
        self.enabled = enabled
        self._prefix = validate_prefix(prefix)
        self.key_provider = key_provider or getattr(driver, 'key_provider', None) or KeyManager()
        self.on_event = on_event
        logger.debug(f"Cache initialized: driver={type(driver).__name__}, enabled={enabled}, prefix='{self._prefix}'")

    @classmethod
    def create(cls, driver: Storage, enabled: bool = True, prefix: str = '', **kwargs: Any) -> "Cache":
        """Factory kept for callers that prefer a named constructor."""
        return cls(driver, enabled, prefix, **kwargs)

    # --- Attributes ---

    @property
    def driver(self) -> Storage:
        return self._driver

    @driver.setter
    def driver(self, driver: Storage) -> None:
        if not isinstance(driver, Storage):
            raise CacheDriverError(
                type(driver).__name__, 'set_driver',
                TypeError('Driver must implement the Storage interface'),
            )
        self._driver = driver

    @property
    def prefix(self) -> str:
        return self._prefix

    def with_prefix(self, prefix: str) -> "Cache":
        """Returns a cache sharing this one's driver and settings under another prefix."""
        return Cache(
            self._driver,
            self.enabled,
            prefix,
            key_provider=self.key_provider,
            on_event=self.on_event,
        )

    # --- Operations ---

    def get(
        self,
        key: str,
        generator: Optional[Callable[..., Any]] = None,
        ttl: int = DEFAULT_TTL_SECONDS,
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        """Returns a cached value, generating and storing it on a miss.

        Args:
            key: The cache key.
            generator: Called with *params on a miss. Its exceptions propagate.
            ttl: Time to live of a generated value, in seconds.
            params: Positional arguments for the generator.

        Returns:
            The cached or generated value, or None on a miss without a generator.
        """
        validate_key(key)

        data = self._driver.read(key, self._prefix)
        if data is not None:
            logger.debug(f"Cache hit for key: {key}")
            return data

        if generator is None:
            logger.debug(f"Cache miss for key: {key} (no generator)")
            return None

        logger.debug(f"Cache miss for key: {key}. Invoking generator.")
        new_data = generator(*(params or ()))

        if self.enabled:
            self._store_item(key, new_data, ttl)

        return new_data

    def get_item(self, key: str) -> Optional[Item]:
        """Returns the stored item (payload not yet decrypted), or None."""
        validate_key(key)
        return self._driver.read_item(key, self._prefix)

    def has(self, key: str) -> bool:
        validate_key(key)
        return self._driver.has(key, self._prefix)

    def set(self, key: str, data: Any, ttl: int = DEFAULT_TTL_SECONDS, override: bool = False) -> bool:
        """Stores a value if the key is absent or expired, or if override is True.

        Returns:
            True if the value was written, False if an existing entry was kept.
        """
        validate_key(key)

        if override or not self._driver.has(key, self._prefix):
            self._store_item(key, data, ttl)
            return True

        logger.debug(f"Key '{key}' already cached; not overriding.")
        return False

    def set_ttl(self, key: str, ttl: int) -> bool:
        """Rewrites an entry with a new TTL, keeping its original creation time.

        A TTL of zero or less expires the entry immediately.

        Returns:
            True if the entry existed and was updated, False otherwise.
        """
        validate_key(key)

        item = self._driver.read_item(key, self._prefix)
        if item is None:
            return False

        try:
            data = item.get_data_decrypted()
        except NoKeyAvailableError:
            logger.warning(f"Cannot update TTL of '{key}': entry is encrypted and no key is configured.")
            return False
        except (DecryptionFailedError, PayloadDecodeError) as e:
            logger.warning(f"Discarding unreadable cache entry '{key}' while updating TTL: {e}")
            self._driver.delete(key, self._prefix)
            self._emit(CorruptEntryDiscarded(key=key, prefix=self._prefix, reason=str(e)))
            return False

        if ttl <= 0:
            self._driver.delete(key, self._prefix)
            logger.debug(f"TTL of '{key}' set to {ttl}; entry removed.")
            return True

        self._store_item(key, data, ttl, created_at=item.created_at)
        return True

    def delete(self, key: str) -> None:
        validate_key(key)
        self._driver.delete(key, self._prefix)

    def flush(self) -> None:
        """Removes every entry under this cache's prefix."""
        self._driver.flush(self._prefix)

    # --- Helpers ---

    def _store_item(self, key: str, data: Any, ttl: int, created_at: Optional[int] = None) -> None:
        security_config = SecurityConfig.from_environment()
        secret_key = ''
        if security_config.encryption_enabled:
            secret_key = self.key_provider.resolve_key()
            if secret_key is None:
                reason = 'no valid encryption key available'
                logger.warning(f"Storing key '{key}' unencrypted: {reason}")
                self._emit(EncryptionDowngraded(key=key, prefix=self._prefix, reason=reason))
                security_config = security_config.without_encryption()
                secret_key = ''

        item = Item(
            key,
            data,
            ttl,
            secret_key,
            security_config=security_config,
            key_provider=self.key_provider,
            serializer=getattr(self._driver, 'serializer', None),
            created_at=created_at,
        )
        item.prefix = self._prefix
        self._driver.store(item)

    def _emit(self, event: DomainEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)
