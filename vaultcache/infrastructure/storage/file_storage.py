"""File-based implementation of the Storage interface.

One JSON record per (prefix, key) pair, named ``<prefix><md5(key)>.cache``
under a single root directory. Writes go to an exclusive temp file in the
same directory and are moved into place with os.replace, so readers never
see a partially written record.
"""

import base64
import binascii
import glob
import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Optional, Union

# Domain Layer Imports
from vaultcache.domain.events.cache_events import (
    CorruptEntryDiscarded,
    DomainEvent,
    EntryExpired,
    EventListener,
)
from vaultcache.domain.exceptions import (
    CacheStorageError,
    DecryptionFailedError,
    NoKeyAvailableError,
    PayloadDecodeError,
)
from vaultcache.domain.interfaces.key_provider import KeyProvider
from vaultcache.domain.interfaces.serializer import PayloadSerializer
from vaultcache.domain.interfaces.storage import Storage
from vaultcache.domain.models.common import (
    CACHE_FILE_SUFFIX,
    REQUIRED_RECORD_FIELDS,
    StoredRecord,
)

# Core / Infrastructure Imports
from vaultcache.core.item import Item, validate_prefix
from vaultcache.infrastructure.config.security import SecurityConfig
from vaultcache.infrastructure.crypto.key_manager import KeyManager
from vaultcache.infrastructure.serialization.serializers import PickleSerializer

logger = logging.getLogger(__name__)

TEMP_FILE_SUFFIX = '.tmp'
# glob pattern for the 32 hex characters of an md5 digest
HEX_DIGEST_PATTERN = '[0-9a-f]' * 32


class FileStorage(Storage):
    """Stores cache items as individual files under one directory."""

    def __init__(
        self,
        storage_path: Union[str, Path],
        key_provider: Optional[KeyProvider] = None,
        serializer: Optional[PayloadSerializer] = None,
        on_event: Optional[EventListener] = None,
    ):
        """Initializes the file storage.

        Args:
            storage_path: Root directory. Created on the first store if missing.
            key_provider: Source of the encryption key for items read back.
            serializer: Payload codec handed to items read back.
            on_event: Optional listener for expiry and corruption events.

        Raises:
            CacheStorageError: If the path is empty, is not a writable directory,
                or cannot be created because its parent is not writable.
        """
        super().__init__()
        self.key_provider = key_provider or KeyManager()
        self.serializer = serializer or PickleSerializer()
        self.on_event = on_event
        self._cache_dir = Path()
        self.path = storage_path
        logger.info(f"FileStorage initialized at: {self._cache_dir}")

    @property
    def path(self) -> Path:
        return self._cache_dir

    @path.setter
    def path(self, storage_path: Union[str, Path]) -> None:
        if not str(storage_path).strip():
            raise CacheStorageError("Cache path cannot be empty")

        path = Path(storage_path).expanduser()
        if path.exists():
            if not path.is_dir():
                raise CacheStorageError(f"Cache path exists but is not a directory: {path}")
            if not os.access(path, os.W_OK):
                raise CacheStorageError(f"Cache path is not writable: {path}")
        else:
            # Nearest existing ancestor must be writable so the tree can be created later
            parent = path.parent
            while not parent.exists() and parent != parent.parent:
                parent = parent.parent
            if not os.access(parent, os.W_OK):
                raise CacheStorageError(
                    f"Cannot create cache directory, parent directory is not writable: {parent}"
                )
        self._cache_dir = path

    def get_cache_file(self, key: str, prefix: Optional[str] = None) -> Path:
        """Returns the file a key is stored in: <root>/<prefix><md5(key)>.cache."""
        digest = hashlib.md5(key.encode('utf-8')).hexdigest()
        return self._cache_dir / f"{validate_prefix(prefix)}{digest}{CACHE_FILE_SUFFIX}"

    # --- Storage Interface Implementation ---

    def store(self, item: Item) -> None:
        """Writes an item atomically. Items with a TTL of zero or less are skipped."""
        if item.ttl <= 0:
            logger.debug(f"Not storing key '{item.key}': TTL is {item.ttl}")
            return

        security_config = item.security_config
        file_path = self.get_cache_file(item.key, item.prefix)
        payload = item.get_data_encrypted()
        encrypted = security_config.encryption_enabled

        record: StoredRecord = {
            'data': payload.decode('ascii') if encrypted else base64.b64encode(payload).decode('ascii'),
            'created_at': item.created_at,
            'ttl': item.ttl,
            'expires': item.expiry_time,
            'key': item.key,
            'encrypted': encrypted,
        }
        self._ensure_directory(security_config)
        self._write_atomic(file_path, json.dumps(record).encode('utf-8'), security_config.file_permissions)
        logger.debug(f"Stored key '{item.key}' in {file_path.name} (encrypted={encrypted})")

    def read(self, key: str, prefix: Optional[str] = None) -> Optional[Any]:
        """Returns the payload of a live item.

        Entries that fail to decrypt or decode are deleted and reported as a
        miss. An encrypted entry with no key configured is a miss but is kept,
        so it becomes readable again once the key is restored.
        """
        item = self.read_item(key, prefix)
        if item is None:
            return None

        try:
            return item.get_data_decrypted()
        except NoKeyAvailableError:
            logger.warning(f"Cannot decrypt key '{key}': no encryption key configured. Treating as a miss.")
            return None
        except (DecryptionFailedError, PayloadDecodeError) as e:
            logger.warning(f"Discarding unreadable cache entry '{key}': {e}")
            self.delete(key, prefix)
            self._emit(CorruptEntryDiscarded(key=key, prefix=prefix or '', reason=str(e)))
            return None

    def read_item(self, key: str, prefix: Optional[str] = None) -> Optional[Item]:
        """Rebuilds the stored item without decrypting its payload.

        Raises:
            CacheStorageError: If the file cannot be read or is not a valid record.
        """
        file_path = self.get_cache_file(key, prefix)
        record = self._load_record(file_path)
        if record is None:
            return None

        if time.time() > record['expires']:
            logger.debug(f"Cache entry '{key}' expired at {record['expires']}. Removing file.")
            self.delete(key, prefix)
            self._emit(EntryExpired(key=key, prefix=prefix or '', expired_at=record['expires']))
            return None

        was_encrypted = record['encrypted']
        encryption_key = self.key_provider.resolve_key()
        security_config = SecurityConfig.from_environment()
        if not was_encrypted or encryption_key is None:
            security_config = security_config.without_encryption()

        try:
            data = record['data'].encode('ascii') if was_encrypted else base64.b64decode(record['data'], validate=True)
        except (UnicodeEncodeError, binascii.Error, ValueError) as e:
            raise CacheStorageError(f"Failed to decode cache data from: {file_path}") from e

        item = Item(
            key,
            data,
            record['ttl'],
            encryption_key or '',
            security_config=security_config,
            key_provider=self.key_provider,
            serializer=self.serializer,
            created_at=record['created_at'],
        )
        item.prefix = prefix
        item.data_is_encrypted = was_encrypted
        item.data_from_storage = True
        return item

    def has(self, key: str, prefix: Optional[str] = None) -> bool:
        return self.read(key, prefix) is not None

    def delete(self, key: str, prefix: Optional[str] = None) -> None:
        """Removes the file of a key; a missing file is not an error."""
        file_path = self.get_cache_file(key, prefix)
        try:
            file_path.unlink()
            logger.debug(f"Deleted cache file {file_path.name} for key '{key}'")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CacheStorageError(f"Failed to delete cache file: {file_path}") from e

    def flush(self, prefix: Optional[str] = None) -> None:
        """Removes every cache file stored under prefix.

        Only names of the exact form <prefix><md5>.cache match, so flushing
        "user" leaves "user_admin" entries alone. An empty or None prefix
        removes every cache file in the directory.
        """
        prefix = validate_prefix(prefix)
        name_pattern = glob.escape(prefix) + HEX_DIGEST_PATTERN if prefix else '*'
        pattern = os.path.join(glob.escape(str(self._cache_dir)), name_pattern + CACHE_FILE_SUFFIX)
        removed = 0
        for file_name in glob.glob(pattern):
            try:
                os.unlink(file_name)
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                raise CacheStorageError(f"Failed to delete cache file during flush: {file_name}") from e
        logger.info(f"Flushed {removed} cache file(s) with prefix '{prefix}' from {self._cache_dir}")

    # --- Helpers ---

    def _ensure_directory(self, security_config: SecurityConfig) -> None:
        if self._cache_dir.is_dir():
            return
        try:
            os.makedirs(self._cache_dir, mode=security_config.directory_permissions, exist_ok=True)
            # makedirs applies the umask; set the leaf's bits explicitly
            os.chmod(self._cache_dir, security_config.directory_permissions)
        except OSError as e:
            raise CacheStorageError(f"Failed to create cache directory: '{self._cache_dir}'") from e
        logger.info(f"Created cache directory {self._cache_dir} "
                    f"(mode {oct(security_config.directory_permissions)})")

    def _write_atomic(self, file_path: Path, content: bytes, permissions: int) -> None:
        try:
            fd, temp_name = tempfile.mkstemp(
                dir=self._cache_dir, prefix=f".{file_path.name}.", suffix=TEMP_FILE_SUFFIX
            )
        except OSError as e:
            raise CacheStorageError(f"Failed to write cache file: {file_path}") from e

        try:
            with os.fdopen(fd, 'wb') as temp_file:
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.chmod(temp_name, permissions)
            os.replace(temp_name, file_path)
        except OSError as e:
            try:
                os.unlink(temp_name)
            except OSError:
                logger.warning(f"Could not remove temp file {temp_name}")
            raise CacheStorageError(f"Failed to create cache file: {file_path}") from e

    def _load_record(self, file_path: Path) -> Optional[StoredRecord]:
        try:
            content = file_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheStorageError(f"Failed to read cache file: {file_path}") from e

        try:
            record = json.loads(content.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheStorageError(f"Failed to unserialize cache data from: {file_path}") from e

        if not isinstance(record, dict) or any(field not in record for field in REQUIRED_RECORD_FIELDS):
            raise CacheStorageError(f"Failed to unserialize cache data from: {file_path}")
        if not isinstance(record['data'], str) or not all(
            isinstance(record[field], int) and not isinstance(record[field], bool)
            for field in ('created_at', 'ttl', 'expires')
        ) or not isinstance(record.get('encrypted', True), bool):
            raise CacheStorageError(f"Malformed cache record in: {file_path}")

        # Records written before the flag existed were always encrypted
        record.setdefault('encrypted', True)
        return record

    def _emit(self, event: DomainEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)
