"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the Cache facade. Every handler returns True on success so the CLI
can map failures to a non-zero exit code.
"""

import logging

# Core Imports
from vaultcache.core.cache import Cache

# Domain Layer Imports
from vaultcache.domain.exceptions import CacheError
from vaultcache.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

class CommandHandler:
    """Handles incoming commands and delegates to the cache."""

    def __init__(self, cache: Cache, ui: UserInterface):
        """Initializes the CommandHandler with the cache and the UI."""
        self.cache = cache
        self.ui = ui

    def handle_get(self, key: str) -> bool:
        logger.info(f"Handling 'get' command for key: {key}")
        try:
            value = self.cache.get(key)
        except CacheError as e:
            return self._fail("Read", e)

        if value is None:
            self.ui.display_warning(f"No cached value for '{key}'.")
            return False
        self.ui.display_output(str(value))
        return True

    def handle_set(self, key: str, value: str, ttl: int, override: bool) -> bool:
        logger.info(f"Handling 'set' command for key: {key} (ttl={ttl}, override={override})")
        try:
            written = self.cache.set(key, value, ttl, override)
        except CacheError as e:
            return self._fail("Write", e)

        if not written:
            self.ui.display_warning(f"'{key}' is already cached. Use --override to replace it.")
            return False
        if ttl <= 0:
            self.ui.display_warning(f"TTL is {ttl}; '{key}' was not persisted.")
            return True
        self.ui.display_info(f"Cached '{key}' for {ttl} seconds.")
        return True

    def handle_delete(self, key: str) -> bool:
        logger.info(f"Handling 'delete' command for key: {key}")
        try:
            self.cache.delete(key)
        except CacheError as e:
            return self._fail("Delete", e)
        self.ui.display_info(f"Deleted '{key}'.")
        return True

    def handle_flush(self) -> bool:
        prefix = self.cache.prefix
        logger.info(f"Handling 'flush' command for prefix: '{prefix}'")
        try:
            self.cache.flush()
        except CacheError as e:
            return self._fail("Flush", e)
        scope = f"prefix '{prefix}'" if prefix else "all prefixes"
        self.ui.display_info(f"Flushed cache entries for {scope}.")
        return True

    def handle_set_ttl(self, key: str, ttl: int) -> bool:
        logger.info(f"Handling 'ttl' command for key: {key} (ttl={ttl})")
        try:
            updated = self.cache.set_ttl(key, ttl)
        except CacheError as e:
            return self._fail("TTL update", e)

        if not updated:
            self.ui.display_warning(f"No cached value for '{key}'.")
            return False
        self.ui.display_info(f"TTL of '{key}' set to {ttl} seconds.")
        return True

    def handle_inspect(self, key: str) -> bool:
        """Shows the metadata of an entry without printing its value."""
        logger.info(f"Handling 'inspect' command for key: {key}")
        try:
            item = self.cache.get_item(key)
        except CacheError as e:
            return self._fail("Inspect", e)

        if item is None:
            self.ui.display_warning(f"No cached value for '{key}'.")
            return False
        self.ui.display_details(f"Cache entry '{key}'", {
            'key': item.key,
            'prefix': item.prefix or '(none)',
            'ttl': item.ttl,
            'created_at': item.created_at,
            'expires': item.expiry_time,
            'encrypted': item.data_is_encrypted,
            'algorithm': item.security_config.algorithm if item.data_is_encrypted else '-',
        })
        return True

    def _fail(self, action: str, error: CacheError) -> bool:
        logger.error(f"{action} failed: {error}")
        self.ui.display_error(f"{action} failed: {error}")
        return False
