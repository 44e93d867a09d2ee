"""Interface for cache storage backends.

Defines the persistence contract used by the cache facade. Any conforming
implementation may replace the file backend transparently. The base class
also keeps a queue of deferred items that are written on commit().
"""

import abc
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from vaultcache.domain.exceptions import CacheError

if TYPE_CHECKING:
    from vaultcache.core.item import Item

logger = logging.getLogger(__name__)


class Storage(abc.ABC):
    """Abstract Base Class for cache persistence."""

    def __init__(self) -> None:
        self._deferred: Dict[Tuple[str, str], "Item"] = {}

    @abc.abstractmethod
    def store(self, item: "Item") -> None:
        """Persists an item. Items with a TTL of zero or less are ignored.

        Raises:
            CacheStorageError: If the item cannot be written.
        """
        pass

    @abc.abstractmethod
    def read(self, key: str, prefix: Optional[str]) -> Optional[Any]:
        """Returns the decrypted payload of a live item, or None."""
        pass

    @abc.abstractmethod
    def read_item(self, key: str, prefix: Optional[str]) -> Optional["Item"]:
        """Returns the stored item (payload still in stored form), or None."""
        pass

    @abc.abstractmethod
    def has(self, key: str, prefix: Optional[str]) -> bool:
        """Checks whether a live, readable item exists."""
        pass

    @abc.abstractmethod
    def delete(self, key: str, prefix: Optional[str] = None) -> None:
        """Removes an item. Removing a missing item is not an error."""
        pass

    @abc.abstractmethod
    def flush(self, prefix: Optional[str] = None) -> None:
        """Removes all items under a prefix, or every item when prefix is None."""
        pass

    # --- Deferred saves ---

    def save_deferred(self, item: "Item") -> bool:
        """Queues an item to be persisted by the next commit()."""
        self._deferred[(item.prefix, item.key)] = item
        logger.debug(f"Deferred save queued for key: {item.key}")
        return True

    def has_deferred(self, key: str, prefix: str = "") -> bool:
        return (prefix, key) in self._deferred

    def get_deferred_item(self, key: str, prefix: str = "") -> Optional["Item"]:
        """Returns a queued item, dropping it if it expired while waiting."""
        item = self._deferred.get((prefix, key))
        if item is None:
            return None
        if item.expiry_time < time.time():
            self.delete_deferred_item(key, prefix)
            return None
        return item

    def delete_deferred_item(self, key: str, prefix: str = "") -> None:
        self._deferred.pop((prefix, key), None)

    def clear_deferred_items(self) -> None:
        self._deferred.clear()

    def commit(self) -> bool:
        """Stores every deferred item.

        Items that fail to store stay queued.

        Returns:
            True if every queued item was stored, False otherwise.
        """
        saved = True
        for slot, item in list(self._deferred.items()):
            try:
                self.store(item)
            except CacheError as e:
                logger.error(f"Failed to commit deferred item '{item.key}': {e}")
                saved = False
                continue
            del self._deferred[slot]
        return saved
