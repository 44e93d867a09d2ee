"""Interface for encryption key providers.

A key provider is the single source of the master key used by items that
do not carry their own key.
"""

import abc
from typing import Optional

from vaultcache.domain.models.common import EncryptionKeyHex


class KeyProvider(abc.ABC):
    """Abstract Base Class for resolving the master encryption key."""

    @abc.abstractmethod
    def get_encryption_key(self) -> EncryptionKeyHex:
        """Returns the master key.

        Raises:
            NoKeyAvailableError: If no valid key is configured.
        """
        pass

    @abc.abstractmethod
    def resolve_key(self) -> Optional[EncryptionKeyHex]:
        """Returns the master key, or None when no valid key is configured."""
        pass
