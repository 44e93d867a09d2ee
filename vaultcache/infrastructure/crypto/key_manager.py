"""Master encryption key management.

The key is read from a single environment variable and nowhere else: no key
files and no built-in defaults, so a cache is never silently encrypted with
a weak or guessable key.
"""

import logging
import os
import secrets
import string
import threading
from typing import Optional

from vaultcache.domain.exceptions import InvalidKeyFormatError, NoKeyAvailableError
from vaultcache.domain.interfaces.key_provider import KeyProvider
from vaultcache.domain.models.common import KEY_HEX_LENGTH, EncryptionKeyHex

logger = logging.getLogger(__name__)

DEFAULT_KEY_ENV_VAR = "CACHE_ENCRYPTION_KEY"
_HEX_DIGITS = frozenset(string.hexdigits)


def is_valid_key(key: Optional[str]) -> bool:
    """True when key is exactly 64 hexadecimal characters."""
    return isinstance(key, str) and len(key) == KEY_HEX_LENGTH and all(c in _HEX_DIGITS for c in key)


class KeyManager(KeyProvider):
    """Lazily loads and caches the master key for one process or one cache."""

    def __init__(self, env_var: str = DEFAULT_KEY_ENV_VAR):
        """Initializes the key manager.

        Args:
            env_var: Name of the environment variable holding the hex key.
        """
        self.env_var = env_var
        self._key: Optional[EncryptionKeyHex] = None
        self._lock = threading.Lock()

    def get_encryption_key(self) -> EncryptionKeyHex:
        """Returns the cached key, loading it from the environment on first use.

        Raises:
            NoKeyAvailableError: If the variable is unset or malformed.
        """
        with self._lock:
            if self._key is None:
                self._key = self._load_key()
            return self._key

    def resolve_key(self) -> Optional[EncryptionKeyHex]:
        try:
            return self.get_encryption_key()
        except NoKeyAvailableError:
            return None

    def set_encryption_key(self, key: str) -> None:
        """Overrides the cached key.

        Raises:
            InvalidKeyFormatError: If key is not 64 hexadecimal characters.
        """
        if not is_valid_key(key):
            raise InvalidKeyFormatError("Invalid encryption key. Must be 64 hexadecimal characters.")
        with self._lock:
            self._key = EncryptionKeyHex(key)
        logger.debug("Encryption key set explicitly.")

    @staticmethod
    def generate_key() -> EncryptionKeyHex:
        """Generates a random 256-bit key encoded as 64 hex characters."""
        return EncryptionKeyHex(secrets.token_hex(KEY_HEX_LENGTH // 2))

    @staticmethod
    def is_valid_key(key: Optional[str]) -> bool:
        return is_valid_key(key)

    def clear_cache(self) -> None:
        """Forgets the cached key so the next access reads the environment again."""
        with self._lock:
            self._key = None
        logger.debug("Encryption key cache cleared.")

    def _load_key(self) -> EncryptionKeyHex:
        key = os.environ.get(self.env_var, '').strip()
        if key and is_valid_key(key):
            logger.debug(f"Encryption key loaded from ${self.env_var}.")
            return EncryptionKeyHex(key)
        if key:
            logger.warning(f"${self.env_var} is set but is not a 64-character hexadecimal key.")
        raise NoKeyAvailableError(
            f"No valid encryption key found. Set the {self.env_var} environment variable "
            f"to a {KEY_HEX_LENGTH}-character hexadecimal key."
        )
