"""Security settings attached to every cache item.

A SecurityConfig is a snapshot: it is read from configuration once when it
is created and never changes afterwards. Variants (for example with
encryption turned off for a single read) are derived copies.
"""

import dataclasses
import logging
from dataclasses import dataclass

from vaultcache.infrastructure.config.settings import (
    get_bool_config,
    get_raw_config,
    parse_octal,
)

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "aes-256-cbc"
DEFAULT_FILE_PERMISSIONS = 0o600
DEFAULT_DIRECTORY_PERMISSIONS = 0o700


@dataclass(frozen=True)
class SecurityConfig:
    """Encryption flag, cipher name and permission bits for cache files."""
    encryption_enabled: bool = True
    algorithm: str = DEFAULT_ALGORITHM
    file_permissions: int = DEFAULT_FILE_PERMISSIONS
    directory_permissions: int = DEFAULT_DIRECTORY_PERMISSIONS

    @classmethod
    def from_environment(cls) -> "SecurityConfig":
        """Builds a snapshot from CACHE_ENCRYPTION_ENABLED, CACHE_ENCRYPTION_ALGORITHM,
        CACHE_FILE_PERMISSIONS and CACHE_DIR_PERMISSIONS."""
        algorithm = (get_raw_config('cache_encryption_algorithm') or DEFAULT_ALGORITHM).strip().lower()
        return cls(
            encryption_enabled=get_bool_config('cache_encryption_enabled', True),
            algorithm=algorithm or DEFAULT_ALGORITHM,
            file_permissions=parse_octal(
                get_raw_config('cache_file_permissions', '600'), DEFAULT_FILE_PERMISSIONS
            ),
            directory_permissions=parse_octal(
                get_raw_config('cache_dir_permissions', '700'), DEFAULT_DIRECTORY_PERMISSIONS
            ),
        )

    def without_encryption(self) -> "SecurityConfig":
        """Returns a copy of this snapshot with encryption turned off."""
        return dataclasses.replace(self, encryption_enabled=False)

    def with_algorithm(self, algorithm: str) -> "SecurityConfig":
        return dataclasses.replace(self, algorithm=algorithm.strip().lower())
