"""Defines common Value Objects used across the cache.

These objects represent simple values like hex encoded encryption keys
and cipher tokens, plus the shape of a record written to disk.
"""

from typing import NewType, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity; at runtime they are plain str/bytes.
EncryptionKeyHex = NewType("EncryptionKeyHex", str)  # 256-bit key as 64 hex characters
CipherToken = NewType("CipherToken", bytes)      # base64(iv || ciphertext)

# === Limits ===
MAX_KEY_LENGTH = 250        # bytes, UTF-8 encoded
KEY_HEX_LENGTH = 64         # 32 bytes of key material
CACHE_FILE_SUFFIX = ".cache"

# --- Structured Data ---
class StoredRecord(TypedDict):
    """The JSON object persisted for every cache entry.

    ``data`` is ASCII text: the cipher token when ``encrypted`` is true,
    otherwise the base64 encoded serialized payload.
    """
    data: str
    created_at: int
    ttl: int
    expires: int
    key: str
    encrypted: bool

REQUIRED_RECORD_FIELDS = ("data", "created_at", "ttl", "expires", "key")
