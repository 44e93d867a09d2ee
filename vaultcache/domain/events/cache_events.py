"""Domain Events related to cache entries and encryption.

Events are plain dataclasses. The cache facade logs them and hands them to
an optional listener so applications can audit security-relevant fallbacks.
"""

from dataclasses import dataclass, field
import time
from typing import Callable


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class EncryptionDowngraded(DomainEvent):
    """An entry was written unencrypted because no key could be resolved."""
    key: str
    prefix: str
    reason: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class CorruptEntryDiscarded(DomainEvent):
    """A stored entry could not be decrypted or decoded and was removed."""
    key: str
    prefix: str
    reason: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class EntryExpired(DomainEvent):
    """A read found an expired entry and removed it."""
    key: str
    prefix: str
    expired_at: int
    timestamp: float = field(default_factory=time.time)


EventListener = Callable[[DomainEvent], None]
