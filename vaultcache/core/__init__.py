"""Core Layer: the cache entry and the cache facade.

Coordinates key validation, read-through/write-through and encryption
fallback. Depends on domain interfaces; concrete adapters are injected.
"""
