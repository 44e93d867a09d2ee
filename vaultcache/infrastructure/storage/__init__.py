"""Storage Implementation.

Provides concrete implementations for the Storage interface. Only the
file-based backend ships with the package.
Bounded Context: Cache Persistence
"""
