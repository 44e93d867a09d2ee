"""Key management and symmetric ciphers.

Bounded Context: Encryption at rest
"""
