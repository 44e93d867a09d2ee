"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the cache to the outside world (file system, ciphers, environment,
console) by implementing the interfaces defined in the domain layer.
"""
