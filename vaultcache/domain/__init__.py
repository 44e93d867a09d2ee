"""Domain Layer: value objects, events, errors and ports.

Nothing in here touches the file system or a cipher; concrete behaviour
lives in the core and infrastructure layers.
"""
