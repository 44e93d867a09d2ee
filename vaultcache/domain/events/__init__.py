"""Domain events emitted by the cache facade and storage backends."""
