"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that infrastructure components
must implement. Core logic depends on these interfaces, not concrete
implementations.
"""
