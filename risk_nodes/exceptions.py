"""
Exception types raised by the risk node service and its stores.
"""


class RiskNodeError(Exception):
    """Base class for all risk node errors."""


class NodeNotFoundError(RiskNodeError):
    """Raised when a lookup that a dependent query relies on finds no node."""

    def __init__(self, cnn: str):
        self.cnn = cnn
        super().__init__(f"No node with CNN: {cnn} found.")


class StoreError(RiskNodeError):
    """Failure reported by a risk node store (connectivity, validation or query)."""
