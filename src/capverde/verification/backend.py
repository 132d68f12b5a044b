"""
Abstract interface for property verification backends.
"""
from typing import Protocol

from ..properties.property import Property


class VerifierBackend(Protocol):
    """Protocol shared by all property oracles.

    The bottom-up rule engine implements it directly; solver-based oracles
    fed with the same architecture facts can be swapped in behind it.
    """

    name: str

    def verify(self, prop: Property) -> bool:
        """Decide whether a property holds for the architecture.

        Args:
            prop: Property to verify

        Returns:
            True if the property could be established
        """
        ...
