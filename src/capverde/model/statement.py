"""
Statements exchanged between components: attestations and proofs.
"""
from dataclasses import dataclass
from typing import Tuple, Union

from .equation import Equation


@dataclass(frozen=True)
class Attest:
    """A component attests that a set of equations holds.

    Attributes:
        component: Name of the attesting component
        equations: Attested equations
    """
    component: str
    equations: Tuple[Equation, ...]

    @property
    def name(self) -> str:
        return str(self).replace(" ", "")

    def __str__(self) -> str:
        return f"{self.component} attests: [{', '.join(str(eq) for eq in self.equations)}]"


@dataclass(frozen=True)
class Proof:
    """A component proves a set of equations and attestations.

    Attributes:
        component: Name of the proving component
        items: Proven equations and nested attestations
    """
    component: str
    items: Tuple[Union[Equation, Attest], ...]

    @property
    def name(self) -> str:
        return str(self).replace(" ", "")

    @property
    def equations(self) -> Tuple[Equation, ...]:
        """Equations proven directly (not through a nested attestation)."""
        return tuple(item for item in self.items if isinstance(item, Equation))

    @property
    def attests(self) -> Tuple[Attest, ...]:
        return tuple(item for item in self.items if isinstance(item, Attest))

    def __str__(self) -> str:
        return f"{self.component} proves: [{', '.join(str(item) for item in self.items)}]"


Statement = Union[Attest, Proof]
