"""
Relations between components: trust and composition.
"""
from dataclasses import dataclass
from typing import Iterable, Tuple

from ..model.variable import Variable


@dataclass(frozen=True)
class Trust:
    """``truster`` accepts attestations of ``trustee``.

    Attributes:
        truster: Trusting component
        trustee: Trusted component
        variables: Scope of the trust; empty means blind trust
    """
    truster: str
    trustee: str
    variables: Tuple[Variable, ...] = ()

    @property
    def is_blind(self) -> bool:
        return not self.variables

    def covers(self, truster: str, trustee: str, variables: Iterable[Variable] = ()) -> bool:
        """Check whether this relation grants ``truster`` trust in ``trustee``
        for all of ``variables``."""
        if self.truster != truster or self.trustee != trustee:
            return False
        if self.is_blind:
            return True
        return all(var in self.variables for var in variables)

    def __str__(self) -> str:
        if self.is_blind:
            return f"{self.truster} blindly trusts {self.trustee}"
        scope = ", ".join(str(var) for var in self.variables)
        return f"{self.truster} trusts {self.trustee} with [{scope}]"


@dataclass(frozen=True)
class Composition:
    """``container`` is composed of ``component``; whatever the container
    comes to possess, the component possesses too."""
    container: str
    component: str

    def __str__(self) -> str:
        return f"{self.container} is composed of {self.component}"
