"""
Actions performed by components.

Every action variant is a frozen dataclass carrying only the fields its kind
needs. Components are referenced by name.
"""
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple, Union

from ..model.equation import Equation
from ..model.statement import Attest, Proof, Statement
from ..model.variable import Variable


class ActionType(Enum):
    """Action kinds, declared in the priority order used to re-sort actions
    during the consistency search."""
    HAS = "has"
    COMPUTE = "compute"
    RECEIVE = "receive"
    CHECK = "check"
    VERIF_P = "verif_p"
    VERIF_A = "verif_a"
    DELETE = "delete"
    TRUST = "trust"

    @property
    def priority(self) -> int:
        return list(ActionType).index(self)


def _join(items) -> str:
    return "[" + ", ".join(str(item) for item in items) + "]"


@dataclass(frozen=True)
class Has:
    """``component`` possesses ``variable`` from the start."""
    kind: ClassVar[ActionType] = ActionType.HAS
    component: str
    variable: Variable

    def __str__(self) -> str:
        return f"Has_{self.component}({self.variable})"


@dataclass(frozen=True)
class Compute:
    """``component`` computes the left-hand side of ``equation``."""
    kind: ClassVar[ActionType] = ActionType.COMPUTE
    component: str
    equation: Equation

    def __str__(self) -> str:
        return f"Compute_{self.component}({self.equation})"


@dataclass(frozen=True)
class Receive:
    """``component`` receives statements and variables from ``partner``.

    Attributes:
        component: Receiving component
        partner: Sending component
        statements: Received attestations and proofs
        variables: Received variables
    """
    kind: ClassVar[ActionType] = ActionType.RECEIVE
    component: str
    partner: str
    statements: Tuple[Statement, ...] = ()
    variables: Tuple[Variable, ...] = ()

    def __str__(self) -> str:
        return (f"Receive_{self.component},{self.partner}"
                f"({_join(self.statements)},{_join(self.variables)})")


@dataclass(frozen=True)
class Check:
    """``component`` checks that a set of equations holds."""
    kind: ClassVar[ActionType] = ActionType.CHECK
    component: str
    equations: Tuple[Equation, ...]

    def __str__(self) -> str:
        return f"Check_{self.component}({_join(self.equations)})"


@dataclass(frozen=True)
class Delete:
    kind: ClassVar[ActionType] = ActionType.DELETE
    component: str
    variable: Variable

    def __str__(self) -> str:
        return f"Delete_{self.component}({self.variable})"


@dataclass(frozen=True)
class VerifyProof:
    """``component`` verifies a proof."""
    kind: ClassVar[ActionType] = ActionType.VERIF_P
    component: str
    proof: Proof

    def __str__(self) -> str:
        return f"VerifP_{self.component}({self.proof})"


@dataclass(frozen=True)
class VerifyAttest:
    """``component`` verifies an attestation."""
    kind: ClassVar[ActionType] = ActionType.VERIF_A
    component: str
    attest: Attest

    def __str__(self) -> str:
        return f"VerifA_{self.component}({self.attest})"


@dataclass(frozen=True)
class TrustAction:
    """``component`` decides to trust ``partner``."""
    kind: ClassVar[ActionType] = ActionType.TRUST
    component: str
    partner: str

    def __str__(self) -> str:
        return f"Trust_{self.component},{self.partner}"


Action = Union[Has, Compute, Receive, Check, Delete, VerifyProof, VerifyAttest, TrustAction]
