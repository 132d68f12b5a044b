"""
Deduction rules and dependence relations.

A deduction is a probability-weighted rule ``premises -> conclusion``. While
its equations still contain match_var placeholders it is a template; once
instantiated against concrete equations it becomes an explicit deduction a
component can use.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

from ..model.equation import Equation
from ..model.variable import Variable


class DeductionType(Enum):
    """Category tag of a deduction rule."""
    TRANS = "trans"
    SUBST = "subst"
    HOMO = "homo"
    ELSE = "else"


@dataclass(frozen=True)
class Deduction:
    """A named deduction rule.

    Attributes:
        name: Rule name (instantiated rules carry an ``Explicit`` suffix)
        type: Category tag
        premises: Ordered premise equations
        conclusion: Concluded equation
        probability: Probability that the rule yields its conclusion
    """
    name: str
    type: DeductionType
    premises: Tuple[Equation, ...]
    conclusion: Equation
    probability: float = 1.0

    def update(self, substitutions: Iterable[Equation]) -> "Deduction":
        """Apply substitutions to every premise and to the conclusion."""
        substitutions = tuple(substitutions)
        return replace(self,
                       premises=tuple(p.update_all(substitutions) for p in self.premises),
                       conclusion=self.conclusion.update_all(substitutions))

    def renamed(self, name: str) -> "Deduction":
        return replace(self, name=name)

    def contains_match_var(self) -> bool:
        if any(p.contains_match_var() for p in self.premises):
            return True
        return self.conclusion.contains_match_var()

    def is_reflexive(self) -> bool:
        return self.conclusion.is_reflexive()

    def is_too_complex(self, max_equation_depth: int = 3, max_term_depth: int = 2) -> bool:
        return self.conclusion.is_complex(max_equation_depth, max_term_depth)

    def is_redundant(self) -> bool:
        """True if the conclusion is already one of the premises."""
        return self.conclusion in self.premises

    def rejection_reason(self,
                         max_equation_depth: int = 3,
                         max_term_depth: int = 2) -> Optional[str]:
        """Reason this deduction cannot become a capability, or None if it can."""
        if self.contains_match_var():
            return "templated"
        if self.is_reflexive():
            return "reflexive"
        if self.is_too_complex(max_equation_depth, max_term_depth):
            return "too_complex"
        if self.is_redundant():
            return "redundant"
        return None

    def __str__(self) -> str:
        premises = ", ".join(str(p) for p in self.premises)
        return f"{self.name}^{self.probability}: [{premises}] -> {self.conclusion}"


@dataclass(frozen=True)
class Dep:
    """Dependence relation: ``variable`` is derivable from ``requires``.

    Attributes:
        variable: Derivable variable
        requires: Variables needed to derive it
        probability: Probability of a successful derivation
    """
    variable: Variable
    requires: Tuple[Variable, ...]
    probability: float = 1.0

    def __str__(self) -> str:
        required = ", ".join(str(var) for var in self.requires)
        return f"Dep^{self.probability}({self.variable}, [{required}])"
