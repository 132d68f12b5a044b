"""
Default deduction templates every component starts with.
"""
from typing import Tuple

from ..model.equation import Equation
from ..model.term import Term
from .deduction import Deduction, DeductionType


def default_deductions() -> Tuple[Deduction, ...]:
    """Build the Reflexivity, Symmetry, Transitivity and Substitution templates.

    Reflexivity has no premises; it is kept for display but is never
    instantiated.
    """
    t = Term.atom("t", match_var=True)
    u = Term.atom("u", match_var=True)
    v = Term.atom("v", match_var=True)
    x = Term.atom("x", match_var=True)
    y = Term.atom("y", match_var=True)

    ded_eq1 = Equation.equality("dedEq1", t, t)
    subst = Equation.equality("subst", t, u)
    ded_eq2 = Equation.equality("dedEq2", u, v)
    ded_eq3 = Equation.equality("dedEq3", u, t)
    ded_eq4 = Equation.equality("dedEq4", t, v)
    ded_eq5 = Equation.equality("dedEq5", x, y)

    return (
        Deduction("Reflexivity", DeductionType.ELSE, (), ded_eq1, 1.0),
        Deduction("Symmetry", DeductionType.ELSE, (subst,), ded_eq3, 1.0),
        Deduction("Transitivity", DeductionType.TRANS, (subst, ded_eq2), ded_eq4, 1.0),
        Deduction("Substitution", DeductionType.SUBST, (subst, ded_eq5), subst, 1.0),
    )
