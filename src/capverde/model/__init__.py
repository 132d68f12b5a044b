"""
Symbolic value model: variables, terms, equations and statements.
"""
from .variable import Variable
from .term import Term, TermType, OperatorType, Operator
from .equation import Equation, EquationKind, Relation
from .statement import Attest, Proof, Statement

__all__ = [
    "Variable",
    "Term",
    "TermType",
    "OperatorType",
    "Operator",
    "Equation",
    "EquationKind",
    "Relation",
    "Attest",
    "Proof",
    "Statement",
]
