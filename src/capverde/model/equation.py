"""
Equations: binary relations between terms, conjunctions of equations, and
the empty wildcard equation.

Equations carry the two operations the deduction machinery is built on:
``match2`` (match a concrete equation against a template premise) and
``update`` (apply a substitution equation).
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

from .term import Term, merge_matches
from .variable import Variable


class Relation(Enum):
    """Relation between the two operands of a relation equation."""
    EQUALITY = "="
    INEQUALITY = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="


class EquationKind(Enum):
    RELATION = "relation"
    CONJUNCTION = "conjunction"
    EMPTY = "empty"


@dataclass(frozen=True, eq=False)
class Equation:
    """A relation, a conjunction of two equations, or the empty equation.

    Equality ignores the name. The empty equation compares equal to every
    equation; it hashes like nothing else, so it should not be mixed with
    concrete equations inside sets or dict keys.

    Attributes:
        kind: RELATION, CONJUNCTION or EMPTY
        name: Display name (not part of identity)
        relation: Relation between ``op1`` and ``op2`` (relations only)
        op1: Left operand (relations only)
        op2: Right operand (relations only)
        conjuncts: The two sub-equations (conjunctions only)
    """
    kind: EquationKind
    name: str = ""
    relation: Optional[Relation] = None
    op1: Optional[Term] = None
    op2: Optional[Term] = None
    conjuncts: Tuple["Equation", ...] = ()

    def __post_init__(self):
        if self.kind is EquationKind.RELATION:
            if self.relation is None or self.op1 is None or self.op2 is None:
                raise ValueError("Relation equations need a relation and two operands")
        elif self.kind is EquationKind.CONJUNCTION:
            if len(self.conjuncts) != 2:
                raise ValueError("Conjunctions combine exactly two equations")

    @classmethod
    def relate(cls, name: str, relation: Relation, op1: Term, op2: Term) -> "Equation":
        return cls(EquationKind.RELATION, name=name, relation=relation, op1=op1, op2=op2)

    @classmethod
    def equality(cls, name: str, op1: Term, op2: Term) -> "Equation":
        """Create ``op1 = op2``."""
        return cls.relate(name, Relation.EQUALITY, op1, op2)

    @classmethod
    def conjunction(cls, name: str, first: "Equation", second: "Equation") -> "Equation":
        return cls(EquationKind.CONJUNCTION, name=name, conjuncts=(first, second))

    @classmethod
    def empty(cls) -> "Equation":
        return cls(EquationKind.EMPTY)

    @classmethod
    def substitution(cls, pattern: Term, concrete: Term) -> "Equation":
        """Create the substitution ``pattern := concrete`` produced by matching."""
        return cls.equality("subst", pattern, concrete)

    def __eq__(self, other):
        if not isinstance(other, Equation):
            return NotImplemented
        if self is other:
            return True
        if self.kind is EquationKind.EMPTY or other.kind is EquationKind.EMPTY:
            return True
        return (self.kind is other.kind
                and self.relation is other.relation
                and self.op1 == other.op1
                and self.op2 == other.op2
                and self.conjuncts == other.conjuncts)

    def __hash__(self):
        return hash((self.kind, self.relation, self.op1, self.op2, self.conjuncts))

    @property
    def is_relation(self) -> bool:
        return self.kind is EquationKind.RELATION

    @property
    def lhs(self) -> Optional[Variable]:
        """Variable named by the left operand; defined only for equalities."""
        if self.kind is EquationKind.RELATION and self.relation is Relation.EQUALITY:
            return Variable(str(self.op1))
        return None

    @property
    def terms(self) -> Tuple[Term, ...]:
        """Top-level operand terms, flattened over conjuncts."""
        if self.kind is EquationKind.RELATION:
            return (self.op1, self.op2)
        found = []
        for eq in self.conjuncts:
            for term in eq.terms:
                if term not in found:
                    found.append(term)
        return tuple(found)

    @property
    def atoms(self) -> Tuple[Variable, ...]:
        """All variables referenced anywhere in the equation."""
        found = []
        for term in self.terms:
            for var in term.atoms:
                if var not in found:
                    found.append(var)
        return tuple(found)

    @property
    def depth(self) -> int:
        """Sum of the operand depths, or of the conjunct depths."""
        if self.kind is EquationKind.RELATION:
            return self.op1.depth + self.op2.depth
        return sum(eq.depth for eq in self.conjuncts)

    def is_reflexive(self) -> bool:
        return (self.kind is EquationKind.RELATION
                and self.relation is Relation.EQUALITY
                and self.op1 == self.op2)

    def is_complex(self, max_equation_depth: int = 3, max_term_depth: int = 2) -> bool:
        """Check the complexity bound applied to deduction conclusions.

        Args:
            max_equation_depth: Largest accepted equation depth
            max_term_depth: Largest accepted depth of either operand

        Returns:
            True if the equation exceeds either bound
        """
        if self.depth > max_equation_depth:
            return True
        return any(term.depth > max_term_depth for term in self.terms)

    def contains_match_var(self) -> bool:
        if self.kind is EquationKind.RELATION:
            return self.op1.has_match_var or self.op2.has_match_var
        return any(eq.contains_match_var() for eq in self.conjuncts)

    def contains(self, term: Term) -> bool:
        """Check whether ``term`` occurs anywhere in this equation."""
        if self.kind is EquationKind.RELATION:
            return self.op1.contains(term) or self.op2.contains(term)
        return any(eq.contains(term) for eq in self.conjuncts)

    def match2(self, pattern: "Equation") -> Optional[Tuple["Equation", ...]]:
        """Match this equation against a template equation.

        A concrete operand of the pattern must equal the corresponding
        operand here, and only the other side is matched. If both pattern
        operands are placeholders, each side has to contribute at least one
        new substitution.

        Args:
            pattern: Template equation (usually a deduction premise)

        Returns:
            Substitution equations (empty if there is no match), or None
            for conjunctions, which are not supported
        """
        if self.kind is EquationKind.CONJUNCTION or pattern.kind is EquationKind.CONJUNCTION:
            return None
        if self.kind is EquationKind.EMPTY or pattern.kind is EquationKind.EMPTY:
            return ()
        if self.relation is not pattern.relation:
            return ()

        if not pattern.op1.match_var:
            if self.op1 != pattern.op1:
                return ()
            return self.op2.match(pattern.op2)
        if not pattern.op2.match_var:
            if self.op2 != pattern.op2:
                return ()
            return self.op1.match(pattern.op1)

        left = merge_matches(self.op1.match(pattern.op1))
        if not left:
            return ()
        both = merge_matches(left, self.op2.match(pattern.op2))
        if len(both) == len(left):
            return ()
        return both

    def update(self, substitution: "Equation") -> "Equation":
        """Apply a substitution ``old = new`` to every occurrence of ``old``.

        Returns:
            The rewritten equation, or this equation if ``old`` does not occur
        """
        target = substitution.op1
        if target is None or not self.contains(target):
            return self
        if self.kind is EquationKind.CONJUNCTION:
            return replace(self, conjuncts=tuple(eq.update(substitution) for eq in self.conjuncts))
        return replace(self,
                       op1=self.op1.substitute(target, substitution.op2),
                       op2=self.op2.substitute(target, substitution.op2))

    def update_all(self, substitutions: Iterable["Equation"]) -> "Equation":
        eq = self
        for substitution in substitutions:
            eq = eq.update(substitution)
        return eq

    def renamed(self, name: str) -> "Equation":
        return replace(self, name=name)

    def __str__(self) -> str:
        if self.kind is EquationKind.RELATION:
            return f"{self.op1} {self.relation.value} {self.op2}"
        if self.kind is EquationKind.CONJUNCTION:
            return f"({self.conjuncts[0]}) & ({self.conjuncts[1]})"
        return "<empty>"
