"""
Symbolic terms: atoms wrapping a single variable, or compositions of an
operator with one to three sub-terms.

Terms are immutable values. Structural matching against pattern terms
(terms flagged as ``match_var``) produces substitution equations that the
deduction machinery uses to instantiate generic rules.
"""
from dataclasses import dataclass, replace
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Iterable, Optional, Tuple, Union

from .variable import Variable

if TYPE_CHECKING:
    from .equation import Equation


class TermType(Enum):
    """Kind of term."""
    ATOM = "atom"
    COMPOSITION = "composition"


class OperatorType(Enum):
    """Arity of a composition."""
    UNARY = 1
    BINARY = 2
    TERTIARY = 3


class Operator(Enum):
    """Explicit operator of a composition (arithmetic or a named function)."""
    ADD = "+"
    MULT = "*"
    SUB = "-"
    DIV = "/"
    FUNC = "func"


_ARITY = {1: OperatorType.UNARY, 2: OperatorType.BINARY, 3: OperatorType.TERTIARY}


def merge_matches(*groups: Iterable["Equation"]) -> Tuple["Equation", ...]:
    """Concatenate substitution groups, dropping duplicates but keeping order."""
    merged = []
    for group in groups:
        for eq in group:
            if eq not in merged:
                merged.append(eq)
    return tuple(merged)


@dataclass(frozen=True)
class Term:
    """An atom or a composition.

    Attributes:
        type: ATOM or COMPOSITION
        variable: The wrapped variable (atoms only)
        op_type: Arity of the operator (compositions only)
        op: Operator (compositions only)
        func_name: Function name when ``op`` is FUNC
        children: One to three sub-terms (compositions only)
        match_var: True if this term is a pattern placeholder
    """
    type: TermType
    variable: Optional[Variable] = None
    op_type: Optional[OperatorType] = None
    op: Optional[Operator] = None
    func_name: Optional[str] = None
    children: Tuple["Term", ...] = ()
    match_var: bool = False

    def __post_init__(self):
        if self.type is TermType.ATOM:
            if self.variable is None or self.children:
                raise ValueError("Atom terms wrap exactly one variable")
        else:
            if self.op is None or not 1 <= len(self.children) <= 3:
                raise ValueError("Compositions need an operator and 1-3 sub-terms")
            if _ARITY[len(self.children)] is not self.op_type:
                raise ValueError(
                    f"Operator type {self.op_type} does not fit {len(self.children)} sub-terms")
            if self.op is not Operator.FUNC and self.op_type is not OperatorType.BINARY:
                raise ValueError(f"Arithmetic operator {self.op.value} must be binary")

    @classmethod
    def atom(cls, var: Union[Variable, str], match_var: bool = False) -> "Term":
        """Create an atom term from a variable or a variable name."""
        if isinstance(var, str):
            var = Variable(var)
        return cls(TermType.ATOM, variable=var, match_var=match_var)

    @classmethod
    def compose(cls,
                op: Operator,
                *children: "Term",
                func_name: Optional[str] = None,
                match_var: bool = False) -> "Term":
        """Create a composition; the arity is taken from the number of children."""
        if not 1 <= len(children) <= 3:
            raise ValueError(f"Compositions take 1-3 sub-terms, got {len(children)}")
        return cls(TermType.COMPOSITION,
                   op_type=_ARITY[len(children)],
                   op=op,
                   func_name=func_name,
                   children=tuple(children),
                   match_var=match_var)

    @classmethod
    def func(cls, name: str, *children: "Term", match_var: bool = False) -> "Term":
        """Shorthand for a named function application like ``Enc(readings, k)``."""
        return cls.compose(Operator.FUNC, *children, func_name=name, match_var=match_var)

    @property
    def is_atom(self) -> bool:
        return self.type is TermType.ATOM

    @cached_property
    def atoms(self) -> Tuple[Variable, ...]:
        """All variables referenced by this term, in order of first occurrence."""
        if self.is_atom:
            return (self.variable,)
        found = []
        for child in self.children:
            for var in child.atoms:
                if var not in found:
                    found.append(var)
        return tuple(found)

    @cached_property
    def nesting(self) -> int:
        """Number of nested compositions, ignoring the match_var flag."""
        if self.is_atom:
            return 0
        return 1 + max(child.nesting for child in self.children)

    @property
    def depth(self) -> int:
        """Complexity bound used by the deduction filter (0 for pattern terms)."""
        return 0 if self.match_var else self.nesting

    @cached_property
    def has_match_var(self) -> bool:
        """True if this term or any sub-term is a pattern placeholder."""
        return self.match_var or any(child.has_match_var for child in self.children)

    def contains(self, term: "Term") -> bool:
        """Check whether ``term`` occurs in this term (including the term itself)."""
        if self == term:
            return True
        return any(child.contains(term) for child in self.children)

    def substitute(self, target: "Term", replacement: "Term") -> "Term":
        """Replace every occurrence of ``target`` by ``replacement``.

        The match_var flag of rewritten compositions is recomputed from
        their children, so a fully instantiated pattern becomes concrete.
        """
        if self == target:
            return replacement
        if self.is_atom:
            return self
        children = tuple(child.substitute(target, replacement) for child in self.children)
        if children == self.children:
            return self
        return replace(self,
                       children=children,
                       match_var=any(child.match_var for child in children))

    def match(self, pattern: "Term") -> Tuple["Equation", ...]:
        """Match this (concrete) term against a pattern term.

        Args:
            pattern: Pattern term, usually containing match_var placeholders

        Returns:
            Substitution equations ``pattern_subterm = concrete_subterm``;
            empty if nothing matches or nothing needs substituting
        """
        from .equation import Equation

        if self.type is not pattern.type:
            if self.is_atom:
                return ()
            # pattern is an atom standing for the whole composition
            return (Equation.substitution(pattern, self),)
        if self.is_atom:
            if pattern == self:
                return ()
            return (Equation.substitution(pattern, self),)
        if self.op_type is not pattern.op_type:
            # permissive: look for the pattern inside our sub-terms
            return merge_matches(*(child.match(pattern) for child in self.children))
        if self.op is not pattern.op or self.func_name != pattern.func_name:
            return ()
        return merge_matches(*(
            child.match(sub) for child, sub in zip(self.children, pattern.children)))

    def __str__(self) -> str:
        if self.is_atom:
            return self.variable.name
        args = [str(child) for child in self.children]
        if self.op is Operator.FUNC:
            return f"{self.func_name}({', '.join(args)})"
        return f" {self.op.value} ".join(args)
