"""
Privacy properties verified against an architecture.
"""
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from ..model.equation import Equation
from ..model.variable import Variable


class PropertyType(Enum):
    HAS = "has"
    KNOWS = "knows"
    NOTSHARED = "notshared"
    NOTSTORED = "notstored"
    CONJUNCTION = "conjunction"
    NEGATION = "negation"


@dataclass(frozen=True)
class HasProperty:
    """``owner`` possesses ``variable`` with at least ``probability``."""
    kind: ClassVar[PropertyType] = PropertyType.HAS
    owner: str
    variable: Variable
    probability: float = 1.0

    def __str__(self) -> str:
        return f"Has_{self.owner}^{self.probability}({self.variable})"


@dataclass(frozen=True)
class KnowsProperty:
    """``owner`` knows that ``equation`` holds with at least ``probability``."""
    kind: ClassVar[PropertyType] = PropertyType.KNOWS
    owner: str
    equation: Equation
    probability: float = 1.0

    def __str__(self) -> str:
        return f"Knows_{self.owner}^{self.probability}({self.equation})"


@dataclass(frozen=True)
class NotSharedProperty:
    """``owner`` never shares ``variable`` with another component."""
    kind: ClassVar[PropertyType] = PropertyType.NOTSHARED
    owner: str
    variable: Variable

    def __str__(self) -> str:
        return f"notShared_{self.owner}({self.variable})"


@dataclass(frozen=True)
class NotStoredProperty:
    """``owner`` never keeps ``variable`` in use for ``bound`` or more steps."""
    kind: ClassVar[PropertyType] = PropertyType.NOTSTORED
    owner: str
    variable: Variable
    bound: int

    def __str__(self) -> str:
        return f"notStored_{self.owner}({self.variable}, {self.bound})"


@dataclass(frozen=True)
class ConjunctionProperty:
    kind: ClassVar[PropertyType] = PropertyType.CONJUNCTION
    first: "Property"
    second: "Property"

    def __str__(self) -> str:
        return f"{self.first} AND {self.second}"


@dataclass(frozen=True)
class NegationProperty:
    kind: ClassVar[PropertyType] = PropertyType.NEGATION
    inner: "Property"

    def __str__(self) -> str:
        return f"NOT {self.inner}"


Property = Union[
    HasProperty,
    KnowsProperty,
    NotSharedProperty,
    NotStoredProperty,
    ConjunctionProperty,
    NegationProperty,
]
