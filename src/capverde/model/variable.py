"""
Variables: the named atomic resources of an architecture (secrets, readings, keys).
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Variable:
    """A named atomic resource.

    Identity is by name only: two variables constructed independently with
    the same name are equal and hash alike.

    Attributes:
        name: Variable name
    """
    name: str

    def __str__(self) -> str:
        return self.name
