"""
Verification result types.
"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ConsistencyResult:
    """Result of a consistency check.

    Attributes:
        success: True if a causally valid order of all actions was found
        index: Index of the first offending action, -1 on success
        action: The offending action, if any
        attempts: Number of action orders tried
    """
    success: bool
    index: int = -1
    action: Optional[Any] = None
    attempts: int = 1

    def __bool__(self) -> bool:
        return self.success

    def __str__(self) -> str:
        if self.success:
            return f"Architecture consistent ({self.attempts} orders tried)"
        return (f"Architecture inconsistent at action {self.index}: {self.action} "
                f"({self.attempts} orders tried)")


@dataclass
class VerificationResult:
    """Result of a property verification.

    Attributes:
        holds: True if the property was verified
        property: The verified property
        rule: Name of the rule that established the property, if it holds
        time_ms: Time taken in milliseconds
        backend_name: Name of the verifier backend used
        consistent: Whether the architecture passed the consistency check
    """
    holds: bool
    property: Any = None
    rule: Optional[str] = None
    time_ms: float = 0.0
    backend_name: str = "unknown"
    consistent: bool = True

    def __str__(self) -> str:
        via = f" via {self.rule}" if self.rule else ""
        if self.holds:
            return f"Property {self.property} holds{via} ({self.backend_name}, {self.time_ms:.2f}ms)"
        return f"Property {self.property} not verified ({self.backend_name}, {self.time_ms:.2f}ms)"
