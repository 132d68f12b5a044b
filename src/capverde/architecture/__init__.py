"""
Architecture model: actions, relations, components and the architecture root.
"""
from .action import (
    Action,
    ActionType,
    Has,
    Compute,
    Receive,
    Check,
    Delete,
    VerifyProof,
    VerifyAttest,
    TrustAction,
)
from .trust import Trust, Composition
from .component import Component
from .architecture import Architecture

__all__ = [
    "Action",
    "ActionType",
    "Has",
    "Compute",
    "Receive",
    "Check",
    "Delete",
    "VerifyProof",
    "VerifyAttest",
    "TrustAction",
    "Trust",
    "Composition",
    "Component",
    "Architecture",
]
