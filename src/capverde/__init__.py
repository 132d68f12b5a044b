"""
Privacy verification for distributed architecture models.

This package models components, the variables and equations they possess,
compute and exchange, and verifies probabilistic privacy properties against
that model with a fixed calculus of inference rules.
"""

__version__ = "0.1.0"

from .model import Variable, Term, Operator, Equation, Relation, Attest, Proof
from .deduction import Deduction, DeductionType, Dep, default_deductions, instantiate_deductions
from .architecture import (
    Architecture,
    Component,
    Trust,
    Composition,
    Has,
    Compute,
    Receive,
    Check,
    Delete,
    VerifyProof,
    VerifyAttest,
    TrustAction,
)
from .properties import (
    HasProperty,
    KnowsProperty,
    NotSharedProperty,
    NotStoredProperty,
    ConjunctionProperty,
    NegationProperty,
)
from .verification import (
    BottomUpVerifier,
    ConsistencyChecker,
    ConsistencyResult,
    VerificationResult,
    VerifierBackend,
)
from .builder import ArchitectureBuilder
from .config import VerifierConfig
from .checker import check_consistency, verify_property
from .telemetry import setup_logging

__all__ = [
    "Variable",
    "Term",
    "Operator",
    "Equation",
    "Relation",
    "Attest",
    "Proof",
    "Deduction",
    "DeductionType",
    "Dep",
    "default_deductions",
    "instantiate_deductions",
    "Architecture",
    "Component",
    "Trust",
    "Composition",
    "Has",
    "Compute",
    "Receive",
    "Check",
    "Delete",
    "VerifyProof",
    "VerifyAttest",
    "TrustAction",
    "HasProperty",
    "KnowsProperty",
    "NotSharedProperty",
    "NotStoredProperty",
    "ConjunctionProperty",
    "NegationProperty",
    "BottomUpVerifier",
    "ConsistencyChecker",
    "ConsistencyResult",
    "VerificationResult",
    "VerifierBackend",
    "ArchitectureBuilder",
    "VerifierConfig",
    "check_consistency",
    "verify_property",
    "setup_logging",
]
