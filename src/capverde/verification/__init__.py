"""Consistency checking and property verification over architectures."""

from .backend import VerifierBackend
from .result import ConsistencyResult, VerificationResult
from .consistency import ConsistencyChecker
from .bottomup import BottomUpVerifier
from .trace import TraceEntry, TraceKind, VerificationTrace

__all__ = [
    "VerifierBackend",
    "ConsistencyResult",
    "VerificationResult",
    "ConsistencyChecker",
    "BottomUpVerifier",
    "TraceEntry",
    "TraceKind",
    "VerificationTrace",
]
