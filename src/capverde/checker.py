"""
Main verification API for architecture models.

Provides high-level functions for checking consistency and verifying
privacy properties.
"""
import time
from typing import Optional

from .architecture.architecture import Architecture
from .config import VerifierConfig
from .properties.property import Property
from .verification.backend import VerifierBackend
from .verification.bottomup import BottomUpVerifier
from .verification.consistency import ConsistencyChecker
from .verification.result import ConsistencyResult, VerificationResult


def check_consistency(architecture: Architecture) -> ConsistencyResult:
    """Check that the architecture's actions admit a causally valid order.

    Args:
        architecture: Finished architecture

    Returns:
        ConsistencyResult with success=True, or success=False and the
        index (in natural action order) of the first unresolved action

    Example:
        >>> result = check_consistency(arch)
        >>> if not result:
        ...     print(f"Offending action: {result.action}")
    """
    return ConsistencyChecker(architecture).check()


def verify_property(architecture: Architecture,
                    prop: Property,
                    config: Optional[VerifierConfig] = None,
                    backend: Optional[VerifierBackend] = None,
                    broadcast: bool = True) -> VerificationResult:
    """Verify a single property against an architecture.

    Args:
        architecture: Architecture to verify against
        prop: Property to verify
        config: Optional settings (defaults to the architecture's)
        backend: Verifier to use; a fresh BottomUpVerifier if omitted
        broadcast: Run equation broadcast before verifying (only when no
            backend is given)

    Returns:
        VerificationResult with holds=True if the property could be verified

    Example:
        >>> result = verify_property(arch, HasProperty("HN", Variable("encR")))
        >>> print(result.rule)
        H2
    """
    start_time = time.time()

    if backend is None:
        if broadcast:
            architecture.broadcast_equations()
        backend = BottomUpVerifier(architecture, config)

    holds = backend.verify(prop)

    rule = None
    consistent = True
    if isinstance(backend, BottomUpVerifier):
        rule = backend.rule_for(prop)
        consistent = backend.consistency.success

    elapsed_ms = (time.time() - start_time) * 1000

    return VerificationResult(
        holds=holds,
        property=prop,
        rule=rule,
        time_ms=elapsed_ms,
        backend_name=getattr(backend, "name", type(backend).__name__),
        consistent=consistent,
    )
