"""
Bottom-up probabilistic verifier.

Decides privacy properties by applying the rules of inference of the
calculus in a fixed order. Results are memoized for the lifetime of the
verifier; a call history stops re-entrant evaluation of a property that is
still being verified, which is how cyclic dependence relations and
deductions terminate. Chains deeper than the configured recursion bound
are cut the same way.
"""
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import structlog

from ..architecture.action import (
    Check,
    Compute,
    Delete,
    Has,
    Receive,
    VerifyAttest,
    VerifyProof,
)
from ..architecture.architecture import Architecture
from ..config import VerifierConfig
from ..model.equation import Equation
from ..model.variable import Variable
from ..properties.property import (
    ConjunctionProperty,
    HasProperty,
    KnowsProperty,
    NegationProperty,
    NotSharedProperty,
    NotStoredProperty,
    Property,
)
from .consistency import ConsistencyChecker
from .trace import TraceKind, VerificationTrace

logger = structlog.get_logger().bind(system="verification.bottomup")

Rule = Tuple[str, Callable[[], bool]]


class BottomUpVerifier:
    """Rule-chaining verifier over a finished architecture.

    The architecture is checked for consistency once, at construction. An
    inconsistent architecture is reported as a warning and queries are
    still answered on a best-effort basis.

    Attributes:
        architecture: The verified architecture
        config: Probability search and complexity settings
        consistency: Outcome of the consistency check
        trace: Rule applications per top-level query
        rule_evaluations: Number of properties whose rules were evaluated
            (memo hits and cut cycles are not counted)
    """

    name = "bottomup"

    def __init__(self, architecture: Architecture, config: Optional[VerifierConfig] = None):
        self.architecture = architecture
        self.config = config if config is not None else architecture.config
        self.trace = VerificationTrace()
        self.rule_evaluations = 0
        self._memo: Dict[Property, bool] = {}
        self._rules: Dict[Property, str] = {}
        self._call_history: List[Property] = []
        self._actions = architecture.actions

        self.consistency = ConsistencyChecker(architecture).check()
        if not self.consistency.success:
            logger.warning("architecture_inconsistent",
                           index=self.consistency.index,
                           action=str(self.consistency.action),
                           attempts=self.consistency.attempts)

    def verify(self, prop: Property) -> bool:
        """Verify a top-level property."""
        try:
            return self.verify_statement(prop, 0)
        except RecursionError:
            logger.warning("recursion_limit_exceeded", property=str(prop),
                           max_recursion_depth=self.config.max_recursion_depth)
            return False

    def rule_for(self, prop: Property) -> Optional[str]:
        """Name of the rule that established ``prop``, if it was verified."""
        return self._rules.get(prop)

    def verify_statement(self, prop: Property, depth: int = 0) -> bool:
        """Verify a property at a given recursion depth.

        Args:
            prop: Property to verify
            depth: Recursion depth (0 for top-level queries)

        Returns:
            True if some rule establishes the property
        """
        self.trace.log(prop, f"Current property to prove: {prop}", depth, TraceKind.START)
        if prop in self._memo:
            result = self._memo[prop]
            outcome = "successfully verified" if result else "not successfully verified"
            self.trace.log(prop, f"Current statement already checked: {outcome}",
                           depth, TraceKind.END)
            return result
        if prop in self._call_history:
            logger.debug("recursion_cut", property=str(prop), depth=depth)
            self.trace.log(prop, "Stopping recursive endless loop", depth, TraceKind.END)
            return False
        if depth > self.config.max_recursion_depth:
            logger.debug("recursion_depth_cut", property=str(prop), depth=depth)
            self.trace.log(prop, "Stopping at maximum recursion depth", depth, TraceKind.END)
            return False

        self._call_history.append(prop)
        try:
            self.rule_evaluations += 1
            rule = self._dispatch(prop, depth)
        finally:
            self._call_history.pop()

        result = rule is not None
        self._memo[prop] = result
        if rule is not None:
            self._rules[prop] = rule
            self.trace.log(prop, f"Rule {rule} applied for statement: {prop}",
                           depth, TraceKind.END)
        else:
            self.trace.log(prop, f"No rule applied for statement: {prop}",
                           depth, TraceKind.END)
        return result

    def has_probability(self, owner: str, variable: Variable, depth: int = 0) -> float:
        """Largest probed probability with which ``owner`` has ``variable`` (0 if none)."""
        for prob in self._probe_levels():
            if self.verify_statement(HasProperty(owner, variable, prob), depth + 1):
                return prob
        return 0.0

    def knows_probability(self, owner: str, equation: Equation, depth: int = 0) -> float:
        """Largest probed probability with which ``owner`` knows ``equation`` (0 if none)."""
        for prob in self._probe_levels():
            if self.verify_statement(KnowsProperty(owner, equation, prob), depth + 1):
                return prob
        return 0.0

    def _probe_levels(self) -> Iterator[float]:
        # step ** -i rather than repeated division keeps the levels exact
        i = 0
        while True:
            prob = self.config.probability_step ** -i
            if prob < self.config.probability_floor:
                return
            yield prob
            i += 1

    def _dispatch(self, prop: Property, depth: int) -> Optional[str]:
        if isinstance(prop, ConjunctionProperty):
            rules: Sequence[Rule] = [
                ("I^", lambda: (self.verify_statement(prop.first, depth + 1)
                                and self.verify_statement(prop.second, depth + 1))),
            ]
        elif isinstance(prop, NegationProperty):
            rules = [("I_neg", lambda: not self.verify_statement(prop.inner, depth + 1))]
        elif isinstance(prop, HasProperty):
            rules = [
                ("H1", lambda: self._possesses(self._has_action, prop.owner, prop.variable)),
                ("H2", lambda: self._possesses(self._receives, prop.owner, prop.variable)),
                ("H3", lambda: self._possesses(self._computes, prop.owner, prop.variable)),
                ("H4", lambda: self._derivable(prop, depth)),
            ]
        elif isinstance(prop, KnowsProperty):
            rules = [
                ("K1", lambda: self._computes_equation(prop.owner, prop.equation)),
                ("K2", lambda: self._checks(prop.owner, prop.equation)),
                ("K3", lambda: self._proves(prop.owner, prop.equation)),
                ("K4", lambda: self._proves_attested(prop.owner, prop.equation)),
                ("K5", lambda: self._attested(prop.owner, prop.equation)),
                ("Kded", lambda: self._deducible(prop, depth)),
            ]
        elif isinstance(prop, NotSharedProperty):
            rules = [
                ("SH1", lambda: (self._computes(prop.owner, prop.variable)
                                 or self._has_action(prop.owner, prop.variable))),
                ("SH2", lambda: not self._sends(prop.owner, prop.variable)),
            ]
        elif isinstance(prop, NotStoredProperty):
            rules = [
                ("ST1", lambda: not self._receives(prop.owner, prop.variable)),
                ("ST2", lambda: self.usage_count(prop.owner, prop.variable) < prop.bound),
            ]
        else:
            logger.warning("unsupported_property", property=repr(prop))
            return None

        for name, rule in rules:
            self.trace.log(prop, f"Trying Rule {name}...", depth)
            if rule():
                logger.debug("rule_applied", rule=name, property=str(prop), depth=depth)
                return name
            self.trace.log(prop, f"Rule {name} not applicable", depth)
        return None

    # Has rules

    def _possesses(self, rule: Callable[[str, Variable], bool], owner: str, var: Variable) -> bool:
        # possession of a container is shared with the components it holds
        holders = [owner] + [c.container for c in self.architecture.compositions
                             if c.component == owner]
        return any(rule(holder, var) for holder in holders)

    def _has_action(self, owner: str, var: Variable) -> bool:
        return any(isinstance(a, Has) and a.component == owner and a.variable == var
                   for a in self._actions)

    def _receives(self, owner: str, var: Variable) -> bool:
        return any(isinstance(a, Receive) and a.component == owner and var in a.variables
                   for a in self._actions)

    def _sends(self, owner: str, var: Variable) -> bool:
        return any(isinstance(a, Receive) and a.partner == owner and var in a.variables
                   for a in self._actions)

    def _computes(self, owner: str, var: Variable) -> bool:
        return any(isinstance(a, Compute) and a.component == owner and a.equation.lhs == var
                   for a in self._actions)

    def _derivable(self, prop: HasProperty, depth: int) -> bool:
        comp = self.architecture.component(prop.owner)
        if comp is None:
            return False
        for dep in comp.deps:
            if dep.variable != prop.variable:
                continue
            prob = dep.probability
            for required in dep.requires:
                prob *= self.has_probability(prop.owner, required, depth + 1)
            self.trace.log(prop, f"{dep} yields probability {prob}", depth)
            if prob >= prop.probability:
                return True
        return False

    # Knows rules

    def _computes_equation(self, owner: str, eq: Equation) -> bool:
        return any(isinstance(a, Compute) and a.component == owner and a.equation == eq
                   for a in self._actions)

    def _checks(self, owner: str, eq: Equation) -> bool:
        return any(isinstance(a, Check) and a.component == owner and eq in a.equations
                   for a in self._actions)

    def _proves(self, owner: str, eq: Equation) -> bool:
        return any(isinstance(a, VerifyProof) and a.component == owner
                   and eq in a.proof.equations
                   for a in self._actions)

    def _proves_attested(self, owner: str, eq: Equation) -> bool:
        for a in self._actions:
            if not isinstance(a, VerifyProof) or a.component != owner:
                continue
            for attest in a.proof.attests:
                if (eq in attest.equations
                        and self.architecture.trust(owner, attest.component, eq.atoms)):
                    return True
        return False

    def _attested(self, owner: str, eq: Equation) -> bool:
        return any(isinstance(a, VerifyAttest) and a.component == owner
                   and eq in a.attest.equations
                   and self.architecture.trust(owner, a.attest.component, eq.atoms)
                   for a in self._actions)

    def _deducible(self, prop: KnowsProperty, depth: int) -> bool:
        comp = self.architecture.component(prop.owner)
        if comp is None:
            return False
        for deduction in comp.deduction_capabilities:
            if deduction.conclusion != prop.equation:
                continue
            prob = deduction.probability
            for premise in deduction.premises:
                prob *= self.knows_probability(prop.owner, premise, depth + 1)
            self.trace.log(prop, f"{deduction.name} yields probability {prob}", depth)
            if prob >= prop.probability:
                return True
        return False

    # NotStored counter

    def usage_count(self, owner: str, var: Variable) -> int:
        """Maximum number of pending uses of ``var`` by ``owner`` over the action history.

        Checks and computations by the owner that involve the variable, and
        receives in which the owner sends it, add one use; deleting it
        removes one.
        """
        count = 0
        peak = 0
        for a in self._actions:
            if a.component == owner:
                if isinstance(a, Check):
                    if any(var in eq.atoms for eq in a.equations):
                        count += 1
                elif isinstance(a, Compute):
                    if var in a.equation.atoms:
                        count += 1
                elif isinstance(a, Delete):
                    if a.variable == var:
                        count -= 1
            elif isinstance(a, Receive) and a.partner == owner and var in a.variables:
                count += 1
            peak = max(peak, count)
        return peak
