"""
Architecture consistency checking.

An architecture is consistent if its actions can be put in an order in
which no component uses a variable before it possesses it. The search is a
bounded local search: the natural order, then a priority sort by action
kind, then repeatedly moving the first offending action to the end.
"""
import math
from typing import Dict, Iterable, List, Sequence, Set

import structlog

from ..architecture.action import Action, Check, Compute, Delete, Has, Receive
from ..architecture.architecture import Architecture
from ..model.variable import Variable
from .result import ConsistencyResult

logger = structlog.get_logger().bind(system="verification.consistency")


class ConsistencyChecker:
    """Searches for a causally valid order of an architecture's actions."""

    def __init__(self, architecture: Architecture):
        self.architecture = architecture
        self._known: Set[Variable] = set(architecture.variables)
        self._shared_with: Dict[str, List[str]] = {}
        for comp in architecture.compositions:
            self._shared_with.setdefault(comp.container, []).append(comp.component)

    def check(self) -> ConsistencyResult:
        """Run the three-phase order search.

        Returns:
            ConsistencyResult; on failure ``index`` refers to the offending
            action's position in the architecture's natural action order
        """
        natural = list(self.architecture.actions)
        result = self.check_order(natural)
        attempts = 1
        if result.success:
            return ConsistencyResult(True, attempts=attempts)

        order = sorted(natural, key=lambda action: action.kind.priority)
        result = self.check_order(order)
        attempts += 1

        n = len(order)
        bound = n * int(math.floor(math.log(n))) if n > 0 else 0
        counter = 0
        while not result.success and counter <= bound:
            order.append(order.pop(result.index))
            counter += 1
            result = self.check_order(order)
            attempts += 1

        if result.success:
            logger.debug("consistent_order_found", attempts=attempts, actions=n)
            return ConsistencyResult(True, attempts=attempts)
        return ConsistencyResult(False,
                                 index=natural.index(result.action),
                                 action=result.action,
                                 attempts=attempts)

    def check_order(self, actions: Sequence[Action]) -> ConsistencyResult:
        """Replay actions in the given order while tracking possession.

        Args:
            actions: Actions in the order to test

        Returns:
            ConsistencyResult; on failure ``index`` is relative to ``actions``
        """
        owned: Dict[str, Set[Variable]] = {}
        for index, action in enumerate(actions):
            if not self._apply(action, owned):
                return ConsistencyResult(False, index=index, action=action)
        return ConsistencyResult(True)

    def _owns(self, owned: Dict[str, Set[Variable]], component: str, var: Variable) -> bool:
        return var in self._known and var in owned.get(component, ())

    def _owns_all(self, owned, component: str, variables: Iterable[Variable]) -> bool:
        return all(self._owns(owned, component, var) for var in variables)

    def _grant(self, owned: Dict[str, Set[Variable]], component: str, var: Variable):
        owned.setdefault(component, set()).add(var)
        for inner in self._shared_with.get(component, ()):
            owned.setdefault(inner, set()).add(var)

    def _apply(self, action: Action, owned: Dict[str, Set[Variable]]) -> bool:
        if isinstance(action, Has):
            self._grant(owned, action.component, action.variable)
        elif isinstance(action, Compute):
            lhs = action.equation.lhs
            if lhs is None or action.equation.op2 is None:
                return False
            if not self._owns_all(owned, action.component, action.equation.op2.atoms):
                return False
            self._grant(owned, action.component, lhs)
        elif isinstance(action, Check):
            for eq in action.equations:
                for term in eq.terms:
                    if not self._owns_all(owned, action.component, term.atoms):
                        return False
        elif isinstance(action, Delete):
            return self._owns(owned, action.component, action.variable)
        elif isinstance(action, Receive):
            for var in action.variables:
                if not self._owns(owned, action.partner, var):
                    return False
                self._grant(owned, action.component, var)
        return True
