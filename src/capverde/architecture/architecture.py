"""
Architecture: the aggregate root of a model.

Holds the components, the inter-component actions, trust and composition
relations and the properties to verify, and aggregates per-component facts
into architecture-wide collections.
"""
from typing import Iterable, List, Optional, Tuple

import structlog

from ..config import VerifierConfig
from ..model.equation import Equation
from ..model.statement import Attest, Statement
from ..model.variable import Variable
from ..properties.property import KnowsProperty, Property
from .action import Action, Check, Compute, Receive, TrustAction, VerifyAttest, VerifyProof
from .component import Component
from .trust import Composition, Trust

logger = structlog.get_logger().bind(system="architecture")


def _statement_equations(statement: Statement) -> List[Equation]:
    if isinstance(statement, Attest):
        return list(statement.equations)
    found = list(statement.equations)
    for attest in statement.attests:
        found.extend(attest.equations)
    return found


class Architecture:
    """A finished architecture model.

    Components are mutated only by ``broadcast_equations``; once that has
    run the architecture is handed unchanged to the consistency checker and
    the verifier.
    """

    def __init__(self,
                 components: Iterable[Component],
                 inter_component_actions: Iterable[Action] = (),
                 trusts: Iterable[Trust] = (),
                 compositions: Iterable[Composition] = (),
                 properties: Iterable[Property] = (),
                 config: Optional[VerifierConfig] = None):
        self.config = config if config is not None else VerifierConfig()
        self._components: List[Component] = []
        for comp in components:
            if comp in self._components:
                raise ValueError(f"Duplicate component name: {comp.name}")
            self._components.append(comp)
        self._inter_component_actions: List[Action] = list(inter_component_actions)
        self._trusts: List[Trust] = list(trusts)
        self._compositions: List[Composition] = list(compositions)
        self._properties: List[Property] = list(properties)
        self._extra_equations: List[Equation] = []

    @property
    def components(self) -> Tuple[Component, ...]:
        return tuple(self._components)

    def component(self, name: str) -> Optional[Component]:
        for comp in self._components:
            if comp.name == name:
                return comp
        return None

    @property
    def inter_component_actions(self) -> Tuple[Action, ...]:
        return tuple(self._inter_component_actions)

    @property
    def actions(self) -> Tuple[Action, ...]:
        """All actions in natural order: owned actions first, then inter-component ones."""
        found: List[Action] = []
        for comp in self._components:
            found.extend(comp.actions)
        found.extend(self._inter_component_actions)
        return tuple(found)

    @property
    def variables(self) -> Tuple[Variable, ...]:
        found: List[Variable] = []
        for comp in self._components:
            for var in comp.variables:
                if var not in found:
                    found.append(var)
        return tuple(found)

    @property
    def statements(self) -> Tuple[Statement, ...]:
        """Statements transmitted by Receive actions."""
        found: List[Statement] = []
        for action in self.actions:
            if isinstance(action, Receive):
                for st in action.statements:
                    if st not in found:
                        found.append(st)
        return tuple(found)

    @property
    def trusts(self) -> Tuple[Trust, ...]:
        """Explicit trust relations plus blind trust implied by Trust actions."""
        found = list(self._trusts)
        for action in self.actions:
            if isinstance(action, TrustAction):
                implied = Trust(action.component, action.partner)
                if implied not in found:
                    found.append(implied)
        return tuple(found)

    @property
    def compositions(self) -> Tuple[Composition, ...]:
        found = list(self._compositions)
        for comp in self._components:
            if comp.composition is not None:
                implied = Composition(comp.composition, comp.name)
                if implied not in found:
                    found.append(implied)
        return tuple(found)

    @property
    def properties(self) -> Tuple[Property, ...]:
        return tuple(self._properties)

    @property
    def equations(self) -> Tuple[Equation, ...]:
        return self.collect_equations()

    def add_property(self, prop: Property):
        if prop not in self._properties:
            self._properties.append(prop)

    def add_equation(self, eq: Equation):
        """Register an equation that no action mentions (for example one a
        deduction should be instantiated against)."""
        if eq not in self._extra_equations:
            self._extra_equations.append(eq)

    def trust(self, truster: str, trustee: str, variables: Iterable[Variable] = ()) -> bool:
        """Check whether ``truster`` trusts ``trustee`` for ``variables``."""
        variables = tuple(variables)
        return any(t.covers(truster, trustee, variables) for t in self.trusts)

    def collect_equations(self) -> Tuple[Equation, ...]:
        """Gather every equation mentioned by actions, statements and Knows properties."""
        found: List[Equation] = []

        def add(eq: Equation):
            if eq not in found:
                found.append(eq)

        for action in self.actions:
            if isinstance(action, Compute):
                add(action.equation)
            elif isinstance(action, Check):
                for eq in action.equations:
                    add(eq)
            elif isinstance(action, VerifyProof):
                for eq in _statement_equations(action.proof):
                    add(eq)
            elif isinstance(action, VerifyAttest):
                for eq in action.attest.equations:
                    add(eq)
        for st in self.statements:
            for eq in _statement_equations(st):
                add(eq)
        for prop in self._properties:
            if isinstance(prop, KnowsProperty):
                add(prop.equation)
        for eq in self._extra_equations:
            add(eq)
        return tuple(found)

    def broadcast_equations(self, max_rounds: Optional[int] = None) -> int:
        """Hand the collected equations to every component until nothing new is learned.

        Args:
            max_rounds: Round bound (defaults to ``config.max_broadcast_rounds``)

        Returns:
            Number of rounds run
        """
        bound = self.config.max_broadcast_rounds if max_rounds is None else max_rounds
        snapshot = self.collect_equations()
        rounds = 0
        while rounds < bound:
            rounds += 1
            changed = False
            for comp in self._components:
                if comp.learn(snapshot,
                              self.config.max_equation_depth,
                              self.config.max_term_depth):
                    changed = True
            if not changed:
                logger.debug("broadcast_fixed_point", rounds=rounds, equations=len(snapshot))
                return rounds
        logger.debug("broadcast_round_bound_reached", rounds=rounds, equations=len(snapshot))
        return rounds

    def __str__(self) -> str:
        return "Architecture(" + ", ".join(c.name for c in self._components) + ")"
