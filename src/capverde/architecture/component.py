"""
Components: the actors of an architecture.

A component owns its actions, dependence relations and deduction templates.
The equations it knows and the deduction capabilities derived from them
grow only through ``learn``, which the owning Architecture drives during
equation broadcast.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from ..deduction.deduction import Deduction, Dep
from ..deduction.defaults import default_deductions
from ..deduction.instantiation import instantiate_deductions
from ..model.equation import Equation
from ..model.variable import Variable
from .action import Action, Compute, Has

logger = structlog.get_logger().bind(system="architecture.component")


class Component:
    """A named architecture component.

    Components are identified by name; two components with the same name
    compare equal.
    """

    def __init__(self,
                 name: str,
                 actions: Iterable[Action] = (),
                 deps: Iterable[Dep] = (),
                 deduction_templates: Optional[Iterable[Deduction]] = None,
                 composition: Optional[str] = None):
        """Create a component.

        Args:
            name: Component name
            actions: Actions performed by this component
            deps: Dependence relations available to this component
            deduction_templates: Deduction templates (defaults to the four
                built-in templates)
            composition: Name of the containing component, if any
        """
        self.name = name
        self.composition = composition
        self._actions: List[Action] = []
        self._deps: List[Dep] = list(deps)
        if deduction_templates is None:
            deduction_templates = default_deductions()
        self._templates: List[Deduction] = list(deduction_templates)
        self._capabilities: List[Deduction] = []
        self._equations: Tuple[Equation, ...] = ()
        for action in actions:
            self.add_action(action)

    @property
    def actions(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def variables(self) -> Tuple[Variable, ...]:
        """Variables this component is observed to possess (Has and Compute)."""
        found: List[Variable] = []
        for action in self._actions:
            if isinstance(action, Has):
                var = action.variable
            elif isinstance(action, Compute):
                var = action.equation.lhs
            else:
                continue
            if var is not None and var not in found:
                found.append(var)
        return tuple(found)

    @property
    def deps(self) -> Tuple[Dep, ...]:
        return tuple(self._deps)

    @property
    def deduction_templates(self) -> Tuple[Deduction, ...]:
        return tuple(self._templates)

    @property
    def deduction_capabilities(self) -> Tuple[Deduction, ...]:
        return tuple(self._capabilities)

    @property
    def known_equations(self) -> Tuple[Equation, ...]:
        return self._equations

    def add_action(self, action: Action):
        if action.component != self.name:
            raise ValueError(f"Action {action} is not performed by component {self.name}")
        if action not in self._actions:
            self._actions.append(action)

    def add_dependence(self, dep: Dep):
        if dep not in self._deps:
            self._deps.append(dep)

    def add_deduction(self, template: Deduction):
        if template not in self._templates:
            self._templates.append(template)

    def add_deduction_capability(self,
                                 deduction: Deduction,
                                 max_equation_depth: int = 3,
                                 max_term_depth: int = 2) -> bool:
        """Add an explicit deduction this component can apply.

        Templated, reflexive, too complex and redundant deductions are
        refused. An accepted deduction's conclusion becomes a known equation.

        Returns:
            True if the deduction was accepted
        """
        reason = deduction.rejection_reason(max_equation_depth, max_term_depth)
        if reason is not None:
            logger.debug("deduction_rejected",
                         component=self.name, deduction=deduction.name, reason=reason)
            return False
        if deduction not in self._capabilities:
            self._capabilities.append(deduction)
        if deduction.conclusion not in self._equations:
            self._equations = self._equations + (deduction.conclusion,)
        return True

    def learn(self,
              equations: Sequence[Equation],
              max_equation_depth: int = 3,
              max_term_depth: int = 2) -> bool:
        """Run one instantiation round over a snapshot of equations.

        The snapshot is merged into the known equations, the deduction
        templates are instantiated against the merged set and every accepted
        deduction becomes a capability.

        Args:
            equations: Equations broadcast to this component
            max_equation_depth: Complexity bound for conclusions
            max_term_depth: Complexity bound for conclusion operands

        Returns:
            True if anything new (equation or capability) was learned
        """
        known = list(self._equations)
        for eq in equations:
            if eq not in known:
                known.append(eq)
        changed = len(known) != len(self._equations)
        self._equations = tuple(known)

        result = instantiate_deductions(self._templates, self._equations,
                                        max_equation_depth, max_term_depth)
        for deduction in result.accepted:
            if deduction in self._capabilities:
                continue
            self._capabilities.append(deduction)
            changed = True
            if deduction.conclusion not in self._equations:
                self._equations = self._equations + (deduction.conclusion,)

        logger.debug("component_learned",
                     component=self.name,
                     equations=len(self._equations),
                     capabilities=len(self._capabilities),
                     rejected=len(result.rejected),
                     changed=changed)
        return changed

    def __eq__(self, other):
        if not isinstance(other, Component):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Component({self.name!r})"

    def __str__(self) -> str:
        return self.name
