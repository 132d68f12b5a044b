"""
Name-keyed construction of architecture models.

The builder is the entry point for front ends that assemble a model from
user input. Entities reference each other by name (terms and equations also
by their rendered form). Malformed input, such as an unparsable probability
or a reference to an unknown entity, is logged and the entity is not added;
every ``add_*`` method returns the created object or None.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Union

import structlog

from .architecture.action import (
    Action,
    Check,
    Compute,
    Delete,
    Has,
    Receive,
    TrustAction,
    VerifyAttest,
    VerifyProof,
)
from .architecture.architecture import Architecture
from .architecture.component import Component
from .architecture.trust import Composition, Trust
from .config import VerifierConfig
from .deduction.deduction import Deduction, DeductionType, Dep
from .deduction.defaults import default_deductions
from .errors import ModelError
from .model.equation import Equation, Relation
from .model.statement import Attest, Proof, Statement
from .model.term import Operator, Term
from .model.variable import Variable
from .properties.property import (
    ConjunctionProperty,
    HasProperty,
    KnowsProperty,
    NegationProperty,
    NotSharedProperty,
    NotStoredProperty,
    Property,
)
from .verification.bottomup import BottomUpVerifier

logger = structlog.get_logger().bind(system="builder")

Number = Union[str, float, int]


def _parse_probability(value: Number) -> float:
    try:
        prob = float(value)
    except (TypeError, ValueError):
        raise ModelError(str(value), "probability is not a number") from None
    if not 0.0 <= prob <= 1.0:
        raise ModelError(str(value), "probability must lie in [0, 1]")
    return prob


def _parse_bound(value: Number) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ModelError(str(value), "bound is not an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ModelError(str(value), "bound is not an integer") from None


class ArchitectureBuilder:
    """Collects model entities by name and assembles an Architecture.

    Example:
        >>> b = ArchitectureBuilder()
        >>> _ = b.add_component("SM")
        >>> _ = b.add_variable("readings")
        >>> _ = b.add_has("SM", "readings")
        >>> _ = b.add_prop_has("SM", "readings", "1.0")
        >>> b.verify("Has_SM^1.0(readings)")
        True
    """

    def __init__(self, config: Optional[VerifierConfig] = None):
        self.config = config if config is not None else VerifierConfig()
        self._components: Dict[str, Optional[str]] = {}
        self._variables: Dict[str, Variable] = {}
        self._terms: Dict[str, Term] = {}
        self._equations: Dict[str, Equation] = {}
        self._statements: Dict[str, Statement] = {}
        self._actions: List[Action] = []
        self._trusts: List[Trust] = []
        self._compositions: List[Composition] = []
        self._deps: Dict[str, List[Dep]] = {}
        self._deductions: Dict[str, Deduction] = {d.name: d for d in default_deductions()}
        self._granted: Dict[str, List[Deduction]] = {}
        self._properties: Dict[str, Property] = {}
        self.architecture: Optional[Architecture] = None
        self.verifier: Optional[BottomUpVerifier] = None

    def _reject(self, kind: str, err: ModelError) -> None:
        logger.warning("model_input_rejected", kind=kind, entity=err.entity, reason=err.reason)
        return None

    def _component(self, name: str) -> str:
        if name not in self._components:
            raise ModelError(str(name), "unknown component")
        return name

    def _variable(self, name: str) -> Variable:
        try:
            return self._variables[name]
        except KeyError:
            raise ModelError(str(name), "unknown variable") from None

    def _term(self, key: str) -> Term:
        try:
            return self._terms[key]
        except KeyError:
            raise ModelError(str(key), "unknown term") from None

    def _equation(self, key: str) -> Equation:
        try:
            return self._equations[key]
        except KeyError:
            raise ModelError(str(key), "unknown equation") from None

    def _statement(self, key: str) -> Statement:
        try:
            return self._statements[key]
        except KeyError:
            raise ModelError(str(key), "unknown statement") from None

    def _property(self, key: str) -> Property:
        try:
            return self._properties[key]
        except KeyError:
            raise ModelError(str(key), "unknown property") from None

    # Entities

    def add_component(self, name: str, composition: Optional[str] = None) -> Optional[str]:
        """Register a component; ``composition`` names the containing component."""
        if not name:
            return self._reject("component", ModelError(repr(name), "empty name"))
        if composition is not None and composition not in self._components:
            return self._reject("component", ModelError(composition, "unknown component"))
        self._components[name] = composition
        return name

    def add_variable(self, name: str) -> Optional[Variable]:
        if not name:
            return self._reject("variable", ModelError(repr(name), "empty name"))
        var = Variable(name)
        self._variables[name] = var
        self._terms[name] = Term.atom(var)
        return var

    def add_term(self,
                 op: Operator,
                 children: Sequence[str],
                 func_name: Optional[str] = None) -> Optional[Term]:
        """Register a composition of already registered terms (by rendered form)."""
        try:
            subterms = [self._term(key) for key in children]
            if op is Operator.FUNC and not func_name:
                raise ModelError(str(children), "function composition needs a name")
            term = Term.compose(op, *subterms, func_name=func_name)
        except ModelError as err:
            return self._reject("term", err)
        except ValueError as err:
            return self._reject("term", ModelError(str(children), str(err)))
        self._terms[str(term)] = term
        return term

    def _register_equation(self, eq: Equation) -> Equation:
        self._equations[eq.name] = eq
        self._equations[str(eq)] = eq
        return eq

    def add_equation(self,
                     name: str,
                     left: str,
                     right: str,
                     relation: Relation = Relation.EQUALITY) -> Optional[Equation]:
        try:
            eq = Equation.relate(name, relation, self._term(left), self._term(right))
        except ModelError as err:
            return self._reject("equation", err)
        return self._register_equation(eq)

    def add_conjunction(self, name: str, first: str, second: str) -> Optional[Equation]:
        try:
            eq = Equation.conjunction(name, self._equation(first), self._equation(second))
        except ModelError as err:
            return self._reject("equation", err)
        return self._register_equation(eq)

    def add_attest(self, name: str, component: str, equations: Iterable[str]) -> Optional[Attest]:
        try:
            attest = Attest(self._component(component),
                            tuple(self._equation(key) for key in equations))
            if not attest.equations:
                raise ModelError(name, "attestation without equations")
        except ModelError as err:
            return self._reject("attest", err)
        self._statements[name] = attest
        return attest

    def add_proof(self, name: str, component: str, items: Iterable[str]) -> Optional[Proof]:
        """Register a proof over equations and attestations (by name)."""
        try:
            resolved: List[Union[Equation, Attest]] = []
            for key in items:
                if key in self._equations:
                    resolved.append(self._equations[key])
                elif isinstance(self._statements.get(key), Attest):
                    resolved.append(self._statements[key])
                else:
                    raise ModelError(str(key), "unknown equation or attestation")
            if not resolved:
                raise ModelError(name, "proof without items")
            proof = Proof(self._component(component), tuple(resolved))
        except ModelError as err:
            return self._reject("proof", err)
        self._statements[name] = proof
        return proof

    # Relations

    def add_trust(self,
                  truster: str,
                  trustee: str,
                  variables: Iterable[str] = ()) -> Optional[Trust]:
        try:
            trust = Trust(self._component(truster), self._component(trustee),
                          tuple(self._variable(v) for v in variables))
        except ModelError as err:
            return self._reject("trust", err)
        self._trusts.append(trust)
        return trust

    def add_composition(self, container: str, component: str) -> Optional[Composition]:
        try:
            comp = Composition(self._component(container), self._component(component))
        except ModelError as err:
            return self._reject("composition", err)
        self._compositions.append(comp)
        return comp

    def add_dep(self,
                component: str,
                variable: str,
                requires: Iterable[str],
                probability: Number) -> Optional[Dep]:
        try:
            prob = _parse_probability(probability)
            owner = self._component(component)
            dep = Dep(self._variable(variable),
                      tuple(self._variable(v) for v in requires),
                      prob)
        except ModelError as err:
            return self._reject("dep", err)
        self._deps.setdefault(owner, []).append(dep)
        return dep

    def add_deduction(self,
                      name: str,
                      premises: Iterable[str],
                      conclusion: str,
                      probability: Number,
                      deduction_type: DeductionType = DeductionType.ELSE) -> Optional[Deduction]:
        """Register a deduction template over registered equations."""
        try:
            prob = _parse_probability(probability)
            deduction = Deduction(name, deduction_type,
                                  tuple(self._equation(key) for key in premises),
                                  self._equation(conclusion),
                                  prob)
            if not deduction.premises:
                raise ModelError(name, "deduction without premises")
        except ModelError as err:
            return self._reject("deduction", err)
        self._deductions[name] = deduction
        return deduction

    def add_deduction_capability(self,
                                 component: str,
                                 deductions: Iterable[str]) -> Optional[List[Deduction]]:
        """Grant deductions (by name) to a component.

        Granted templates replace the default templates; components without
        a granted template keep the defaults. Concrete deductions become
        capabilities directly.
        """
        try:
            owner = self._component(component)
            granted = []
            for name in deductions:
                if name not in self._deductions:
                    raise ModelError(str(name), "unknown deduction")
                granted.append(self._deductions[name])
            if not granted:
                raise ModelError(component, "no deductions granted")
        except ModelError as err:
            return self._reject("deduction_capability", err)
        self._granted.setdefault(owner, []).extend(granted)
        return granted

    # Actions

    def _add_action(self, action: Action) -> Action:
        if action not in self._actions:
            self._actions.append(action)
        return action

    def add_has(self, component: str, variable: str) -> Optional[Has]:
        try:
            action = Has(self._component(component), self._variable(variable))
        except ModelError as err:
            return self._reject("has", err)
        return self._add_action(action)

    def add_compute(self, component: str, equation: str) -> Optional[Compute]:
        try:
            eq = self._equation(equation)
            if eq.lhs is None:
                raise ModelError(equation, "computations need an equality")
            action = Compute(self._component(component), eq)
        except ModelError as err:
            return self._reject("compute", err)
        return self._add_action(action)

    def add_receive(self,
                    receiver: str,
                    sender: str,
                    statements: Iterable[str] = (),
                    variables: Iterable[str] = ()) -> Optional[Receive]:
        try:
            action = Receive(self._component(receiver),
                             self._component(sender),
                             tuple(self._statement(key) for key in statements),
                             tuple(self._variable(v) for v in variables))
            if not action.statements and not action.variables:
                raise ModelError(str(action), "nothing is transmitted")
        except ModelError as err:
            return self._reject("receive", err)
        return self._add_action(action)

    def add_check(self, component: str, equations: Iterable[str]) -> Optional[Check]:
        try:
            action = Check(self._component(component),
                           tuple(self._equation(key) for key in equations))
            if not action.equations:
                raise ModelError(component, "check without equations")
        except ModelError as err:
            return self._reject("check", err)
        return self._add_action(action)

    def add_delete(self, component: str, variable: str) -> Optional[Delete]:
        try:
            action = Delete(self._component(component), self._variable(variable))
        except ModelError as err:
            return self._reject("delete", err)
        return self._add_action(action)

    def add_verify(self, component: str, statement: str) -> Optional[Action]:
        """Add a VerifyProof or VerifyAttest action, depending on the statement kind."""
        try:
            owner = self._component(component)
            st = self._statement(statement)
        except ModelError as err:
            return self._reject("verify", err)
        if isinstance(st, Proof):
            return self._add_action(VerifyProof(owner, st))
        return self._add_action(VerifyAttest(owner, st))

    def add_trust_action(self, component: str, partner: str) -> Optional[TrustAction]:
        try:
            action = TrustAction(self._component(component), self._component(partner))
        except ModelError as err:
            return self._reject("trust_action", err)
        return self._add_action(action)

    # Properties

    def _add_property(self, prop: Property) -> Property:
        self._properties[str(prop)] = prop
        if self.architecture is not None:
            self.architecture.add_property(prop)
        return prop

    def add_prop_has(self, component: str, variable: str,
                     probability: Number = 1.0) -> Optional[HasProperty]:
        try:
            prop = HasProperty(self._component(component), self._variable(variable),
                               _parse_probability(probability))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    def add_prop_knows(self, component: str, equation: str,
                       probability: Number = 1.0) -> Optional[KnowsProperty]:
        try:
            prop = KnowsProperty(self._component(component), self._equation(equation),
                                 _parse_probability(probability))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    def add_prop_not_shared(self, component: str, variable: str) -> Optional[NotSharedProperty]:
        try:
            prop = NotSharedProperty(self._component(component), self._variable(variable))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    def add_prop_not_stored(self, component: str, variable: str,
                            bound: Number) -> Optional[NotStoredProperty]:
        try:
            prop = NotStoredProperty(self._component(component), self._variable(variable),
                                     _parse_bound(bound))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    def add_prop_conjunction(self, first: str, second: str) -> Optional[ConjunctionProperty]:
        try:
            prop = ConjunctionProperty(self._property(first), self._property(second))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    def add_prop_negation(self, inner: str) -> Optional[NegationProperty]:
        try:
            prop = NegationProperty(self._property(inner))
        except ModelError as err:
            return self._reject("property", err)
        return self._add_property(prop)

    @property
    def properties(self) -> Dict[str, Property]:
        return dict(self._properties)

    def remove(self, key: str) -> bool:
        """Remove an entity by name or rendered form.

        Returns:
            True if something was removed
        """
        removed = False
        for registry in (self._variables, self._terms, self._statements,
                         self._deductions, self._properties):
            if registry.pop(key, None) is not None:
                removed = True
        eq = self._equations.get(key)
        if eq is not None:
            for alias in [k for k, v in self._equations.items() if v is eq]:
                del self._equations[alias]
            removed = True
        if key in self._components:
            del self._components[key]
            self._granted.pop(key, None)
            self._deps.pop(key, None)
            removed = True
        for collection in (self._actions, self._trusts, self._compositions):
            for item in [item for item in collection if str(item) == key]:
                collection.remove(item)
                removed = True
        if removed:
            logger.debug("model_entity_removed", key=key)
        return removed

    # Assembly and queries

    def finish(self) -> Architecture:
        """Assemble the architecture, broadcast equations and create the verifier.

        Receive actions become inter-component actions; all other actions are
        attached to their component.
        """
        components = []
        for name, container in self._components.items():
            granted = self._granted.get(name, [])
            templates = [d for d in granted if d.contains_match_var()]
            comp = Component(name,
                             deps=self._deps.get(name, ()),
                             deduction_templates=templates if templates else default_deductions(),
                             composition=container if container in self._components else None)
            # concrete deductions have nothing to instantiate
            for deduction in granted:
                if not deduction.contains_match_var():
                    comp.add_deduction_capability(deduction,
                                                  self.config.max_equation_depth,
                                                  self.config.max_term_depth)
            components.append(comp)
        by_name = {comp.name: comp for comp in components}

        inter_component: List[Action] = []
        for action in self._actions:
            if isinstance(action, Receive):
                inter_component.append(action)
            elif action.component in by_name:
                by_name[action.component].add_action(action)

        arch = Architecture(components,
                            inter_component_actions=inter_component,
                            trusts=self._trusts,
                            compositions=self._compositions,
                            properties=self._properties.values(),
                            config=self.config)
        for eq in self._equations.values():
            arch.add_equation(eq)
        rounds = arch.broadcast_equations()
        logger.info("architecture_finished",
                    components=len(components),
                    actions=len(arch.actions),
                    equations=len(arch.equations),
                    broadcast_rounds=rounds)

        self.architecture = arch
        self.verifier = BottomUpVerifier(arch, self.config)
        return arch

    def verify(self, key: str) -> bool:
        """Verify a registered property by its rendered form.

        Unknown properties are logged and reported as not holding.
        """
        try:
            prop = self._property(key)
        except ModelError as err:
            self._reject("query", err)
            return False
        if self.verifier is None:
            self.finish()
        return self.verifier.verify(prop)

    def trace(self, key: str) -> str:
        """Formatted rule trace of a verified property."""
        prop = self._properties.get(key)
        if prop is None or self.verifier is None:
            return f"No trace recorded for {key}"
        return self.verifier.trace.format_trace(prop)
