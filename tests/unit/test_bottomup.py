"""
Tests for the bottom-up probabilistic verifier.
"""
import pytest

from capverde.architecture import (
    Architecture,
    Check,
    Component,
    Compute,
    Delete,
    Has,
    Receive,
    Trust,
    TrustAction,
    VerifyAttest,
    VerifyProof,
)
from capverde.config import VerifierConfig
from capverde.deduction import Deduction, DeductionType, Dep
from capverde.model import Attest, Equation, Proof, Term, Variable
from capverde.properties import (
    ConjunctionProperty,
    HasProperty,
    KnowsProperty,
    NegationProperty,
    NotSharedProperty,
    NotStoredProperty,
)
from capverde.verification import BottomUpVerifier, TraceKind


readings, k, enc_r = Variable("readings"), Variable("k"), Variable("encR")
enc_eq = Equation.equality(
    "encR_enc", Term.atom(enc_r), Term.func("Enc", Term.atom(readings), Term.atom(k)))


def _metering(deps=()):
    """SM encrypts its readings and sends them to HN."""
    sm = Component("SM", [Has("SM", readings), Has("SM", k), Compute("SM", enc_eq)],
                   deduction_templates=())
    hn = Component("HN", deps=deps, deduction_templates=())
    return Architecture([sm, hn],
                        inter_component_actions=[Receive("HN", "SM", variables=(enc_r,))])


def test_has_action():
    """Test a Has action establishes possession (H1)."""
    verifier = BottomUpVerifier(_metering())
    prop = HasProperty("SM", readings, 1.0)
    assert verifier.verify(prop)
    assert verifier.rule_for(prop) == "H1"


def test_has_received_and_computed():
    """Test receiving (H2) and computing (H3) establish possession."""
    verifier = BottomUpVerifier(_metering())
    assert verifier.verify(HasProperty("HN", enc_r))
    assert verifier.rule_for(HasProperty("HN", enc_r)) == "H2"
    assert verifier.verify(HasProperty("SM", enc_r))
    assert verifier.rule_for(HasProperty("SM", enc_r)) == "H3"
    assert not verifier.verify(HasProperty("HN", readings))
    assert verifier.rule_for(HasProperty("HN", readings)) is None


def test_has_through_dependence():
    """Test a dependence relation grants possession with its probability (H4)."""
    verifier = BottomUpVerifier(_metering([Dep(readings, (enc_r,), 0.00001)]))
    assert verifier.verify(HasProperty("HN", readings, 0.00001))
    assert verifier.rule_for(HasProperty("HN", readings, 0.00001)) == "H4"
    assert not verifier.verify(HasProperty("HN", readings, 0.001))
    assert not verifier.verify(HasProperty("HN", readings, 1.0))


@pytest.mark.parametrize("prob", [0.00001, 0.000005, 0.000002, 0.000001])
def test_has_monotone_in_probability(prob):
    """Test lower thresholds keep verifying once a threshold verifies."""
    verifier = BottomUpVerifier(_metering([Dep(readings, (enc_r,), 0.00001)]))
    assert verifier.verify(HasProperty("HN", readings, prob))


def test_has_probability_search():
    """Test the probability search returns the largest probed level."""
    verifier = BottomUpVerifier(_metering([Dep(readings, (enc_r,), 0.3)]))
    assert verifier.has_probability("HN", enc_r) == 1.0
    assert verifier.has_probability("HN", readings) == 0.25
    assert verifier.has_probability("HN", k) == 0.0


def test_probe_levels_follow_config():
    """Test probe levels are powers of the configured step down to the floor."""
    config = VerifierConfig(probability_step=10.0, probability_floor=0.0005)
    verifier = BottomUpVerifier(_metering(), config)
    levels = list(verifier._probe_levels())
    assert levels == pytest.approx([1.0, 0.1, 0.01, 0.001])


def test_memoization():
    """Test a repeated query is answered without re-evaluating rules."""
    verifier = BottomUpVerifier(_metering([Dep(readings, (enc_r,), 0.00001)]))
    prop = HasProperty("HN", readings, 0.00001)
    assert verifier.verify(prop)
    evaluations = verifier.rule_evaluations
    assert evaluations > 1
    assert verifier.verify(prop)
    assert verifier.rule_evaluations == evaluations


def test_cyclic_dependences_terminate():
    """Test mutually dependent variables terminate and do not verify."""
    a, b = Variable("a"), Variable("b")
    hn = Component("HN", deps=[Dep(a, (b,), 1.0), Dep(b, (a,), 1.0)], deduction_templates=())
    verifier = BottomUpVerifier(Architecture([hn]))
    assert not verifier.verify(HasProperty("HN", a))
    assert not verifier.verify(HasProperty("HN", b, 0.5))


def test_cyclic_deductions_terminate():
    """Test mutually concluding deductions terminate and do not verify."""
    eq_a = Equation.equality("A", Term.atom("x"), Term.func("f", Term.atom("y")))
    eq_b = Equation.equality("B", Term.atom("y"), Term.func("g", Term.atom("x")))
    comp = Component("X", deduction_templates=())
    assert comp.add_deduction_capability(Deduction("ab", DeductionType.ELSE, (eq_a,), eq_b))
    assert comp.add_deduction_capability(Deduction("ba", DeductionType.ELSE, (eq_b,), eq_a))
    assert not comp.add_deduction_capability(Deduction("aa", DeductionType.ELSE, (eq_a,), eq_a))
    verifier = BottomUpVerifier(Architecture([comp]))
    assert not verifier.verify(KnowsProperty("X", eq_a))


def _chain(length):
    """Component C has the last variable of a dependence chain of given length."""
    chain = [Variable(f"v{i}") for i in range(length)]
    deps = [Dep(chain[i], (chain[i + 1],), 1.0) for i in range(length - 1)]
    return chain, Architecture([Component("C", [Has("C", chain[-1])], deps=deps,
                                          deduction_templates=())])


def test_long_dependence_chain_resolves():
    """Test a dependence chain deeper than the recursion bound does not hold."""
    chain, arch = _chain(200)
    verifier = BottomUpVerifier(arch)
    assert verifier.verify(HasProperty("C", chain[0])) is False
    assert verifier.verify(HasProperty("C", chain[150])) is True


def test_recursion_depth_bound():
    """Test the recursion bound cuts chaining and is recorded in the trace."""
    chain, arch = _chain(4)
    assert BottomUpVerifier(arch).verify(HasProperty("C", chain[0]))

    verifier = BottomUpVerifier(arch, VerifierConfig(max_recursion_depth=4))
    prop = HasProperty("C", chain[0])
    assert not verifier.verify(prop)
    messages = [e.message for e in verifier.trace.entries(prop)]
    assert "Stopping at maximum recursion depth" in messages


def test_knows_computed_and_checked(smart_meter, eqs):
    """Test computing (K1) and checking (K2) an equation establish knowledge."""
    verifier = BottomUpVerifier(smart_meter)
    assert verifier.verify(KnowsProperty("MI", eqs["bill_beta"]))
    assert verifier.rule_for(KnowsProperty("MI", eqs["bill_beta"])) == "K1"
    assert verifier.verify(KnowsProperty("Re", eqs["bill_beta"]))
    assert verifier.rule_for(KnowsProperty("Re", eqs["bill_beta"])) == "K2"
    assert not verifier.verify(KnowsProperty("HN", eqs["bill_beta"]))


def test_knows_by_deduction():
    """Test a deduction capability multiplies its probability into knowledge (Kded)."""
    x, y = Term.atom("x"), Term.atom("y")
    premise = Equation.equality("P", x, Term.func("f", y))
    conclusion = Equation.equality("Q", Term.func("f", y), x)
    comp = Component("X", [Has("X", Variable("y")), Compute("X", premise)],
                     deduction_templates=())
    comp.add_deduction_capability(
        Deduction("flip", DeductionType.ELSE, (premise,), conclusion, 0.5))
    verifier = BottomUpVerifier(Architecture([comp]))
    assert verifier.verify(KnowsProperty("X", conclusion, 0.5))
    assert verifier.rule_for(KnowsProperty("X", conclusion, 0.5)) == "Kded"
    assert not verifier.verify(KnowsProperty("X", conclusion, 1.0))
    assert verifier.knows_probability("X", conclusion) == 0.5


def test_knows_after_broadcast():
    """Test knowledge derived through instantiated default templates."""
    x, y = Term.atom("x"), Term.atom("y")
    premise = Equation.equality("P", x, Term.func("f", y))
    comp = Component("X", [Has("X", Variable("y")), Compute("X", premise)])
    arch = Architecture([comp])
    arch.broadcast_equations()
    verifier = BottomUpVerifier(arch)
    flipped = Equation.equality("Q", Term.func("f", y), x)
    assert verifier.verify(KnowsProperty("X", flipped))
    assert verifier.rule_for(KnowsProperty("X", flipped)) == "Kded"


def _statements(trusts=(), trust_actions=()):
    proven = Equation.equality("proven", Term.atom("a"), Term.func("f", Term.atom("b")))
    nested = Equation.equality("nested", Term.atom("c"), Term.func("g", Term.atom("d")))
    direct = Equation.equality("direct", Term.atom("e"), Term.func("h", Term.atom("d")))
    proof = Proof("SM", (proven, Attest("MI", (nested,))))
    attest = Attest("MI", (direct,))
    re = Component("Re", [VerifyProof("Re", proof), VerifyAttest("Re", attest),
                          *trust_actions], deduction_templates=())
    arch = Architecture(
        [Component("SM", deduction_templates=()), Component("MI", deduction_templates=()), re],
        inter_component_actions=[Receive("Re", "SM", statements=(proof,)),
                                 Receive("Re", "MI", statements=(attest,))],
        trusts=trusts,
    )
    return BottomUpVerifier(arch), proven, nested, direct


def test_knows_from_proof():
    """Test equations of a verified proof are known (K3)."""
    verifier, proven, _, _ = _statements()
    assert verifier.verify(KnowsProperty("Re", proven))
    assert verifier.rule_for(KnowsProperty("Re", proven)) == "K3"
    assert not verifier.verify(KnowsProperty("SM", proven))


def test_attested_equations_need_trust():
    """Test attested equations are known only if the attester is trusted (K4, K5)."""
    verifier, _, nested, direct = _statements()
    assert not verifier.verify(KnowsProperty("Re", nested))
    assert not verifier.verify(KnowsProperty("Re", direct))

    verifier, _, nested, direct = _statements(trusts=[Trust("Re", "MI")])
    assert verifier.verify(KnowsProperty("Re", nested))
    assert verifier.rule_for(KnowsProperty("Re", nested)) == "K4"
    assert verifier.verify(KnowsProperty("Re", direct))
    assert verifier.rule_for(KnowsProperty("Re", direct)) == "K5"


def test_scoped_trust_covers_equation_atoms():
    """Test scoped trust must cover every variable of the attested equation."""
    scope = (Variable("c"), Variable("d"))
    verifier, _, nested, direct = _statements(trusts=[Trust("Re", "MI", scope)])
    assert verifier.verify(KnowsProperty("Re", nested))
    assert not verifier.verify(KnowsProperty("Re", direct))


def test_trust_action_grants_blind_trust():
    """Test a Trust action lets the truster accept attestations."""
    verifier, _, _, direct = _statements(trust_actions=[TrustAction("Re", "MI")])
    assert verifier.verify(KnowsProperty("Re", direct))


def test_not_shared(smart_meter, v):
    """Test NotShared holds for local variables and for variables never sent."""
    verifier = BottomUpVerifier(smart_meter)
    assert verifier.verify(NotSharedProperty("SM", v["k"]))
    assert verifier.rule_for(NotSharedProperty("SM", v["k"])) == "SH1"
    assert verifier.verify(NotSharedProperty("Re", v["ppd"]))
    assert verifier.rule_for(NotSharedProperty("Re", v["ppd"])) == "SH2"
    assert not verifier.verify(NotSharedProperty("HN", v["encR"]))


def test_not_stored(smart_meter, v):
    """Test NotStored holds for never received variables or short usage."""
    verifier = BottomUpVerifier(smart_meter)
    assert verifier.verify(NotStoredProperty("Re", v["readings"], 1))
    assert verifier.rule_for(NotStoredProperty("Re", v["readings"], 1)) == "ST1"
    assert verifier.usage_count("Re", v["ppd"]) == 2
    assert verifier.verify(NotStoredProperty("Re", v["ppd"], 3))
    assert verifier.rule_for(NotStoredProperty("Re", v["ppd"], 3)) == "ST2"
    assert not verifier.verify(NotStoredProperty("Re", v["ppd"], 2))


def test_usage_counter_decrements_on_delete():
    """Test deleting a variable lowers the running usage count."""
    r = Variable("r")
    check = Equation.equality("c", Term.atom(r), Term.func("h", Term.atom("s")))
    comp = Component("SM", [Has("SM", r), Has("SM", Variable("s")),
                            Check("SM", (check,)), Delete("SM", r), Check("SM", (check,))],
                     deduction_templates=())
    verifier = BottomUpVerifier(Architecture([comp]))
    assert verifier.usage_count("SM", r) == 1


def test_conjunction_and_negation():
    """Test conjunction needs both parts and negation inverts its part."""
    verifier = BottomUpVerifier(_metering())
    has_sm = HasProperty("SM", readings)
    has_hn = HasProperty("HN", readings)
    assert verifier.verify(ConjunctionProperty(has_sm, HasProperty("HN", enc_r)))
    assert verifier.rule_for(ConjunctionProperty(has_sm, HasProperty("HN", enc_r))) == "I^"
    assert not verifier.verify(ConjunctionProperty(has_sm, has_hn))
    assert verifier.verify(NegationProperty(has_hn))
    assert verifier.rule_for(NegationProperty(has_hn)) == "I_neg"
    assert not verifier.verify(NegationProperty(has_sm))


def test_smart_meter_home_network(smart_meter, v):
    """Test HN derives the readings through the pseudonymized data and a guessed password."""
    verifier = BottomUpVerifier(smart_meter)
    assert verifier.consistency.success
    assert verifier.has_probability("HN", v["secret"]) == 2 ** -7
    assert verifier.has_probability("HN", v["pw"]) == 2 ** -7
    assert verifier.verify(HasProperty("HN", v["readings"], 0.001))
    assert verifier.rule_for(HasProperty("HN", v["readings"], 0.001)) == "H4"
    assert not verifier.verify(HasProperty("HN", v["readings"], 0.01))
    assert not verifier.verify(NegationProperty(HasProperty("HN", v["readings"], 0.001)))


def test_inconsistent_architecture_still_answers():
    """Test an inconsistent architecture is flagged but queries are answered."""
    ghost = Equation.equality("g", Term.atom("a"), Term.func("f", Term.atom("ghost")))
    comp = Component("X", [Has("X", readings), Compute("X", ghost)], deduction_templates=())
    verifier = BottomUpVerifier(Architecture([comp]))
    assert not verifier.consistency.success
    assert verifier.verify(HasProperty("X", readings))


def test_trace():
    """Test the trace records the rule applications of a query."""
    verifier = BottomUpVerifier(_metering([Dep(readings, (enc_r,), 0.00001)]))
    prop = HasProperty("HN", readings, 0.00001)
    verifier.verify(prop)
    entries = verifier.trace.entries(prop)
    assert entries[0].message == "Current property to prove: Has_HN^1e-05(readings)"
    assert entries[0].kind is TraceKind.START
    assert entries[-1].message == "Rule H4 applied for statement: Has_HN^1e-05(readings)"
    assert any(entry.depth > 0 for entry in entries)

    text = verifier.trace.format_trace(prop)
    assert "Trying Rule H1..." in text
    assert "     Current property to prove: Has_HN^1.0(encR)" in text
    assert verifier.trace.format_trace(HasProperty("SM", k)) == \
        "No trace recorded for Has_SM^1.0(k)"
