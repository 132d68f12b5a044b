"""
Tests for name-keyed model construction.
"""
import pytest

from capverde.architecture import Compute, Receive, VerifyAttest, VerifyProof
from capverde.builder import ArchitectureBuilder
from capverde.config import VerifierConfig
from capverde.model import Operator, Relation, Variable
from capverde.properties import HasProperty


@pytest.fixture
def builder():
    """SM encrypts its readings for HN, which may guess the readings."""
    b = ArchitectureBuilder(VerifierConfig(max_broadcast_rounds=2))
    for comp in ("SM", "HN", "MI"):
        b.add_component(comp)
    for var in ("readings", "k", "encR"):
        b.add_variable(var)
    b.add_term(Operator.FUNC, ["readings", "k"], "Enc")
    b.add_term(Operator.FUNC, ["encR", "k"], "Dec")
    b.add_equation("encR_enc", "encR", "Enc(readings, k)")
    b.add_equation("readings_dec", "readings", "Dec(encR, k)")
    b.add_has("SM", "readings")
    b.add_has("SM", "k")
    b.add_compute("SM", "encR_enc")
    b.add_receive("HN", "SM", variables=["encR"])
    b.add_dep("HN", "readings", ["encR"], "0.00001")
    return b


def test_builder_creates_entities(builder):
    """Test entities are created and returned."""
    assert builder.add_variable("bill") == Variable("bill")
    term = builder.add_term(Operator.ADD, ["readings", "k"])
    assert str(term) == "readings + k"
    eq = builder.add_equation("sum", "bill", "readings + k")
    assert str(eq) == "bill = readings + k"
    action = builder.add_compute("SM", "sum")
    assert isinstance(action, Compute)
    assert str(builder.add_receive("MI", "SM", variables=["encR"])) == "Receive_MI,SM([],[encR])"


def test_verify_by_key(builder):
    """Test properties are verified by their rendered form."""
    prop = builder.add_prop_has("HN", "readings", "0.00001")
    assert str(prop) == "Has_HN^1e-05(readings)"
    builder.add_prop_has("HN", "readings", 0.001)
    assert builder.verify("Has_HN^1e-05(readings)")
    assert not builder.verify("Has_HN^0.001(readings)")
    assert builder.architecture is not None
    assert builder.verifier.consistency.success


def test_unknown_property_key(builder):
    """Test an unknown property is reported as not holding."""
    assert not builder.verify("Has_HN^1.0(nothing)")


def test_properties_added_after_finish(builder):
    """Test properties added after finishing are known to the architecture."""
    builder.finish()
    prop = builder.add_prop_has("HN", "encR")
    assert prop in builder.architecture.properties
    assert builder.verify(str(prop))
    assert set(builder.properties) == {str(prop)}


@pytest.mark.parametrize("probability", ["abc", "2", -0.5, None])
def test_malformed_probability_is_rejected(builder, probability):
    """Test unparsable or out-of-range probabilities are not added."""
    assert builder.add_prop_has("HN", "readings", probability) is None
    assert builder.add_dep("HN", "readings", ["encR"], probability) is None
    assert builder.properties == {}


def test_unknown_references_are_rejected(builder):
    """Test references to unknown entities are not added."""
    assert builder.add_has("Nobody", "readings") is None
    assert builder.add_has("SM", "nothing") is None
    assert builder.add_equation("bad", "readings", "Nope(x)") is None
    assert builder.add_compute("SM", "bad") is None
    assert builder.add_trust("SM", "Nobody") is None
    assert builder.add_component("TV", composition="Nobody") is None
    assert builder.add_prop_conjunction("a", "b") is None
    assert builder.add_deduction_capability("SM", ["Unknown"]) is None


def test_malformed_entities_are_rejected(builder):
    """Test structurally invalid input is not added."""
    assert builder.add_component("") is None
    assert builder.add_term(Operator.FUNC, ["readings"]) is None
    assert builder.add_term(Operator.ADD, ["readings"]) is None
    assert builder.add_receive("MI", "SM") is None
    assert builder.add_prop_not_stored("SM", "readings", "many") is None
    assert builder.add_check("SM", []) is None
    builder.add_equation("lt", "readings", "k", Relation.LESS)
    assert builder.add_compute("SM", "lt") is None


@pytest.mark.parametrize("bound", [3.9, "3.9", float("inf")])
def test_non_integral_bound_is_rejected(builder, bound):
    """Test storage bounds must be whole numbers."""
    assert builder.add_prop_not_stored("HN", "encR", bound) is None
    assert builder.properties == {}


@pytest.mark.parametrize("bound", [3, 3.0, "3"])
def test_integral_bound_is_accepted(builder, bound):
    """Test whole-number storage bounds are accepted in any numeric form."""
    prop = builder.add_prop_not_stored("HN", "encR", bound)
    assert str(prop) == "notStored_HN(encR, 3)"


def test_statements_and_verification_actions(builder):
    """Test attestations and proofs are verified by kind."""
    attest = builder.add_attest("att", "SM", ["encR_enc"])
    proof = builder.add_proof("prf", "SM", ["readings_dec", "att"])
    assert proof.attests == (attest,)
    assert isinstance(builder.add_verify("MI", "prf"), VerifyProof)
    assert isinstance(builder.add_verify("MI", "att"), VerifyAttest)
    assert isinstance(builder.add_receive("MI", "SM", statements=["prf"]), Receive)
    builder.add_trust("MI", "SM")
    builder.add_prop_knows("MI", "readings_dec")
    builder.add_prop_knows("MI", "encR_enc")
    assert builder.verify("Knows_MI^1.0(readings = Dec(encR, k))")
    assert builder.verify("Knows_MI^1.0(encR = Enc(readings, k))")


def test_custom_deduction_capability(builder):
    """Test a granted concrete deduction becomes a capability."""
    deduction = builder.add_deduction("Decrypt", ["encR_enc"], "readings_dec", "0.9")
    assert deduction is not None
    assert builder.add_deduction("Empty", [], "readings_dec", 1.0) is None
    assert builder.add_deduction_capability("SM", ["Decrypt"]) == [deduction]
    builder.add_prop_knows("SM", "readings_dec", "0.9")
    builder.add_prop_knows("SM", "readings_dec", "1.0")
    builder.finish()
    assert deduction in builder.architecture.component("SM").deduction_capabilities
    assert builder.verify("Knows_SM^0.9(readings = Dec(encR, k))")
    assert not builder.verify("Knows_SM^1.0(readings = Dec(encR, k))")


def test_granted_templates_replace_defaults(builder):
    """Test granting a template restricts the component to it."""
    builder.add_deduction_capability("MI", ["Symmetry"])
    arch = builder.finish()
    templates = arch.component("MI").deduction_templates
    assert [d.name for d in templates] == ["Symmetry"]
    assert len(arch.component("SM").deduction_templates) == 4


def test_composition_and_trust_action(builder):
    """Test compositions and trust actions reach the architecture."""
    assert builder.add_component("TV", composition="HN") == "TV"
    builder.add_composition("HN", "MI")
    builder.add_trust_action("MI", "SM")
    arch = builder.finish()
    containers = {(c.container, c.component) for c in arch.compositions}
    assert containers == {("HN", "TV"), ("HN", "MI")}
    assert arch.trust("MI", "SM")


def test_negation_and_conjunction_properties(builder):
    """Test composite properties are built from registered keys."""
    builder.add_prop_has("HN", "encR")
    builder.add_prop_has("HN", "readings")
    neg = builder.add_prop_negation("Has_HN^1.0(readings)")
    conj = builder.add_prop_conjunction("Has_HN^1.0(encR)", str(neg))
    assert str(conj) == "Has_HN^1.0(encR) AND NOT Has_HN^1.0(readings)"
    assert builder.verify(str(conj))
    assert builder.add_prop_not_shared("SM", "k") is not None
    assert builder.verify("notShared_SM(k)")


def test_trace(builder):
    """Test the formatted trace of a verified property."""
    builder.add_prop_has("HN", "readings", "0.00001")
    assert builder.trace("Has_HN^1e-05(readings)") == "No trace recorded for Has_HN^1e-05(readings)"
    builder.verify("Has_HN^1e-05(readings)")
    text = builder.trace("Has_HN^1e-05(readings)")
    assert text.startswith("Current property to prove: Has_HN^1e-05(readings)")
    assert text.endswith("Rule H4 applied for statement: Has_HN^1e-05(readings)")


def test_remove(builder):
    """Test entities are removed by name or rendered form."""
    builder.add_prop_has("SM", "readings")
    assert builder.remove("Has_SM^1.0(readings)")
    assert builder.properties == {}
    assert builder.remove("Receive_HN,SM([],[encR])")
    assert builder.remove("encR_enc")
    assert builder.add_compute("SM", "encR = Enc(readings, k)") is None
    assert builder.remove("MI")
    assert builder.add_has("MI", "k") is None
    assert not builder.remove("nothing")


def test_finish_builds_architecture(builder):
    """Test finishing assembles components, actions and verifier."""
    arch = builder.finish()
    assert [c.name for c in arch.components] == ["SM", "HN", "MI"]
    assert len(arch.component("SM").actions) == 3
    assert len(arch.inter_component_actions) == 1
    assert builder.verifier.verify(HasProperty("HN", Variable("encR")))
