"""
Pytest configuration and fixtures for capverde tests.
"""
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from capverde.architecture import (  # noqa: E402
    Architecture,
    Check,
    Component,
    Compute,
    Has,
    Receive,
)
from capverde.config import VerifierConfig  # noqa: E402
from capverde.deduction import Dep  # noqa: E402
from capverde.model import Equation, Term, Variable  # noqa: E402


@pytest.fixture
def config():
    """Default verifier settings."""
    return VerifierConfig()


@pytest.fixture
def v():
    """Variables of the smart energy metering case study."""
    names = ["readings", "k", "bill", "pw", "secret", "encBill", "encR", "ppd"]
    return {name: Variable(name) for name in names}


@pytest.fixture
def eqs(v):
    """Equations of the smart energy metering case study."""
    t = {name: Term.atom(var) for name, var in v.items()}
    return {
        "encR_enc": Equation.equality("encR_enc", t["encR"], Term.func("Enc", t["readings"], t["k"])),
        "bill_dec": Equation.equality("bill_dec", t["bill"], Term.func("Dec", t["encBill"], t["k"])),
        "ppd_phi": Equation.equality(
            "ppd_phi", t["ppd"], Term.func("phi", t["readings"], t["bill"], t["pw"])),
        "readings_dec": Equation.equality(
            "readings_dec", t["readings"], Term.func("Dec", t["encR"], t["k"])),
        "bill_beta": Equation.equality("bill_beta", t["bill"], Term.func("beta", t["readings"])),
        "encBill_enc": Equation.equality(
            "encBill_enc", t["encBill"], Term.func("Enc", t["bill"], t["k"])),
        "readings_phiInv": Equation.equality(
            "readings_phiInv", t["readings"], Term.func("phi^-1", t["ppd"], t["pw"])),
        "bill_phiInv": Equation.equality(
            "bill_phiInv", t["bill"], Term.func("phi^-1", t["ppd"], t["pw"])),
    }


@pytest.fixture
def smart_meter(v, eqs, config):
    """Smart energy metering architecture: smart meter (SM), metering
    infrastructure (MI), retailer (Re) and home network (HN)."""
    sm = Component("SM", [
        Has("SM", v["readings"]),
        Has("SM", v["pw"]),
        Has("SM", v["k"]),
        Compute("SM", eqs["encR_enc"]),
        Compute("SM", eqs["bill_dec"]),
        Compute("SM", eqs["ppd_phi"]),
    ], deduction_templates=())
    mi = Component("MI", [
        Has("MI", v["k"]),
        Compute("MI", eqs["readings_dec"]),
        Compute("MI", eqs["bill_beta"]),
        Compute("MI", eqs["encBill_enc"]),
    ], deduction_templates=())
    re = Component("Re", [
        Has("Re", v["pw"]),
        Has("Re", v["secret"]),
        Compute("Re", eqs["readings_phiInv"]),
        Compute("Re", eqs["bill_phiInv"]),
        Check("Re", (eqs["bill_beta"],)),
    ], deduction_templates=())
    hn = Component("HN", deps=[
        Dep(v["pw"], (), 0.001),
        Dep(v["readings"], (v["encR"],), 0.00001),
        Dep(v["readings"], (v["ppd"], v["pw"]), 1.0),
        Dep(v["secret"], (), 0.01),
        Dep(v["pw"], (v["secret"],), 1.0),
    ], deduction_templates=())
    receives = [
        Receive("HN", "SM", variables=(v["encR"],)),
        Receive("SM", "HN", variables=(v["encBill"],)),
        Receive("HN", "SM", variables=(v["ppd"],)),
        Receive("MI", "HN", variables=(v["encR"],)),
        Receive("HN", "MI", variables=(v["encBill"],)),
        Receive("Re", "HN", variables=(v["ppd"],)),
    ]
    return Architecture([sm, mi, re, hn], inter_component_actions=receives, config=config)
