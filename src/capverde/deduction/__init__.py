"""
Deduction rules, dependence relations and template instantiation.
"""
from .deduction import Deduction, DeductionType, Dep
from .defaults import default_deductions
from .instantiation import Instantiation, instantiate_deductions

__all__ = [
    "Deduction",
    "DeductionType",
    "Dep",
    "default_deductions",
    "Instantiation",
    "instantiate_deductions",
]
