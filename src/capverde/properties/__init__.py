"""
Privacy properties.
"""
from .property import (
    PropertyType,
    Property,
    HasProperty,
    KnowsProperty,
    NotSharedProperty,
    NotStoredProperty,
    ConjunctionProperty,
    NegationProperty,
)

__all__ = [
    "PropertyType",
    "Property",
    "HasProperty",
    "KnowsProperty",
    "NotSharedProperty",
    "NotStoredProperty",
    "ConjunctionProperty",
    "NegationProperty",
]
