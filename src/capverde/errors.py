"""
Exception types raised while building an architecture model.

The reasoning engine itself never raises: unverifiable properties are
reported as False and inconsistencies as a logged warning.
"""


class CapverdeError(Exception):
    """Base class for capverde errors."""


class ModelError(CapverdeError):
    """Malformed model input, such as an unparsable probability or a
    reference to an unknown entity."""

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(f"{entity}: {reason}")
