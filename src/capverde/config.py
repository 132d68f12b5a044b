"""
capverde configuration.

Defaults are the calculus constants; every value can be overridden through
``CAPVERDE_``-prefixed environment variables (nested fields use ``__``, for
example ``CAPVERDE_LOGGING__LEVEL=DEBUG``).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


class VerifierConfig(BaseSettings):
    """
    Bounds and constants of the reasoning engine.
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPVERDE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Lowest probability tried by the Has/Knows probability search
    probability_floor: float = 1e-6
    # Probability search divides by this factor at every step
    probability_step: float = 2.0
    # Rounds of equation broadcast before verification starts
    max_broadcast_rounds: int = 5
    # Complexity bounds for deduction conclusions
    max_term_depth: int = 2
    max_equation_depth: int = 3
    # Rule-chaining depth beyond which a property is resolved as not holding
    max_recursion_depth: int = 200

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _check_bounds(self) -> VerifierConfig:
        if not 0.0 < self.probability_floor <= 1.0:
            raise ValueError("probability_floor must lie in (0, 1]")
        if self.probability_step <= 1.0:
            raise ValueError("probability_step must be greater than 1")
        if self.max_broadcast_rounds < 0:
            raise ValueError("max_broadcast_rounds must not be negative")
        if self.max_term_depth < 0 or self.max_equation_depth < 0:
            raise ValueError("complexity bounds must not be negative")
        if self.max_recursion_depth < 0:
            raise ValueError("max_recursion_depth must not be negative")
        return self
