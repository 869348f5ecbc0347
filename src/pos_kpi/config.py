"""Configuration for the POS KPI engine.

This module provides the engine-wide constants and a single, simple
configuration class shared by classification, ratio calculation and
aggregation.
"""

from __future__ import annotations

from dataclasses import dataclass

from pos_kpi.exceptions import ConfigError

# The two fixed sales staff identities
EMPLOYEES = ("Ingrid", "Marta")

# Decimal places kept on every derived ratio
RATIO_DECIMALS = 2

# Absolute tolerance for the avg_ticket ~= units_per_operation * avg_unit_price check
CROSS_CHECK_TOLERANCE = 0.01

# Discriminator values that denote the older one-row-per-day format
LEGACY_KINDS = (None, "", "total")


@dataclass(frozen=True)
class EngineConfig:
    """Settings used across the aggregation engine.

    Attributes:
        employees: The two employee names records may carry. Order matters
            only for presentation: aggregates are returned in this order.
        decimals: Decimal places kept on derived ratios.
        cross_check_tolerance: Absolute tolerance for validate_calculations.
    """

    employees: tuple[str, str] = EMPLOYEES
    decimals: int = RATIO_DECIMALS
    cross_check_tolerance: float = CROSS_CHECK_TOLERANCE

    def validate(self) -> EngineConfig:
        """Check the settings and return self.

        Raises:
            ConfigError: If the roster is not exactly two distinct non-empty
                names, decimals is negative, or the tolerance is negative.
        """
        employees = tuple(self.employees)
        if len(employees) != 2 or len(set(employees)) != 2 or not all(employees):
            raise ConfigError(
                f"Exactly two distinct employee names are required, got {employees!r}"
            )
        if self.decimals < 0:
            raise ConfigError(f"decimals must be >= 0, got {self.decimals}")
        if self.cross_check_tolerance < 0:
            raise ConfigError(
                f"cross_check_tolerance must be >= 0, got {self.cross_check_tolerance}"
            )
        return self


DEFAULT_CONFIG = EngineConfig()


def resolve_config(config: EngineConfig | None) -> EngineConfig:
    """Return the given config validated, or the default one."""
    if config is None:
        return DEFAULT_CONFIG
    return config.validate()
