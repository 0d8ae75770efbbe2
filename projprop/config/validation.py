"""
Configuration Validation Utilities

This module provides validation functions for propagation configurations.
It includes invariant checking and safety checks.

Import Policy:
    from projprop.config.validation import validate_config, warn_if_unsafe, ConfigurationError

DO NOT use: from projprop.config.validation import *
"""

import warnings
from typing import List, Tuple

from projprop.config.defaults import (
    CHARGE_PER_STEP_WARN_MAX,
    TEMPERATURE_WARN_MAX,
    TEMPERATURE_WARN_MIN,
)
from projprop.config.simulation_config import SimulationConfig


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


class NonLinearFieldError(ConfigurationError):
    """Raised when the electric field is not piecewise linear."""

    pass


class ConfigurationWarning(Warning):
    """Warning for potentially unsafe or degraded configuration choices."""

    pass


def validate_config(config: SimulationConfig, raise_on_error: bool = True) -> Tuple[bool, List[str]]:
    """Validate a configuration.

    Args:
        config: SimulationConfig to validate
        raise_on_error: If True, raise ConfigurationError on validation failure

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        ConfigurationError: If validation fails and raise_on_error=True
    """
    errors = config.validate()

    if errors:
        if raise_on_error:
            raise ConfigurationError(
                f"Configuration validation failed with {len(errors)} error(s):\n"
                + "\n".join(f"  - {err}" for err in errors)
            )
        return False, errors

    return True, []


def warn_if_unsafe(config: SimulationConfig) -> List[str]:
    """Check for configuration choices that are legal but questionable.

    Warnings are issued via Python's warnings module.

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings_list = []
    propagation = config.propagation

    if not TEMPERATURE_WARN_MIN <= propagation.temperature <= TEMPERATURE_WARN_MAX:
        warnings_list.append(
            f"temperature ({propagation.temperature:.1f} K) is outside the range "
            f"[{TEMPERATURE_WARN_MIN:.0f}, {TEMPERATURE_WARN_MAX:.0f}] K where the "
            "mobility parametrisation is validated."
        )

    if propagation.charge_per_step > CHARGE_PER_STEP_WARN_MAX:
        warnings_list.append(
            f"charge_per_step ({propagation.charge_per_step}) is large. All carriers of a "
            "batch share one diffusion offset, so the charge cloud will look coarse."
        )

    for warning_msg in warnings_list:
        warnings.warn(warning_msg, ConfigurationWarning, stacklevel=2)

    return warnings_list


def create_validated_config(**kwargs) -> SimulationConfig:
    """Create a configuration with validation.

    Keyword arguments override module options first, then the sensor,
    electric field and detector attributes of the same name.

    Raises:
        ConfigurationError: If the resulting configuration is invalid
        ValueError: If an override does not name a known parameter

    Example:
        >>> config = create_validated_config(charge_per_step=5, bias_voltage=-150.0)
    """
    from projprop.config.simulation_config import create_default_config

    config = create_default_config()
    detector = config.detector

    for key, value in kwargs.items():
        if hasattr(config.propagation, key) and key != "carrier_type":
            setattr(config.propagation, key, value)
        elif hasattr(detector.sensor, key):
            setattr(detector.sensor, key, value)
        elif hasattr(detector.electric_field, key):
            setattr(detector.electric_field, key, value)
        elif key in ("name", "doping", "magnetic_field"):
            setattr(detector, key, value)
        else:
            raise ValueError(f"Unknown configuration parameter: {key}")

    validate_config(config)
    return config
