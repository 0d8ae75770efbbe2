"""Configuration Module - Single Source of Truth for propagation parameters

Default Configuration (loaded from defaults.yaml):
    from projprop.config import get_defaults

    integration_time = get_defaults()["propagation"]["integration_time"]

Recommended Usage:
    from projprop.config import SimulationConfig, create_validated_config

    # Create a default config (already validated)
    config = create_validated_config()

    # Override module options and detector parameters
    config = create_validated_config(charge_per_step=5, bias_voltage=-150.0)

    # Or load a user file
    from projprop.config import load_config_file
    config = SimulationConfig.from_dict(load_config_file("detector.yaml"))

Import Policy:
    DO NOT use: from projprop.config import *

Submodules:
    enums: FieldModel, DopingModel
    yaml_loader: YAML loader (get_defaults, load_config_file)
    simulation_config: Configuration dataclasses
    validation: Validation utilities and configuration exceptions
"""

from projprop.config.enums import DopingModel, FieldModel
from projprop.config.yaml_loader import get_defaults, load_config_file
from projprop.config.simulation_config import (
    DetectorConfig,
    DopingConfig,
    ElectricFieldConfig,
    PropagationConfig,
    SensorConfig,
    SimulationConfig,
    create_default_config,
)
from projprop.config.validation import (
    ConfigurationError,
    ConfigurationWarning,
    NonLinearFieldError,
    create_validated_config,
    validate_config,
    warn_if_unsafe,
)


__all__ = [
    # Enums
    "FieldModel",
    "DopingModel",
    # Config classes
    "PropagationConfig",
    "SensorConfig",
    "ElectricFieldConfig",
    "DopingConfig",
    "DetectorConfig",
    "SimulationConfig",
    # Factory functions
    "create_default_config",
    "create_validated_config",
    # Validation
    "validate_config",
    "warn_if_unsafe",
    "ConfigurationError",
    "ConfigurationWarning",
    "NonLinearFieldError",
    # YAML access
    "get_defaults",
    "load_config_file",
]
