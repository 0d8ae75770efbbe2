"""Pytest configuration and shared fixtures for projprop tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from projprop.config import (
    DopingConfig,
    DopingModel,
    ElectricFieldConfig,
    FieldModel,
    SimulationConfig,
    create_default_config,
)
from projprop.core.detector import SensorGeometry
from projprop.core.objects import CarrierType, ChargeDeposit
from projprop.transport.engine import ProjectionPropagator


# Fixtures for configuration


@pytest.fixture
def default_config():
    """Default configuration: 300 um sensor, -100 V bias, 50 V depletion."""
    return create_default_config()


@pytest.fixture
def partially_depleted_config():
    """Linear field below full depletion (-25 V bias, 50 V depletion)."""
    config = SimulationConfig()
    config.detector.electric_field = ElectricFieldConfig(
        model=FieldModel.LINEAR, bias_voltage=-25.0, depletion_voltage=50.0,
    )
    return config


@pytest.fixture
def shallow_field_config():
    """Fully depleted field confined to the upper 200 um of the sensor."""
    config = SimulationConfig()
    config.detector.electric_field.depletion_depth = 200.0
    return config


@pytest.fixture
def doped_config():
    """Heavily doped sensor where electrons live for a few ns."""
    config = SimulationConfig()
    config.detector.doping = DopingConfig(model=DopingModel.CONSTANT, concentration=1.0e19)
    return config


@pytest.fixture
def geometry(default_config):
    """Sensor geometry of the default configuration."""
    return SensorGeometry.from_config(default_config.detector.sensor)


# Fixtures for propagation


@pytest.fixture
def propagator(default_config):
    """Electron propagator for the default configuration."""
    return ProjectionPropagator(default_config)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(np.random.SeedSequence([1234, 0]))


@pytest.fixture
def make_deposit():
    """Factory for deposits at a local position (global frame = local frame)."""

    def _make(z=0.0, charge=25, carrier_type=CarrierType.ELECTRON, x=0.0, y=0.0,
              local_time=0.0, global_time=0.0, track_id=None):
        position = (x, y, z)
        return ChargeDeposit(
            local_position=position,
            global_position=position,
            carrier_type=carrier_type,
            charge=charge,
            local_time=local_time,
            global_time=global_time,
            track_id=track_id,
        )

    return _make
