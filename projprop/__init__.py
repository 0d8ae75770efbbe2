"""Projection propagation of charge carriers in semiconductor sensors

Projects groups of deposited charge carriers onto the readout surface of a
sensor in a single analytic step instead of tracking their trajectories.

Key Principles:
- Analytic drift time in a linear electric field (Jacoboni-Canali mobility)
- Lateral diffusion from the Einstein relation, one Gaussian offset per batch
- Survival from doping-dependent SRH and Auger lifetimes
- Integration window cut on the arrival time
- Exact charge accounting per loss channel
- Independent random stream per event

Version: 1.0
"""

__version__ = "1.0"

# Core data structures
from projprop.core import (
    CarrierBatch,
    CarrierType,
    ChargeDeposit,
    ChargeLedger,
    ConservationReport,
    LossChannel,
    PropagatedCharge,
    SensorGeometry,
)

# Configuration
from projprop.config import (
    ConfigurationError,
    NonLinearFieldError,
    SimulationConfig,
    create_default_config,
    create_validated_config,
)

# Propagation
from projprop.transport import (
    ProjectionPropagator,
    PropagationResult,
    RunSummary,
    create_propagator,
    event_rng,
    propagate_event,
    run_events,
)

__all__ = [
    "__version__",
    # Core
    "CarrierType",
    "ChargeDeposit",
    "CarrierBatch",
    "PropagatedCharge",
    "SensorGeometry",
    "LossChannel",
    "ChargeLedger",
    "ConservationReport",
    # Configuration
    "SimulationConfig",
    "create_default_config",
    "create_validated_config",
    "ConfigurationError",
    "NonLinearFieldError",
    # Propagation
    "ProjectionPropagator",
    "PropagationResult",
    "RunSummary",
    "create_propagator",
    "event_rng",
    "propagate_event",
    "run_events",
]
