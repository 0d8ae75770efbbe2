"""Doping-dependent carrier lifetime.

Shockley-Read-Hall and Auger recombination combine as

    1 / tau = 1 / tau_srh + 1 / tau_a
    tau_srh = tau_0 / (1 + N / N_0)
    tau_a   = 1 / (C_a N),   C_a = C_auger N

where N is the magnitude of the doping concentration. Without a doping
profile, or outside the doped depth, the lifetime is infinite.
"""

import logging
import math
import warnings
from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence, Tuple

from projprop.config.defaults import GEOMETRY_TOLERANCE
from projprop.config.enums import DopingModel
from projprop.config.validation import ConfigurationWarning
from projprop.core.constants import ELECTRON_LIFETIME, HOLE_LIFETIME, NS_PER_S, LifetimeCoefficients
from projprop.core.detector import SensorGeometry
from projprop.core.objects import CarrierType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DopingSegment:
    """Constant doping concentration (/cm^3) on [z_min, z_max] (um)."""

    concentration: float
    z_min: float
    z_max: float

    def contains(self, z: float) -> bool:
        return self.z_min - GEOMETRY_TOLERANCE <= z <= self.z_max + GEOMETRY_TOLERANCE


def srh_lifetime(concentration: float, coefficients: LifetimeCoefficients) -> float:
    """Shockley-Read-Hall lifetime (s)."""
    return coefficients.lifetime_reference / (1.0 + abs(concentration) / coefficients.doping_reference)


def auger_lifetime(concentration: float, coefficients: LifetimeCoefficients) -> float:
    """Auger lifetime (s); infinite for an undoped region."""
    density = abs(concentration)
    if density == 0.0:
        return math.inf
    rate_coefficient = coefficients.auger_coefficient * density
    return 1.0 / (rate_coefficient * density)


def effective_lifetime(concentration: float, carrier_type: CarrierType) -> float:
    """Combined SRH and Auger lifetime (ns)."""
    coefficients = ELECTRON_LIFETIME if carrier_type == CarrierType.ELECTRON else HOLE_LIFETIME
    inverse = 1.0 / srh_lifetime(concentration, coefficients) + 1.0 / auger_lifetime(concentration, coefficients)
    return NS_PER_S / inverse


class LifetimeModel:
    """Position to lifetime lookup over constant-doping segments.

    An empty model (no profile) returns an infinite lifetime everywhere.
    """

    def __init__(self, carrier_type: CarrierType, segments: Sequence[DopingSegment] = ()):
        self.carrier_type = carrier_type
        ordered = sorted(segments, key=lambda seg: seg.z_min)
        self._segments: Tuple[DopingSegment, ...] = tuple(ordered)
        self._lower_edges: Tuple[float, ...] = tuple(seg.z_min for seg in ordered)
        self._lifetimes: Tuple[float, ...] = tuple(
            effective_lifetime(seg.concentration, carrier_type) for seg in ordered
        )

    @property
    def enabled(self) -> bool:
        return bool(self._segments)

    @property
    def segments(self) -> Tuple[DopingSegment, ...]:
        return self._segments

    def lifetime(self, z: float) -> float:
        """Effective lifetime (ns) at local z."""
        index = bisect_right(self._lower_edges, z + GEOMETRY_TOLERANCE) - 1
        if index < 0 or not self._segments[index].contains(z):
            return math.inf
        return self._lifetimes[index]


def build_lifetime_model(
    doping_config,
    geometry: SensorGeometry,
    carrier_type: CarrierType,
) -> LifetimeModel:
    """Build the lifetime lookup for a detector.

    Only constant doping profiles enable recombination. Other profiles
    disable it with a single warning.

    Args:
        doping_config: DopingConfig of the detector, or None
        geometry: Sensor geometry
        carrier_type: Propagated carrier type
    """
    if doping_config is None:
        logger.info("No doping profile configured, carrier lifetime is not simulated")
        return LifetimeModel(carrier_type)

    if doping_config.model != DopingModel.CONSTANT:
        message = (
            f"Doping profile of type '{doping_config.model.value}' is not constant; "
            "carrier lifetime and recombination are disabled"
        )
        logger.warning(message)
        warnings.warn(message, ConfigurationWarning, stacklevel=2)
        return LifetimeModel(carrier_type)

    depth = doping_config.doping_depth or geometry.thickness
    segment = DopingSegment(
        concentration=float(doping_config.concentration),
        z_min=geometry.top_z - depth,
        z_max=geometry.top_z,
    )
    model = LifetimeModel(carrier_type, [segment])
    logger.info(
        f"Set constant doping concentration of {segment.concentration:.3g} /cm^3, "
        f"{carrier_type.label} lifetime {model.lifetime(geometry.top_z):.4g} ns"
    )
    return model
