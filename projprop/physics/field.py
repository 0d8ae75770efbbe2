"""Linear electric field lookup.

The sensor field is described by a sorted set of linear segments along the
drift axis (local z). Positions outside every segment, or where the field
vanishes, are undepleted. Lookups are read-only and safe to share between
events.

Import Policy:
    from projprop.physics.field import FieldSampler, LinearFieldSegment, build_field_sampler
"""

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from projprop.config.defaults import FIELD_EPSILON, GEOMETRY_TOLERANCE
from projprop.config.enums import FieldModel
from projprop.config.validation import ConfigurationError, NonLinearFieldError
from projprop.core.constants import CM_PER_UM
from projprop.core.detector import SensorGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearFieldSegment:
    """Field E_z(z) = slope * z + intercept on [z_min, z_max].

    Attributes:
        slope: Field gradient (V/cm per um)
        intercept: Field at z = 0 (V/cm)
        z_min, z_max: Validity interval along local z (um)

    """

    slope: float
    intercept: float
    z_min: float
    z_max: float

    def __post_init__(self):
        if self.z_max <= self.z_min:
            raise ValueError(f"Segment must have positive extent: [{self.z_min}, {self.z_max}]")

    @classmethod
    def through(cls, z_min: float, field_min: float, z_max: float, field_max: float) -> "LinearFieldSegment":
        """Segment interpolating the field values at both ends."""
        slope = (field_max - field_min) / (z_max - z_min)
        return cls(slope=slope, intercept=field_min - slope * z_min, z_min=z_min, z_max=z_max)

    def field_at(self, z: float) -> float:
        return self.slope * z + self.intercept

    def contains(self, z: float) -> bool:
        return self.z_min - GEOMETRY_TOLERANCE <= z <= self.z_max + GEOMETRY_TOLERANCE

    def oriented(self, sign: int) -> "LinearFieldSegment":
        """Same segment with the field expressed along ``sign * z``."""
        return LinearFieldSegment(
            slope=sign * self.slope,
            intercept=sign * self.intercept,
            z_min=self.z_min,
            z_max=self.z_max,
        )


class FieldSampler:
    """Position to field segment lookup over the sensor volume.

    Segments must not overlap. They are indexed by their lower edge and
    looked up with a binary search.
    """

    def __init__(self, segments: Sequence[LinearFieldSegment]):
        if not segments:
            raise ConfigurationError("Electric field has no depleted region")

        ordered = sorted(segments, key=lambda seg: seg.z_min)
        for lower, upper in zip(ordered, ordered[1:]):
            if upper.z_min < lower.z_max - GEOMETRY_TOLERANCE:
                raise ConfigurationError(
                    f"Field segments overlap: [{lower.z_min}, {lower.z_max}] and "
                    f"[{upper.z_min}, {upper.z_max}]"
                )

        self._segments: Tuple[LinearFieldSegment, ...] = tuple(ordered)
        self._lower_edges: Tuple[float, ...] = tuple(seg.z_min for seg in ordered)

    @property
    def segments(self) -> Tuple[LinearFieldSegment, ...]:
        return self._segments

    @property
    def z_min(self) -> float:
        return self._segments[0].z_min

    @property
    def z_max(self) -> float:
        return self._segments[-1].z_max

    def segment_at(self, z: float) -> Optional[LinearFieldSegment]:
        """Segment containing z regardless of the field value there."""
        index = bisect_right(self._lower_edges, z + GEOMETRY_TOLERANCE) - 1
        if index < 0:
            return None
        segment = self._segments[index]
        if segment.contains(z):
            return segment
        return None

    def sample(self, z: float) -> Optional[LinearFieldSegment]:
        """Segment containing z, or None if z is undepleted."""
        segment = self.segment_at(z)
        if segment is None or abs(segment.field_at(z)) < FIELD_EPSILON:
            return None
        return segment

    def depletion_boundary(self, z: float) -> Optional[float]:
        """Nearest lower edge of a depleted segment above z.

        A position inside a segment whose field vanishes there is already on
        the boundary.
        """
        if self.segment_at(z) is not None:
            return z
        index = bisect_right(self._lower_edges, z)
        if index >= len(self._segments):
            return None
        return self._segments[index].z_min

    def segments_between(self, z_start: float, z_end: float) -> List[Tuple[LinearFieldSegment, float, float]]:
        """Split [z_start, z_end] into (segment, start, end) pieces.

        Raises:
            ConfigurationError: If the interval crosses a field-free gap.
        """
        pieces = []
        position = z_start
        for segment in self._segments:
            if segment.z_max <= position + GEOMETRY_TOLERANCE:
                continue
            if segment.z_min > position + GEOMETRY_TOLERANCE:
                break
            end = min(segment.z_max, z_end)
            if end > position:
                pieces.append((segment, position, end))
            position = end
            if position >= z_end - GEOMETRY_TOLERANCE:
                return pieces

        if position < z_end - GEOMETRY_TOLERANCE:
            raise ConfigurationError(
                f"No electric field between z={position:.3f} um and z={z_end:.3f} um"
            )
        return pieces

    def oriented(self, sign: int) -> "FieldSampler":
        return FieldSampler([segment.oriented(sign) for segment in self._segments])

    def check_polarity(self, label: str = "carrier") -> None:
        """Require a field pointing along +z everywhere (oriented sampler).

        Raises:
            ConfigurationError: If any segment would drive carriers away
                from the readout surface.
        """
        for segment in self._segments:
            low = segment.field_at(segment.z_min)
            high = segment.field_at(segment.z_max)
            if min(low, high) < -FIELD_EPSILON or max(low, high) < FIELD_EPSILON:
                raise ConfigurationError(
                    f"Electric field in [{segment.z_min:.3f}, {segment.z_max:.3f}] um drives "
                    f"{label}s away from the readout surface; check the bias polarity "
                    "or the propagate_holes setting"
                )


def linear_field_segment(field_config, geometry: SensorGeometry) -> LinearFieldSegment:
    """Depth-linear field depleting from the readout surface."""
    bias = abs(field_config.bias_voltage)
    depletion = abs(field_config.depletion_voltage)
    direction = -1.0 if field_config.bias_voltage < 0 else 1.0

    depth = field_config.depletion_depth or geometry.thickness
    eff_thickness = depth
    # Below full depletion only part of the sensor is depleted
    if bias < depletion:
        eff_thickness *= math.sqrt(bias / depletion)
        depletion = bias

    eff_thickness_cm = eff_thickness * CM_PER_UM
    field_low = (bias - depletion) / eff_thickness_cm
    field_top = field_low + 2.0 * depletion / eff_thickness_cm

    z_low = geometry.top_z - eff_thickness
    return LinearFieldSegment.through(
        z_low, direction * field_low, geometry.top_z, direction * field_top,
    )


def build_field_sampler(field_config, geometry: SensorGeometry) -> FieldSampler:
    """Build the field lookup for a detector.

    Args:
        field_config: ElectricFieldConfig of the detector
        geometry: Sensor geometry

    Raises:
        NonLinearFieldError: For field models without a linear description
    """
    model = field_config.model
    if not model.is_linear:
        raise NonLinearFieldError(
            f"Electric field model '{model.value}' is not linear; the analytic drift-time "
            "projection is only valid for constant or linear fields"
        )

    if model == FieldModel.CONSTANT:
        depth = field_config.depletion_depth or geometry.thickness
        segment = LinearFieldSegment(
            slope=0.0,
            intercept=field_config.bias_field,
            z_min=geometry.top_z - depth,
            z_max=geometry.top_z,
        )
        logger.info(
            f"Set constant electric field of {field_config.bias_field:.1f} V/cm "
            f"over {depth:.1f} um"
        )
    else:
        segment = linear_field_segment(field_config, geometry)
        logger.info(
            f"Set linear electric field from {segment.field_at(segment.z_min):.1f} V/cm at "
            f"z={segment.z_min:.1f} um to {segment.field_at(segment.z_max):.1f} V/cm at "
            f"z={segment.z_max:.1f} um"
        )

    return FieldSampler([segment])
