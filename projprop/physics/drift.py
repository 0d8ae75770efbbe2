"""Closed-form drift time under a linear field.

With E(s) = k s + E_0 along the drift direction and
mu(E) = mu_0 / (1 + E / E_c), the inverse drift velocity integrates to

    t = (1 / mu_0) [ ln(E(s)) / k + s / E_c ]   evaluated from s_start to s_end.

The logarithmic term is evaluated as log1p(k ds / E_start) / k, which stays
accurate when the field barely changes along the path. Below
UNIFORM_FIELD_TOLERANCE the uniform-field limit ds / E_0 is used.
"""

import math

from projprop.config.defaults import UNIFORM_FIELD_TOLERANCE
from projprop.core.constants import CM_PER_UM, NS_PER_S, UM_PER_CM
from projprop.physics.field import LinearFieldSegment


class DriftTimeError(ValueError):
    """Raised when a drift path is inconsistent with the field."""

    pass


def drift_time(
    z_start: float,
    z_end: float,
    segment: LinearFieldSegment,
    mu_0: float,
    critical_field: float,
) -> float:
    """Time to drift from z_start to z_end inside one segment.

    Args:
        z_start, z_end: Path endpoints along the drift direction (um)
        segment: Field along the drift direction (V/cm); must be positive
            on the whole path
        mu_0: Low-field mobility (cm^2/(V s))
        critical_field: E_c (V/cm)

    Returns:
        Drift time (ns), finite and non-negative

    Raises:
        DriftTimeError: If the path runs backwards, the field does not push
            the carrier along the path, or the result is not a finite
            non-negative time
    """
    if z_end < z_start:
        raise DriftTimeError(f"Drift path runs backwards: z_start={z_start}, z_end={z_end}")

    field_start = segment.field_at(z_start)
    field_end = segment.field_at(z_end)
    if field_start <= 0.0 or field_end <= 0.0:
        raise DriftTimeError(
            f"Carrier moves against the field: E(start)={field_start:.4g} V/cm, "
            f"E(end)={field_end:.4g} V/cm"
        )

    distance_cm = (z_end - z_start) * CM_PER_UM
    slope_cm = segment.slope * UM_PER_CM

    relative_change = slope_cm * distance_cm / field_start
    if abs(relative_change) < UNIFORM_FIELD_TOLERANCE:
        field_term = distance_cm / field_start
    else:
        field_term = math.log1p(relative_change) / slope_cm

    seconds = (field_term + distance_cm / critical_field) / mu_0
    time = seconds * NS_PER_S

    if not math.isfinite(time) or time < 0.0:
        raise DriftTimeError(f"Drift time is not a finite non-negative value: {time}")
    return time


def uniform_drift_time(distance: float, field: float, mu_0: float, critical_field: float) -> float:
    """Uniform-field limit of ``drift_time`` (ns) for a distance in um."""
    distance_cm = distance * CM_PER_UM
    return distance_cm * (1.0 / field + 1.0 / critical_field) / mu_0 * NS_PER_S
