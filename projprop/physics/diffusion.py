"""Gaussian diffusion offsets.

The lateral spread accumulated while drifting for a time t has a width of
sigma = sqrt(2 D t) per axis. All random numbers come from the event's
generator, passed in explicitly.
"""

import math
from typing import Tuple

import numpy as np

from projprop.core.constants import NS_PER_S, UM_PER_CM


def diffusion_sigma(diffusion_constant: float, time: float) -> float:
    """Diffusion width (um) for D in cm^2/s and t in ns."""
    if diffusion_constant < 0 or time < 0:
        raise ValueError(f"Diffusion needs D >= 0 and t >= 0, got D={diffusion_constant}, t={time}")
    return math.sqrt(2.0 * diffusion_constant * time / NS_PER_S) * UM_PER_CM


def sample_lateral_offset(rng: np.random.Generator, sigma: float) -> Tuple[float, float]:
    """Independent Gaussian offsets in x and y (um)."""
    dx, dy = rng.normal(0.0, sigma, size=2)
    return float(dx), float(dy)


def sample_offset_3d(rng: np.random.Generator, sigma: float) -> Tuple[float, float, float]:
    """Independent Gaussian offsets in x, y and z (um)."""
    dx, dy, dz = rng.normal(0.0, sigma, size=3)
    return float(dx), float(dy), float(dz)
