"""Recombination survival draw.

One uniform variate per batch: the batch survives if r > t / tau. The draw
is taken even for an infinite lifetime so that the random stream does not
depend on the doping configuration.
"""

import math

import numpy as np


def recombination_probability(drift_time: float, lifetime: float) -> float:
    """Probability t / tau that a batch recombines, capped at one."""
    if math.isinf(lifetime):
        return 0.0
    return min(1.0, drift_time / lifetime)


def survives(rng: np.random.Generator, drift_time: float, lifetime: float) -> bool:
    r = rng.random()
    return math.isinf(lifetime) or r > recombination_probability(drift_time, lifetime)
