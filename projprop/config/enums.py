"""
Configuration Enums for projection propagation

Import Policy:
    from projprop.config.enums import FieldModel, DopingModel

DO NOT use: from projprop.config.enums import *
"""

from enum import Enum


class FieldModel(Enum):
    """Electric field models a detector can be configured with.

    Options:
        CONSTANT: Uniform field over the full sensor thickness
        LINEAR: Field depending linearly on depth, depleting from the readout side
        MESH: Field map read from a mesh file
        PARABOLIC: Parabolic field profile
        CUSTOM: User-defined field function

    Note:
        Only CONSTANT and LINEAR admit the analytic drift-time integral.
        All other models are rejected when the propagator is set up.
    """
    CONSTANT = "constant"
    LINEAR = "linear"
    MESH = "mesh"
    PARABOLIC = "parabolic"
    CUSTOM = "custom"

    @property
    def is_linear(self) -> bool:
        return self in (FieldModel.CONSTANT, FieldModel.LINEAR)


class DopingModel(Enum):
    """Doping profile models.

    Options:
        CONSTANT: One concentration over the doped depth
        REGIONS: Piecewise concentrations by sensor depth
        MESH: Concentration map read from a mesh file

    Note:
        Only CONSTANT enables the carrier lifetime model. Other profiles
        disable recombination with a warning.
    """
    CONSTANT = "constant"
    REGIONS = "regions"
    MESH = "mesh"
