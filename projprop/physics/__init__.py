"""Physics models of the projection: field, mobility, drift, diffusion, lifetime, survival."""

from projprop.physics.diffusion import diffusion_sigma, sample_lateral_offset, sample_offset_3d
from projprop.physics.drift import DriftTimeError, drift_time, uniform_drift_time
from projprop.physics.field import FieldSampler, LinearFieldSegment, build_field_sampler
from projprop.physics.lifetime import DopingSegment, LifetimeModel, build_lifetime_model, effective_lifetime
from projprop.physics.mobility import CarrierMobility
from projprop.physics.survival import recombination_probability, survives

__all__ = [
    "LinearFieldSegment",
    "FieldSampler",
    "build_field_sampler",
    "CarrierMobility",
    "drift_time",
    "uniform_drift_time",
    "DriftTimeError",
    "diffusion_sigma",
    "sample_lateral_offset",
    "sample_offset_3d",
    "DopingSegment",
    "LifetimeModel",
    "build_lifetime_model",
    "effective_lifetime",
    "survives",
    "recombination_probability",
]
