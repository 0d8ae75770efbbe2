"""Carrier mobility with the saturation exponent fixed to one.

mu(E) = mu_0 / (1 + E / E_c), with mu_0 = v_sat / E_c. Saturation velocity
and critical field follow the Jacoboni-Canali temperature scaling for
silicon. Fixing the exponent to one is what makes the drift-time integral
closed-form.
"""

from dataclasses import dataclass

from projprop.core.constants import (
    BOLTZMANN_OVER_CHARGE,
    ELECTRON_MOBILITY,
    HOLE_MOBILITY,
)
from projprop.core.objects import CarrierType


@dataclass(frozen=True)
class CarrierMobility:
    """Mobility parameters of one carrier type at one temperature.

    Attributes:
        saturation_velocity: v_sat [cm/s]
        critical_field: E_c [V/cm]
        temperature: T [K]

    """

    saturation_velocity: float
    critical_field: float
    temperature: float

    def __post_init__(self):
        if self.saturation_velocity <= 0 or self.critical_field <= 0:
            raise ValueError(
                f"Mobility parameters must be positive: v_sat={self.saturation_velocity}, "
                f"E_c={self.critical_field}"
            )
        if self.temperature <= 0:
            raise ValueError(f"Temperature must be positive: T={self.temperature}")

    @classmethod
    def for_carrier(cls, carrier_type: CarrierType, temperature: float) -> "CarrierMobility":
        coefficients = ELECTRON_MOBILITY if carrier_type == CarrierType.ELECTRON else HOLE_MOBILITY
        return cls(
            saturation_velocity=coefficients.v_sat_ref * temperature ** coefficients.v_sat_exp,
            critical_field=coefficients.e_crit_ref * temperature ** coefficients.e_crit_exp,
            temperature=temperature,
        )

    @property
    def mu_0(self) -> float:
        """Low-field mobility [cm^2/(V s)]."""
        return self.saturation_velocity / self.critical_field

    def mobility(self, field: float) -> float:
        """Mobility at field magnitude |E| [V/cm]."""
        return self.mu_0 / (1.0 + abs(field) / self.critical_field)

    def diffusion_constant(self, field: float = 0.0) -> float:
        """Einstein relation D = mu k_B T / q [cm^2/s]."""
        return self.mobility(field) * BOLTZMANN_OVER_CHARGE * self.temperature
