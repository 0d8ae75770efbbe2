"""Physics constants for charge carrier projection.

This module is the Single Source of Truth (SSOT) for all physics constants
and unit conversions used in the package. Import from here rather than
defining constants locally.

Import Policy:
    from projprop.core.constants import BOLTZMANN_OVER_CHARGE, UM_PER_CM

DO NOT use: from projprop.core.constants import *
"""

from dataclasses import dataclass

from scipy import constants as _sc

# =============================================================================
# Fundamental Physical Constants
# =============================================================================

# Elementary charge [C]
E_CHARGE = _sc.e

# Boltzmann constant [J/K]
BOLTZMANN = _sc.k

# k_B / q [V/K]; thermal voltage is BOLTZMANN_OVER_CHARGE * T
BOLTZMANN_OVER_CHARGE = _sc.k / _sc.e

# =============================================================================
# Unit Conversions
# =============================================================================

# Positions are kept in um, field-related quantities in cm
UM_PER_CM = 1.0e4
CM_PER_UM = 1.0e-4

# Times are kept in ns, mobilities and lifetimes come in s
NS_PER_S = 1.0e9


# =============================================================================
# Mobility Parametrisation (Jacoboni-Canali, silicon)
# =============================================================================

@dataclass(frozen=True)
class MobilityCoefficients:
    """Temperature scaling of saturation velocity and critical field.

    v_sat(T) = v_sat_ref * T ** v_sat_exp   [cm/s]
    E_c(T)   = e_crit_ref * T ** e_crit_exp [V/cm]
    """

    v_sat_ref: float
    v_sat_exp: float
    e_crit_ref: float
    e_crit_exp: float


ELECTRON_MOBILITY = MobilityCoefficients(
    v_sat_ref=1.53e9, v_sat_exp=-0.87, e_crit_ref=1.01, e_crit_exp=1.55,
)

HOLE_MOBILITY = MobilityCoefficients(
    v_sat_ref=1.62e8, v_sat_exp=-0.52, e_crit_ref=1.24, e_crit_exp=1.68,
)


# =============================================================================
# Recombination Constants (silicon)
# =============================================================================

@dataclass(frozen=True)
class LifetimeCoefficients:
    """Reference values of the doping-dependent carrier lifetime.

    Attributes:
        lifetime_reference: SRH lifetime at vanishing doping [s]
        doping_reference: SRH reference doping concentration [/cm^3]
        auger_coefficient: Auger coefficient [cm^6/s]
    """

    lifetime_reference: float
    doping_reference: float
    auger_coefficient: float


ELECTRON_LIFETIME = LifetimeCoefficients(
    lifetime_reference=1.0e-5, doping_reference=1.0e16, auger_coefficient=2.8e-31,
)

HOLE_LIFETIME = LifetimeCoefficients(
    lifetime_reference=4.0e-4, doping_reference=7.1e15, auger_coefficient=0.99e-31,
)
