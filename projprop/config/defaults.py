"""
Default Configuration Constants for projection propagation

This module contains ALL default values used throughout the package.
This is the Single Source of Truth (SSOT) for default configuration.

IMPORTANT Import Policies:
    1. DO NOT use: from projprop.config.defaults import *
       This causes namespace pollution and makes tracking difficult.

    2. DO use explicit imports:
       from projprop.config.defaults import DEFAULT_CHARGE_PER_STEP

    3. DO NOT define defaults elsewhere. All defaults must be in this file.

Units:
    lengths in um, times in ns, voltages in V, fields in V/cm,
    temperatures in K, doping concentrations in /cm^3, magnetic field in T.
"""

# =============================================================================
# Propagation Module Defaults
# =============================================================================

# Sensor temperature (K)
DEFAULT_TEMPERATURE = 293.15

# Maximum number of carriers sharing one diffusion offset and one survival draw
DEFAULT_CHARGE_PER_STEP = 10

# Propagate electrons by default; holes only if explicitly requested
DEFAULT_PROPAGATE_HOLES = False

# A configured magnetic field is fatal unless explicitly ignored
DEFAULT_IGNORE_MAGNETIC_FIELD = False

# Readout integration window (ns)
# Batches arriving after this time are dropped (missed integration window).
DEFAULT_INTEGRATION_TIME = 25.0

# Carriers created in field-free regions are dropped unless this is enabled
DEFAULT_DIFFUSE_DEPOSIT = False

# Diagnostic histograms
DEFAULT_OUTPUT_PLOTS = False
DEFAULT_OUTPUT_PLOTS_BINS = 100

# =============================================================================
# Sensor Geometry Defaults
# =============================================================================

# Sensor thickness (um)
DEFAULT_SENSOR_THICKNESS = 300.0

# Lateral sensor size (um)
DEFAULT_SENSOR_SIZE_X = 10000.0
DEFAULT_SENSOR_SIZE_Y = 10000.0

# =============================================================================
# Electric Field Defaults
# =============================================================================

DEFAULT_FIELD_MODEL = "linear"

# Bias voltage (V). Negative bias drives electrons towards the readout surface.
DEFAULT_BIAS_VOLTAGE = -100.0

# Full depletion voltage (V)
DEFAULT_DEPLETION_VOLTAGE = 50.0

# Uniform field for the constant model (V/cm, signed z component)
DEFAULT_BIAS_FIELD = -3333.0

# =============================================================================
# Doping Defaults
# =============================================================================

DEFAULT_DOPING_MODEL = "constant"

# =============================================================================
# Numerical Defaults
# =============================================================================

# Field magnitude (V/cm) below which a position counts as undepleted
FIELD_EPSILON = 1e-10

# Relative field change over a segment below which the uniform-field limit
# of the drift-time integral is used
UNIFORM_FIELD_TOLERANCE = 1e-12

# Geometric tolerance for segment boundaries (um)
GEOMETRY_TOLERANCE = 1e-9

# =============================================================================
# Tolerance Defaults (Validation)
# =============================================================================

# Temperatures outside this window trigger a configuration warning (K)
TEMPERATURE_WARN_MIN = 150.0
TEMPERATURE_WARN_MAX = 400.0

# Larger batches trade precision for speed; warn above this size
CHARGE_PER_STEP_WARN_MAX = 100
