"""Simulation Configuration - Single Source of Truth (SSOT)

This module provides the central configuration dataclasses for projection
propagation. ALL module options and detector parameters flow through these
classes.

Import Policy:
    from projprop.config.simulation_config import SimulationConfig, PropagationConfig, DetectorConfig

DO NOT use: from projprop.config.simulation_config import *
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from projprop.config.defaults import (
    DEFAULT_BIAS_FIELD,
    DEFAULT_BIAS_VOLTAGE,
    DEFAULT_CHARGE_PER_STEP,
    DEFAULT_DEPLETION_VOLTAGE,
    DEFAULT_DIFFUSE_DEPOSIT,
    DEFAULT_DOPING_MODEL,
    DEFAULT_FIELD_MODEL,
    DEFAULT_IGNORE_MAGNETIC_FIELD,
    DEFAULT_INTEGRATION_TIME,
    DEFAULT_OUTPUT_PLOTS,
    DEFAULT_OUTPUT_PLOTS_BINS,
    DEFAULT_PROPAGATE_HOLES,
    DEFAULT_SENSOR_SIZE_X,
    DEFAULT_SENSOR_SIZE_Y,
    DEFAULT_SENSOR_THICKNESS,
    DEFAULT_TEMPERATURE,
)
from projprop.config.enums import DopingModel, FieldModel
from projprop.core.objects import CarrierType

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]

IDENTITY_ROTATION: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


@dataclass
class PropagationConfig:
    """Options of the projection propagation module.

    Attributes:
        temperature: Sensor temperature (K)
        charge_per_step: Maximum carriers per batch; all carriers of a batch
            share one diffusion offset and one survival draw
        propagate_holes: Propagate holes instead of electrons
        ignore_magnetic_field: Run although a magnetic field is configured
            (Lorentz drift is not modelled)
        integration_time: Readout integration window (ns)
        diffuse_deposit: Diffuse carriers created in undepleted regions to
            the depletion boundary instead of dropping them
        output_plots: Collect per-batch diagnostics and write histograms
        output_plots_bins: Number of histogram bins

    """

    temperature: float = DEFAULT_TEMPERATURE
    charge_per_step: int = DEFAULT_CHARGE_PER_STEP
    propagate_holes: bool = DEFAULT_PROPAGATE_HOLES
    ignore_magnetic_field: bool = DEFAULT_IGNORE_MAGNETIC_FIELD
    integration_time: float = DEFAULT_INTEGRATION_TIME
    diffuse_deposit: bool = DEFAULT_DIFFUSE_DEPOSIT
    output_plots: bool = DEFAULT_OUTPUT_PLOTS
    output_plots_bins: int = DEFAULT_OUTPUT_PLOTS_BINS

    @property
    def carrier_type(self) -> CarrierType:
        """Carrier type propagated in this run."""
        return CarrierType.HOLE if self.propagate_holes else CarrierType.ELECTRON

    def validate(self) -> list[str]:
        """Validate module options.

        Returns:
            List of error messages (empty if valid)

        """
        errors = []

        if self.temperature <= 0:
            errors.append(f"temperature must be > 0 K, got {self.temperature}")

        if isinstance(self.charge_per_step, bool) or not isinstance(self.charge_per_step, int):
            errors.append(f"charge_per_step must be an integer, got {self.charge_per_step!r}")
        elif self.charge_per_step <= 0:
            errors.append(f"charge_per_step must be > 0, got {self.charge_per_step}")

        if self.integration_time <= 0:
            errors.append(f"integration_time must be > 0, got {self.integration_time}")

        if self.output_plots_bins <= 0:
            errors.append(f"output_plots_bins must be > 0, got {self.output_plots_bins}")

        return errors


@dataclass
class SensorConfig:
    """Sensor geometry.

    The sensor is a box centred on ``center`` in local coordinates; the
    readout surface is the face at the largest local z. ``position`` and
    ``rotation`` place the local frame in the global frame.

    Attributes:
        thickness: Sensor thickness along local z (um)
        size_x, size_y: Lateral sensor size (um)
        center: Sensor center in local coordinates (um)
        position: Global position of the local origin (um)
        rotation: Rotation matrix from local to global axes (row-major)

    """

    thickness: float = DEFAULT_SENSOR_THICKNESS
    size_x: float = DEFAULT_SENSOR_SIZE_X
    size_y: float = DEFAULT_SENSOR_SIZE_Y
    center: Vector3 = (0.0, 0.0, 0.0)
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Matrix3 = IDENTITY_ROTATION

    def validate(self) -> list[str]:
        errors = []

        if self.thickness <= 0:
            errors.append(f"sensor thickness must be > 0, got {self.thickness}")
        if self.size_x <= 0 or self.size_y <= 0:
            errors.append(f"sensor size must be > 0, got ({self.size_x}, {self.size_y})")
        if len(self.center) != 3 or len(self.position) != 3:
            errors.append("sensor center and position must be 3-vectors")
        if len(self.rotation) != 3 or any(len(row) != 3 for row in self.rotation):
            errors.append("sensor rotation must be a 3x3 matrix")

        return errors


@dataclass
class ElectricFieldConfig:
    """Electric field description of the sensor.

    Attributes:
        model: Field model; only CONSTANT and LINEAR are usable here
        bias_voltage: Applied bias (V); its sign sets the field direction
        depletion_voltage: Full depletion voltage (V), LINEAR model
        depletion_depth: Depth of the field region from the readout surface
            (um); full thickness when unset
        bias_field: Signed z component of the uniform field (V/cm), CONSTANT model

    """

    model: FieldModel = FieldModel(DEFAULT_FIELD_MODEL)
    bias_voltage: float = DEFAULT_BIAS_VOLTAGE
    depletion_voltage: Optional[float] = DEFAULT_DEPLETION_VOLTAGE
    depletion_depth: Optional[float] = None
    bias_field: float = DEFAULT_BIAS_FIELD

    def validate(self, sensor: SensorConfig) -> list[str]:
        errors = []

        if self.model == FieldModel.LINEAR:
            if self.depletion_voltage is None:
                errors.append("depletion_voltage is required for the linear field model")
            elif self.depletion_voltage < 0:
                errors.append(f"depletion_voltage must be >= 0, got {self.depletion_voltage}")
            if self.bias_voltage == 0:
                errors.append("bias_voltage must be non-zero for the linear field model")

        if self.model == FieldModel.CONSTANT and self.bias_field == 0:
            errors.append("bias_field must be non-zero for the constant field model")

        if self.depletion_depth is not None:
            if self.depletion_depth <= 0:
                errors.append(f"depletion_depth must be > 0, got {self.depletion_depth}")
            elif self.depletion_depth > sensor.thickness:
                errors.append(
                    f"depletion_depth ({self.depletion_depth}) can not be larger than "
                    f"the sensor thickness ({sensor.thickness})",
                )

        return errors


@dataclass
class DopingConfig:
    """Doping profile of the sensor.

    Attributes:
        model: Profile model; only CONSTANT enables the lifetime model
        concentration: Doping concentration (/cm^3). A scalar for CONSTANT,
            rows of (depth, concentration) for REGIONS
        doping_depth: Doped depth from the readout surface (um); full
            thickness when unset

    """

    model: DopingModel = DopingModel(DEFAULT_DOPING_MODEL)
    concentration: Union[float, Sequence[Sequence[float]]] = 0.0
    doping_depth: Optional[float] = None

    def validate(self, sensor: SensorConfig) -> list[str]:
        errors = []

        if self.model == DopingModel.CONSTANT and not isinstance(self.concentration, (int, float)):
            errors.append("constant doping model expects a scalar concentration")

        if self.model == DopingModel.REGIONS:
            if isinstance(self.concentration, (int, float)):
                errors.append("regions doping model expects rows of depth and concentration")
            elif any(len(row) != 2 for row in self.concentration):
                errors.append("regions doping model expects two values per row, depth and concentration")

        if self.doping_depth is not None:
            if self.doping_depth <= 0:
                errors.append(f"doping_depth must be > 0, got {self.doping_depth}")
            elif self.doping_depth > sensor.thickness:
                errors.append("doping depth can not be larger than the sensor thickness")

        return errors


@dataclass
class DetectorConfig:
    """Static description of one detector.

    Attributes:
        name: Detector name used in logs and outputs
        sensor: Sensor geometry
        electric_field: Electric field description
        doping: Doping profile, or None when no profile is configured
        magnetic_field: Magnetic field vector (T)

    """

    name: str = "detector"
    sensor: SensorConfig = field(default_factory=SensorConfig)
    electric_field: ElectricFieldConfig = field(default_factory=ElectricFieldConfig)
    doping: Optional[DopingConfig] = None
    magnetic_field: Vector3 = (0.0, 0.0, 0.0)

    @property
    def has_magnetic_field(self) -> bool:
        return any(component != 0.0 for component in self.magnetic_field)

    def validate(self) -> list[str]:
        errors = []

        errors.extend(self.sensor.validate())
        errors.extend(self.electric_field.validate(self.sensor))
        if self.doping is not None:
            errors.extend(self.doping.validate(self.sensor))
        if len(self.magnetic_field) != 3:
            errors.append("magnetic_field must be a 3-vector")

        return errors


@dataclass
class SimulationConfig:
    """Complete configuration (SSOT): module options plus detector.

    Example:
        >>> config = SimulationConfig()
        >>> errors = config.validate()
        >>> if errors:
        ...     for err in errors:
        ...         print(f"Configuration error: {err}")

    Attributes:
        propagation: Module options
        detector: Detector description

    """

    propagation: PropagationConfig = field(default_factory=PropagationConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)

    def validate(self) -> list[str]:
        """Validate module options and detector description.

        Returns:
            List of error messages (empty if valid)

        """
        errors = []

        errors.extend(self.propagation.validate())
        errors.extend(self.detector.validate())

        return errors

    def to_dict(self) -> dict:
        """Convert configuration to a plain dictionary (YAML/JSON friendly)."""
        from dataclasses import asdict

        def convert(obj):
            if isinstance(obj, (FieldModel, DopingModel)):
                return obj.value
            if isinstance(obj, dict):
                return {key: convert(value) for key, value in obj.items()}
            if isinstance(obj, (list, tuple)):
                return [convert(value) for value in obj]
            return obj

        return convert(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """Create configuration from dictionary.

        Missing keys fall back to the defaults in ``config.defaults``.
        """
        def as_tuple(value, default):
            if value is None:
                return default
            return tuple(float(v) for v in value)

        prop_data = data.get("propagation", {}) or {}
        det_data = data.get("detector", {}) or {}
        sensor_data = det_data.get("sensor", {}) or {}
        field_data = det_data.get("electric_field", {}) or {}
        doping_data = det_data.get("doping")

        propagation = PropagationConfig(
            temperature=prop_data.get("temperature", DEFAULT_TEMPERATURE),
            charge_per_step=prop_data.get("charge_per_step", DEFAULT_CHARGE_PER_STEP),
            propagate_holes=prop_data.get("propagate_holes", DEFAULT_PROPAGATE_HOLES),
            ignore_magnetic_field=prop_data.get(
                "ignore_magnetic_field", DEFAULT_IGNORE_MAGNETIC_FIELD,
            ),
            integration_time=prop_data.get("integration_time", DEFAULT_INTEGRATION_TIME),
            diffuse_deposit=prop_data.get("diffuse_deposit", DEFAULT_DIFFUSE_DEPOSIT),
            output_plots=prop_data.get("output_plots", DEFAULT_OUTPUT_PLOTS),
            output_plots_bins=prop_data.get("output_plots_bins", DEFAULT_OUTPUT_PLOTS_BINS),
        )

        rotation = sensor_data.get("rotation")
        sensor = SensorConfig(
            thickness=sensor_data.get("thickness", DEFAULT_SENSOR_THICKNESS),
            size_x=sensor_data.get("size_x", DEFAULT_SENSOR_SIZE_X),
            size_y=sensor_data.get("size_y", DEFAULT_SENSOR_SIZE_Y),
            center=as_tuple(sensor_data.get("center"), (0.0, 0.0, 0.0)),
            position=as_tuple(sensor_data.get("position"), (0.0, 0.0, 0.0)),
            rotation=(
                tuple(tuple(float(v) for v in row) for row in rotation)
                if rotation is not None else IDENTITY_ROTATION
            ),
        )

        electric_field = ElectricFieldConfig(
            model=FieldModel(field_data.get("model", DEFAULT_FIELD_MODEL)),
            bias_voltage=field_data.get("bias_voltage", DEFAULT_BIAS_VOLTAGE),
            depletion_voltage=field_data.get("depletion_voltage", DEFAULT_DEPLETION_VOLTAGE),
            depletion_depth=field_data.get("depletion_depth"),
            bias_field=field_data.get("bias_field", DEFAULT_BIAS_FIELD),
        )

        doping = None
        if doping_data:
            doping = DopingConfig(
                model=DopingModel(doping_data.get("model", DEFAULT_DOPING_MODEL)),
                concentration=doping_data.get("concentration", 0.0),
                doping_depth=doping_data.get("doping_depth"),
            )

        detector = DetectorConfig(
            name=det_data.get("name", "detector"),
            sensor=sensor,
            electric_field=electric_field,
            doping=doping,
            magnetic_field=as_tuple(det_data.get("magnetic_field"), (0.0, 0.0, 0.0)),
        )

        return cls(propagation=propagation, detector=detector)


def create_default_config() -> SimulationConfig:
    """Create a default configuration.

    Raises:
        ValueError: If the defaults themselves are inconsistent

    """
    config = SimulationConfig()
    errors = config.validate()

    if errors:
        raise ValueError("Default configuration is invalid:\n" + "\n".join(errors))

    return config
