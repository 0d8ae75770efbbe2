"""Tests for the configuration layer: dataclasses, validation, YAML access."""

import pytest

from projprop.config import (
    ConfigurationError,
    ConfigurationWarning,
    DopingConfig,
    DopingModel,
    FieldModel,
    PropagationConfig,
    SimulationConfig,
    create_default_config,
    create_validated_config,
    get_defaults,
    load_config_file,
    validate_config,
    warn_if_unsafe,
)
from projprop.core.objects import CarrierType


class TestPropagationConfig:
    """Tests for module options."""

    def test_defaults(self):
        """Test default module options."""
        options = PropagationConfig()

        assert options.charge_per_step == 10
        assert options.integration_time == 25.0
        assert options.temperature == pytest.approx(293.15)
        assert not options.propagate_holes
        assert not options.diffuse_deposit
        assert options.carrier_type == CarrierType.ELECTRON

    def test_propagate_holes_selects_holes(self):
        options = PropagationConfig(propagate_holes=True)
        assert options.carrier_type == CarrierType.HOLE

    @pytest.mark.parametrize("charge_per_step", [0, -3, 2.5, True])
    def test_invalid_charge_per_step(self, charge_per_step):
        """Test that charge_per_step must be a positive integer."""
        errors = PropagationConfig(charge_per_step=charge_per_step).validate()
        assert any("charge_per_step" in err for err in errors)

    def test_invalid_integration_time(self):
        errors = PropagationConfig(integration_time=0.0).validate()
        assert any("integration_time" in err for err in errors)

    def test_invalid_temperature(self):
        errors = PropagationConfig(temperature=-1.0).validate()
        assert any("temperature" in err for err in errors)


class TestDetectorConfig:
    """Tests for detector description validation."""

    def test_default_detector_is_valid(self):
        assert create_default_config().detector.validate() == []

    def test_depletion_depth_larger_than_sensor(self):
        config = SimulationConfig()
        config.detector.electric_field.depletion_depth = 500.0

        errors = config.validate()

        assert any("depletion_depth" in err for err in errors)

    def test_zero_bias_linear_field(self):
        config = SimulationConfig()
        config.detector.electric_field.bias_voltage = 0.0
        assert any("bias_voltage" in err for err in config.validate())

    def test_constant_doping_needs_scalar(self):
        config = SimulationConfig()
        config.detector.doping = DopingConfig(model=DopingModel.CONSTANT, concentration=[[0.0, 1e12]])
        assert any("scalar" in err for err in config.validate())

    def test_regions_doping_needs_rows(self):
        config = SimulationConfig()
        config.detector.doping = DopingConfig(model=DopingModel.REGIONS, concentration=1e12)
        assert config.validate()

    def test_magnetic_field_flag(self):
        config = SimulationConfig()
        assert not config.detector.has_magnetic_field

        config.detector.magnetic_field = (0.0, 0.0, 2.0)
        assert config.detector.has_magnetic_field

    def test_field_model_linearity(self):
        assert FieldModel.CONSTANT.is_linear
        assert FieldModel.LINEAR.is_linear
        assert not FieldModel.MESH.is_linear
        assert not FieldModel.PARABOLIC.is_linear


class TestSimulationConfig:
    """Tests for the top-level configuration."""

    def test_dict_conversion_preserves_config(self):
        """Test that to_dict/from_dict reproduce the configuration."""
        config = create_default_config()
        config.propagation.charge_per_step = 3
        config.detector.doping = DopingConfig(concentration=5e12, doping_depth=120.0)
        config.detector.sensor.position = (1.0, 2.0, 3.0)

        restored = SimulationConfig.from_dict(config.to_dict())

        assert restored == config

    def test_to_dict_uses_plain_values(self):
        data = create_default_config().to_dict()

        assert data["detector"]["electric_field"]["model"] == "linear"
        assert data["detector"]["doping"] is None
        assert isinstance(data["detector"]["sensor"]["rotation"], list)

    def test_from_dict_fills_missing_sections(self):
        config = SimulationConfig.from_dict({"propagation": {"integration_time": 10.0}})

        assert config.propagation.integration_time == 10.0
        assert config.detector.sensor.thickness == 300.0
        assert config.detector.electric_field.model == FieldModel.LINEAR


class TestValidation:
    """Tests for validation utilities."""

    def test_validate_config_raises(self):
        config = SimulationConfig(propagation=PropagationConfig(charge_per_step=0))

        with pytest.raises(ConfigurationError, match="charge_per_step"):
            validate_config(config)

    def test_validate_config_without_raise(self):
        config = SimulationConfig(propagation=PropagationConfig(charge_per_step=0))

        is_valid, errors = validate_config(config, raise_on_error=False)

        assert not is_valid
        assert len(errors) == 1

    def test_warn_on_unusual_temperature(self):
        config = SimulationConfig(propagation=PropagationConfig(temperature=500.0))

        with pytest.warns(ConfigurationWarning, match="temperature"):
            messages = warn_if_unsafe(config)

        assert len(messages) == 1

    def test_no_warning_for_defaults(self, recwarn):
        assert warn_if_unsafe(create_default_config()) == []
        assert len(recwarn) == 0

    def test_create_validated_config_overrides(self):
        """Test that overrides reach options, sensor and field."""
        config = create_validated_config(charge_per_step=5, thickness=200.0, bias_voltage=-150.0)

        assert config.propagation.charge_per_step == 5
        assert config.detector.sensor.thickness == 200.0
        assert config.detector.electric_field.bias_voltage == -150.0

    def test_create_validated_config_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown configuration parameter"):
            create_validated_config(not_an_option=1)

    def test_create_validated_config_invalid_value(self):
        with pytest.raises(ConfigurationError):
            create_validated_config(integration_time=-5.0)


class TestYamlLoader:
    """Tests for YAML defaults and user files."""

    def test_get_defaults(self):
        defaults = get_defaults()
        assert defaults["propagation"]["charge_per_step"] == 10
        assert defaults["detector"]["electric_field"]["model"] == "linear"

    def test_get_defaults_returns_copy(self):
        get_defaults()["propagation"]["charge_per_step"] = 1
        assert get_defaults()["propagation"]["charge_per_step"] == 10

    def test_defaults_match_dataclasses(self):
        """Test that defaults.yaml and the dataclass defaults agree."""
        from_yaml = SimulationConfig.from_dict(get_defaults())
        assert from_yaml == create_default_config()

    def test_load_config_file(self, tmp_path):
        path = tmp_path / "detector.yaml"
        path.write_text(
            "propagation:\n"
            "  propagate_holes: true\n"
            "detector:\n"
            "  name: dut\n"
            "  electric_field:\n"
            "    bias_voltage: 150.0\n"
        )

        config = SimulationConfig.from_dict(load_config_file(path))

        assert config.propagation.propagate_holes
        assert config.detector.name == "dut"
        assert config.detector.electric_field.bias_voltage == 150.0

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_load_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(path)
