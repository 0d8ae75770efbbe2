"""Tests for the linear electric field lookup."""

import math

import pytest
from numpy.testing import assert_allclose

from projprop.config import ConfigurationError, ElectricFieldConfig, FieldModel, NonLinearFieldError
from projprop.physics.field import FieldSampler, LinearFieldSegment, build_field_sampler


class TestLinearFieldSegment:
    """Tests for a single linear segment."""

    def test_through_interpolates_endpoints(self):
        segment = LinearFieldSegment.through(-10.0, 100.0, 10.0, 300.0)

        assert_allclose(segment.field_at(-10.0), 100.0)
        assert_allclose(segment.field_at(10.0), 300.0)
        assert_allclose(segment.field_at(0.0), 200.0)

    def test_empty_segment_rejected(self):
        with pytest.raises(ValueError, match="positive extent"):
            LinearFieldSegment(slope=1.0, intercept=0.0, z_min=5.0, z_max=5.0)

    def test_oriented_flips_field(self):
        segment = LinearFieldSegment(slope=2.0, intercept=-50.0, z_min=0.0, z_max=10.0)
        flipped = segment.oriented(-1)

        assert flipped.field_at(3.0) == -segment.field_at(3.0)
        assert (flipped.z_min, flipped.z_max) == (segment.z_min, segment.z_max)


class TestBuildFieldSampler:
    """Tests for the field models of a detector."""

    def test_fully_depleted_linear_field(self, default_config, geometry):
        """Test the linear field at -100 V bias and 50 V depletion voltage."""
        sampler = build_field_sampler(default_config.detector.electric_field, geometry)
        segment = sampler.sample(0.0)

        assert segment is not None
        assert sampler.z_min == pytest.approx(-150.0)
        assert sampler.z_max == pytest.approx(150.0)
        # (V_b - V_d) / d at the back side, (V_b + V_d) / d at the readout side
        assert_allclose(segment.field_at(-150.0), -50.0 / 0.03, rtol=1e-12)
        assert_allclose(segment.field_at(150.0), -150.0 / 0.03, rtol=1e-12)

    def test_partially_depleted_linear_field(self, partially_depleted_config, geometry):
        """Test that only the upper part of an underdepleted sensor has a field."""
        sampler = build_field_sampler(partially_depleted_config.detector.electric_field, geometry)
        depleted_depth = 300.0 * math.sqrt(25.0 / 50.0)

        assert sampler.z_min == pytest.approx(150.0 - depleted_depth)
        assert sampler.sample(-100.0) is None
        assert sampler.sample(0.0) is not None
        # Field vanishes at the depletion edge
        assert sampler.sample(sampler.z_min) is None
        assert_allclose(
            sampler.segment_at(150.0).field_at(150.0),
            -2.0 * 25.0 / (depleted_depth * 1e-4),
            rtol=1e-12,
        )

    def test_depletion_depth_limits_field(self, shallow_field_config, geometry):
        sampler = build_field_sampler(shallow_field_config.detector.electric_field, geometry)

        assert sampler.z_min == pytest.approx(-50.0)
        assert sampler.sample(-60.0) is None
        assert sampler.sample(-40.0) is not None

    def test_constant_field(self, geometry):
        field_config = ElectricFieldConfig(model=FieldModel.CONSTANT, bias_field=-2000.0)

        sampler = build_field_sampler(field_config, geometry)

        assert sampler.sample(-149.0).field_at(-149.0) == -2000.0
        assert sampler.sample(149.0).slope == 0.0

    @pytest.mark.parametrize("model", [FieldModel.MESH, FieldModel.PARABOLIC, FieldModel.CUSTOM])
    def test_non_linear_models_rejected(self, geometry, model):
        with pytest.raises(NonLinearFieldError):
            build_field_sampler(ElectricFieldConfig(model=model), geometry)

    def test_non_linear_error_is_configuration_error(self):
        assert issubclass(NonLinearFieldError, ConfigurationError)


class TestFieldSampler:
    """Tests for lookups over several segments."""

    @pytest.fixture
    def sampler(self):
        # Depleted region [-50, 100] split in two, field-free below -50
        return FieldSampler([
            LinearFieldSegment.through(20.0, 400.0, 100.0, 800.0),
            LinearFieldSegment.through(-50.0, 100.0, 20.0, 400.0),
        ])

    def test_segments_sorted(self, sampler):
        assert [seg.z_min for seg in sampler.segments] == [-50.0, 20.0]

    def test_segment_lookup(self, sampler):
        assert sampler.sample(0.0).z_min == -50.0
        assert sampler.sample(50.0).z_min == 20.0
        assert sampler.sample(-60.0) is None
        assert sampler.sample(150.0) is None

    def test_overlapping_segments_rejected(self):
        with pytest.raises(ConfigurationError, match="overlap"):
            FieldSampler([
                LinearFieldSegment(slope=0.0, intercept=1.0, z_min=0.0, z_max=10.0),
                LinearFieldSegment(slope=0.0, intercept=1.0, z_min=5.0, z_max=15.0),
            ])

    def test_no_segments_rejected(self):
        with pytest.raises(ConfigurationError, match="no depleted region"):
            FieldSampler([])

    def test_depletion_boundary(self, sampler):
        assert sampler.depletion_boundary(-80.0) == -50.0
        assert sampler.depletion_boundary(10.0) == 10.0
        assert sampler.depletion_boundary(120.0) is None

    def test_segments_between_splits_path(self, sampler):
        pieces = sampler.segments_between(0.0, 100.0)

        assert [(start, end) for _, start, end in pieces] == [(0.0, 20.0), (20.0, 100.0)]

    def test_segments_between_empty_path(self, sampler):
        assert sampler.segments_between(100.0, 100.0) == []

    def test_segments_between_gap(self):
        sampler = FieldSampler([
            LinearFieldSegment(slope=0.0, intercept=100.0, z_min=0.0, z_max=10.0),
            LinearFieldSegment(slope=0.0, intercept=100.0, z_min=20.0, z_max=30.0),
        ])

        with pytest.raises(ConfigurationError, match="No electric field"):
            sampler.segments_between(5.0, 30.0)

    def test_check_polarity(self, sampler):
        sampler.check_polarity("electron")

        with pytest.raises(ConfigurationError, match="away from the readout surface"):
            sampler.oriented(-1).check_polarity("electron")
