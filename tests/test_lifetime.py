"""Tests for the doping-dependent carrier lifetime."""

import math

import pytest
from numpy.testing import assert_allclose

from projprop.config import ConfigurationWarning, DopingConfig, DopingModel
from projprop.core.constants import ELECTRON_LIFETIME, HOLE_LIFETIME
from projprop.core.objects import CarrierType
from projprop.physics.lifetime import (
    DopingSegment,
    LifetimeModel,
    auger_lifetime,
    build_lifetime_model,
    effective_lifetime,
    srh_lifetime,
)


class TestLifetimeFormulas:
    """Tests for SRH and Auger lifetimes."""

    def test_srh_lifetime(self):
        assert_allclose(srh_lifetime(1e16, ELECTRON_LIFETIME), 0.5e-5)
        assert_allclose(srh_lifetime(0.0, HOLE_LIFETIME), 4.0e-4)

    def test_auger_lifetime(self):
        assert_allclose(auger_lifetime(1e18, ELECTRON_LIFETIME), 1.0 / (2.8e-31 * 1e36))
        assert auger_lifetime(0.0, ELECTRON_LIFETIME) == math.inf

    def test_sign_of_concentration_ignored(self):
        """Test that n- and p-type doping of equal magnitude give equal lifetimes."""
        assert effective_lifetime(-1e15, CarrierType.HOLE) == effective_lifetime(1e15, CarrierType.HOLE)

    def test_effective_lifetime_combines_rates(self):
        concentration = 1e19
        srh = srh_lifetime(concentration, ELECTRON_LIFETIME)
        auger = auger_lifetime(concentration, ELECTRON_LIFETIME)

        expected_ns = 1e9 / (1.0 / srh + 1.0 / auger)

        assert_allclose(effective_lifetime(concentration, CarrierType.ELECTRON), expected_ns)

    def test_lifetime_decreases_with_doping(self):
        lifetimes = [effective_lifetime(n, CarrierType.ELECTRON) for n in (1e12, 1e15, 1e17, 1e19)]
        assert all(a > b for a, b in zip(lifetimes, lifetimes[1:]))

    def test_low_doping_is_srh_limited(self):
        assert_allclose(effective_lifetime(1e12, CarrierType.ELECTRON), 1e4 / (1.0 + 1e-4), rtol=1e-9)


class TestLifetimeModel:
    """Tests for the position to lifetime lookup."""

    def test_empty_model_is_infinite(self):
        model = LifetimeModel(CarrierType.ELECTRON)

        assert not model.enabled
        assert model.lifetime(0.0) == math.inf

    def test_lookup_inside_and_outside(self):
        model = LifetimeModel(CarrierType.ELECTRON, [DopingSegment(1e15, 0.0, 100.0)])

        assert model.lifetime(50.0) == effective_lifetime(1e15, CarrierType.ELECTRON)
        assert model.lifetime(-10.0) == math.inf
        assert model.lifetime(150.0) == math.inf


class TestBuildLifetimeModel:
    """Tests for the lifetime model of a detector."""

    def test_no_doping_profile(self, geometry):
        model = build_lifetime_model(None, geometry, CarrierType.ELECTRON)
        assert not model.enabled

    def test_constant_doping(self, geometry):
        doping = DopingConfig(model=DopingModel.CONSTANT, concentration=1e12)

        model = build_lifetime_model(doping, geometry, CarrierType.HOLE)

        assert model.enabled
        assert model.lifetime(-150.0) == effective_lifetime(1e12, CarrierType.HOLE)
        assert model.lifetime(150.0) == effective_lifetime(1e12, CarrierType.HOLE)

    def test_doping_depth(self, geometry):
        """Test that the profile only covers the doped depth below the readout surface."""
        doping = DopingConfig(model=DopingModel.CONSTANT, concentration=1e12, doping_depth=100.0)

        model = build_lifetime_model(doping, geometry, CarrierType.ELECTRON)

        assert math.isfinite(model.lifetime(100.0))
        assert model.lifetime(0.0) == math.inf

    @pytest.mark.parametrize("model_type", [DopingModel.REGIONS, DopingModel.MESH])
    def test_non_constant_doping_disables_lifetime(self, geometry, model_type):
        doping = DopingConfig(model=model_type, concentration=[[0.0, 1e12]])

        with pytest.warns(ConfigurationWarning, match="not constant"):
            model = build_lifetime_model(doping, geometry, CarrierType.ELECTRON)

        assert not model.enabled
        assert model.lifetime(0.0) == math.inf
