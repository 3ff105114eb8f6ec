import pytest
import numpy as np
from tsr_sim import constants as C


def test_earth_parameters():
    assert C.MU_EARTH == pytest.approx(3.986004418e14)
    assert C.R_EARTH == pytest.approx(6.371e6)
    assert C.G0 == pytest.approx(9.80665)
    # Surface gravity from mu and radius is close to standard g
    assert C.MU_EARTH / C.R_EARTH**2 == pytest.approx(C.G0, rel=0.01)


def test_atmosphere_table_ordered():
    bases = [layer[1] for layer in C.ATMOSPHERE_LAYERS]
    assert bases[0] == 0.0
    assert all(b2 > b1 for b1, b2 in zip(bases, bases[1:]))
    assert bases[-1] < C.EXOSPHERE_BASE_ALTITUDE


def test_atmosphere_layer_names_unique():
    names = [layer[0] for layer in C.ATMOSPHERE_LAYERS] + [C.EXOSPHERE_NAME]
    assert len(set(names)) == len(names)


def test_propellant_catalog():
    assert C.DEFAULT_PROPELLANT in C.PROPELLANT_TYPES
    for props in C.PROPELLANT_TYPES.values():
        assert props["isp_vacuum"] > props["isp_sea_level"] > 0


def test_default_vehicle_lifts_off():
    liftoff_mass = (C.STAGE1_FUEL_MASS + C.STAGE1_DRY_MASS + C.STAGE2_FUEL_MASS
                    + C.STAGE2_DRY_MASS + C.PAYLOAD_MASS)
    assert C.STAGE1_THRUST / (liftoff_mass * C.G0) > 1.0


def test_gravity_turn_schedule_consistent():
    assert C.GRAVITY_TURN_START_ALTITUDE < C.GRAVITY_TURN_MID_ALTITUDE < C.GRAVITY_TURN_END_ALTITUDE
    assert 0.0 < C.GRAVITY_TURN_MID_ANGLE < C.GRAVITY_TURN_MAX_ANGLE <= 90.0


def test_recovery_windows():
    assert C.BOOSTBACK_MIN_ALTITUDE < C.BOOSTBACK_MAX_ALTITUDE
    assert C.REENTRY_MIN_ALTITUDE < C.REENTRY_MAX_ALTITUDE
    assert C.REENTRY_BURN_END_ALTITUDE < C.REENTRY_MIN_ALTITUDE
    assert C.REENTRY_TRIGGER_VELOCITY < 0.0
    assert C.MIN_LANDING_THROTTLE < C.MAX_LANDING_THROTTLE


def test_touchdown_thresholds():
    assert C.LANDING_SUCCESS_SPEED < C.SAFE_LANDING_SPEED


def test_two_pi():
    assert C.TWO_PI == pytest.approx(2 * np.pi)
