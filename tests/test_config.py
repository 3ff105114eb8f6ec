"""Tests for config module."""
from dataclasses import FrozenInstanceError, replace

import pytest
from tsr_sim import config
from tsr_sim import constants as C


def test_simulation_config_defaults():
    """Test that default config uses constants values."""
    cfg = config.SimulationConfig()
    assert cfg.dt == C.DT
    assert cfg.max_time == C.MAX_TIME
    assert cfg.separation_impulse == C.SEPARATION_IMPULSE
    assert cfg.landing_kp == C.LANDING_KP
    assert cfg.enable_curvature is True
    assert cfg.landing_target == 0.0


def test_simulation_config_frozen():
    cfg = config.SimulationConfig()
    with pytest.raises(FrozenInstanceError):
        cfg.dt = 0.5


@pytest.mark.parametrize("field,value", [
    ("dt", 0.0),
    ("dt", -0.1),
    ("prediction_step", 0.0),
    ("booster_landing_reserve_kg", -1.0),
    ("gravity_turn_mid_altitude", 500.0),
])
def test_simulation_config_rejects_invalid(field, value):
    with pytest.raises(config.ConfigError):
        config.SimulationConfig(**{field: value})


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        config.SimulationConfig(dt=0.0)


def test_create_test_config():
    cfg = config.create_test_config()
    assert cfg.dt == 0.05
    assert cfg.max_time == 10.0
    assert cfg.verbose is False


def test_create_test_config_overrides():
    cfg = config.create_test_config(dt=0.1, max_time=5.0, stop_on_orbit=True)
    assert cfg.dt == 0.1
    assert cfg.max_time == 5.0
    assert cfg.stop_on_orbit is True


def test_replace_builds_variant():
    cfg = config.create_default_config()
    variant = replace(cfg, landing_target=250.0)
    assert variant.landing_target == 250.0
    assert cfg.landing_target == 0.0


# ============================================================================
# StageConfig / RocketConfig
# ============================================================================

def test_stage_exhaust_velocity_and_burn_time():
    stage = config.create_stage(8000.0, 2000.0, 250000.0, 80.0)
    assert stage.exhaust_velocity == pytest.approx(3125.0)
    assert stage.effective_isp == pytest.approx(3125.0 / C.G0)
    assert stage.burn_time == pytest.approx(100.0)
    assert stage.wet_mass == pytest.approx(10000.0)


def test_create_stage_uses_propellant_catalog():
    stage = config.create_stage(1000.0, 100.0, 10000.0, 5.0, propellant_type="LH2/LOX")
    assert stage.isp_vacuum == C.PROPELLANT_TYPES["LH2/LOX"]["isp_vacuum"]
    assert stage.isp_sea_level == C.PROPELLANT_TYPES["LH2/LOX"]["isp_sea_level"]


@pytest.mark.parametrize("kwargs", [
    dict(fuel_mass=-1.0, dry_mass=100.0, thrust=1000.0, burn_rate=1.0),
    dict(fuel_mass=100.0, dry_mass=-5.0, thrust=1000.0, burn_rate=1.0),
    dict(fuel_mass=100.0, dry_mass=100.0, thrust=1000.0, burn_rate=0.0),
    dict(fuel_mass=100.0, dry_mass=100.0, thrust=1000.0, burn_rate=1.0, propellant_type="Hydrazine"),
    dict(fuel_mass=100.0, dry_mass=100.0, thrust=1000.0, burn_rate=1.0, engine_count=0),
])
def test_stage_config_validation(kwargs):
    with pytest.raises(config.ConfigError):
        config.StageConfig(**kwargs)


def test_unpowered_stage_allowed():
    stage = config.StageConfig(fuel_mass=0.0, dry_mass=100.0, thrust=0.0, burn_rate=0.0)
    assert stage.exhaust_velocity == 0.0
    assert stage.burn_time == 0.0


def test_default_rocket():
    rocket = config.create_default_rocket()
    assert rocket.stage1.thrust == C.STAGE1_THRUST
    assert rocket.stage2.fuel_mass == C.STAGE2_FUEL_MASS
    assert rocket.stage1.engine_count == C.STAGE1_ENGINE_COUNT
    assert rocket.liftoff_mass == pytest.approx(
        C.STAGE1_FUEL_MASS + C.STAGE1_DRY_MASS + C.STAGE2_FUEL_MASS
        + C.STAGE2_DRY_MASS + C.PAYLOAD_MASS
    )


def test_rocket_stage_lookup():
    rocket = config.create_default_rocket()
    assert rocket.stage(1) is rocket.stage1
    assert rocket.stage(2) is rocket.stage2
    with pytest.raises(config.ConfigError):
        rocket.stage(3)


def test_rocket_rejects_negative_payload():
    rocket = config.create_default_rocket()
    with pytest.raises(config.ConfigError):
        replace(rocket, payload_mass=-1.0)


def test_rocket_from_dict_partial():
    rocket = config.RocketConfig.from_dict({
        "name": "Test Vehicle",
        "payload_mass": 250,
        "stage1": {"thrust": 300000, "propellant_type": "Methane/LOX"},
    })
    default = config.create_default_rocket()
    assert rocket.name == "Test Vehicle"
    assert rocket.payload_mass == 250.0
    assert rocket.stage1.thrust == 300000.0
    assert rocket.stage1.fuel_mass == default.stage1.fuel_mass
    assert rocket.stage1.isp_vacuum == C.PROPELLANT_TYPES["Methane/LOX"]["isp_vacuum"]
    assert rocket.stage2 == default.stage2


def test_rocket_from_dict_bad_value():
    with pytest.raises(config.ConfigError):
        config.RocketConfig.from_dict({"stage1": {"thrust": "lots"}})


def test_rocket_from_dict_invalid_stage():
    with pytest.raises(config.ConfigError):
        config.RocketConfig.from_dict({"stage2": {"fuel_mass": -10}})
