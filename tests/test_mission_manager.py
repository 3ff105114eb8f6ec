"""Tests for recovery sequencing and the booster fork."""
import pytest
from tsr_sim import constants as C
from tsr_sim.config import create_default_rocket, create_test_config
from tsr_sim.mission_manager import advance_recovery_sequence, separate_booster
from tsr_sim.state import FlightPhase, SimulationState


@pytest.fixture
def rocket():
    return create_default_rocket()


@pytest.fixture
def cfg():
    return create_test_config()


def _booster(**kwargs):
    defaults = dict(
        time=150.0,
        stage1_fuel=800.0,
        stage2_fuel=0.0,
        active_stage=1,
        is_booster=True,
        phase=FlightPhase.COASTING,
        phase_start_time=100.0,
    )
    defaults.update(kwargs)
    return SimulationState(**defaults)


def test_boostback_starts_in_window(rocket, cfg):
    state = _booster(altitude=70000.0, vertical_velocity=200.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.BOOSTBACK
    assert new.phase_start_time == state.time


def test_boostback_ends_after_duration(rocket, cfg):
    state = _booster(phase=FlightPhase.BOOSTBACK, altitude=75000.0, time=120.0,
                     phase_start_time=100.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.COASTING
    assert new.boostback_complete


def test_boostback_continues_mid_burn(rocket, cfg):
    state = _booster(phase=FlightPhase.BOOSTBACK, altitude=75000.0, time=105.0,
                     phase_start_time=100.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.BOOSTBACK
    assert not new.boostback_complete


def test_boostback_ends_on_budget(rocket):
    cfg = create_test_config(booster_boostback_budget_kg=80.0)
    state = _booster(phase=FlightPhase.BOOSTBACK, altitude=75000.0, time=102.0,
                     phase_start_time=100.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.COASTING
    assert new.boostback_complete


def test_boostback_ends_without_fuel(rocket, cfg):
    state = _booster(phase=FlightPhase.BOOSTBACK, altitude=75000.0, time=101.0,
                     phase_start_time=100.0, stage1_fuel=0.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.COASTING


def test_finished_boostback_does_not_restart(rocket, cfg):
    state = _booster(altitude=70000.0, vertical_velocity=100.0, boostback_complete=True)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.COASTING


def test_reentry_burn_starts(rocket, cfg):
    state = _booster(phase=FlightPhase.DESCENT, altitude=69000.0, vertical_velocity=-600.0,
                     boostback_complete=True)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.RE_ENTRY
    assert new.grid_fins_deployed


def test_reentry_burn_ends_below_floor(rocket, cfg):
    state = _booster(phase=FlightPhase.RE_ENTRY, altitude=49000.0, vertical_velocity=-400.0,
                     boostback_complete=True)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.DESCENT
    assert new.reentry_burn_complete


def test_landing_burn_starts(rocket, cfg):
    state = _booster(phase=FlightPhase.DESCENT, altitude=200.0, vertical_velocity=-150.0,
                     stage1_fuel=500.0, boostback_complete=True, reentry_burn_complete=True)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.LANDING
    assert new.landing_burn_start_altitude == pytest.approx(200.0)
    assert new.legs_deployed


def test_landing_start_altitude_recorded_once(rocket, cfg):
    state = _booster(phase=FlightPhase.LANDING, altitude=150.0, vertical_velocity=-80.0,
                     boostback_complete=True, reentry_burn_complete=True,
                     landing_burn_start_altitude=200.0)
    new = advance_recovery_sequence(state, rocket, cfg)
    assert new.phase is FlightPhase.LANDING
    assert new.landing_burn_start_altitude == 200.0


@pytest.mark.parametrize("overrides", [
    dict(active_stage=2, is_booster=False),
    dict(phase=FlightPhase.LANDED, altitude=0.0),
    dict(altitude=0.0),
])
def test_sequence_ignores_other_vehicles(overrides, rocket, cfg):
    base = dict(altitude=70000.0, vertical_velocity=100.0)
    base.update(overrides)
    state = _booster(**base)
    assert advance_recovery_sequence(state, rocket, cfg) is state


def test_separate_booster(rocket, cfg):
    stack = SimulationState(
        time=100.0, altitude=60000.0, vertical_velocity=800.0, horizontal_velocity=900.0,
        stage1_fuel=0.0, stage2_fuel=3000.0, active_stage=1, phase=FlightPhase.STAGING,
        separation_time=100.0,
    )
    booster = separate_booster(stack, rocket, cfg)
    assert booster.vertical_velocity == pytest.approx(800.0 - cfg.separation_impulse)
    assert booster.horizontal_velocity == 900.0
    assert booster.altitude == stack.altitude
    assert booster.is_booster
    assert booster.phase is FlightPhase.COASTING
    assert booster.stage2_fuel == 0.0
    assert booster.phase_start_time == stack.time
    assert booster.delta_v_remaining == 0.0
    # The stack itself is untouched
    assert stack.vertical_velocity == 800.0
    assert not stack.is_booster


def test_separate_booster_keeps_reserve(rocket):
    stack = SimulationState(time=90.0, altitude=55000.0, vertical_velocity=700.0,
                            stage1_fuel=1200.0, stage2_fuel=3000.0, phase=FlightPhase.STAGING)
    booster = separate_booster(stack, rocket)
    assert booster.stage1_fuel == 1200.0
    assert booster.delta_v_remaining > 0.0
    assert booster.vertical_velocity == pytest.approx(700.0 - C.SEPARATION_IMPULSE)
