"""Tests for the simulation driver."""
import csv

import pytest
from tsr_sim.config import create_default_rocket, create_test_config
from tsr_sim.events import RecordingEventSink
from tsr_sim.main import (
    REASON_MAX_TIME,
    REASON_STABLE_ORBIT,
    SimulationLog,
    check_termination,
    run_simulation,
)
from tsr_sim.orbital import calculate_circular_velocity
from tsr_sim.state import FlightPhase, SimulationState


@pytest.fixture
def rocket():
    return create_default_rocket()


@pytest.fixture
def short_run(rocket):
    return run_simulation(rocket, create_test_config(max_time=2.0))


def _orbiting_state(**kwargs):
    altitude = 400000.0
    defaults = dict(
        time=600.0, altitude=altitude,
        horizontal_velocity=calculate_circular_velocity(altitude),
        velocity=calculate_circular_velocity(altitude),
        active_stage=2, stage1_fuel=0.0, stage2_fuel=100.0,
        phase=FlightPhase.COASTING,
    )
    defaults.update(kwargs)
    return SimulationState(**defaults)


# ============================================================================
# check_termination
# ============================================================================

def test_termination_terminal_phase():
    cfg = create_test_config()
    assert check_termination(SimulationState(phase=FlightPhase.LANDED), 100.0, cfg) == (True, "LANDED")
    assert check_termination(SimulationState(phase=FlightPhase.CRASHED), 100.0, cfg) == (True, "CRASHED")


def test_termination_max_time():
    cfg = create_test_config()
    assert check_termination(SimulationState(time=100.0, phase=FlightPhase.BURNING), 100.0, cfg) == \
        (True, REASON_MAX_TIME)
    assert check_termination(SimulationState(time=99.0, phase=FlightPhase.BURNING), 100.0, cfg) == \
        (False, None)


def test_termination_on_orbit_only_when_enabled():
    state = _orbiting_state(is_orbiting=True)
    assert check_termination(state, 1e6, create_test_config()) == (False, None)
    assert check_termination(state, 1e6, create_test_config(stop_on_orbit=True)) == \
        (True, REASON_STABLE_ORBIT)


# ============================================================================
# run_simulation
# ============================================================================

def test_short_run_hits_max_time(short_run):
    state, log, reason = short_run
    assert reason == REASON_MAX_TIME
    assert state.time >= 2.0
    assert state.phase is FlightPhase.BURNING


def test_log_starts_with_initial_state(short_run):
    _, log, _ = short_run
    assert log.time[0] == 0.0
    assert log.phase_name[0] == "PRE_LAUNCH"
    assert log.phase_name[1] == "BURNING"
    assert log.stage1_fuel[0] == 8000.0


def test_log_units(short_run):
    state, log, _ = short_run
    assert log.altitude[-1] == pytest.approx(state.altitude / 1000)
    assert log.mass[0] == pytest.approx(14300.0)
    assert len(log) == len(log.velocity) == len(log.phase_name)


def test_predictions_recorded(short_run):
    _, log, _ = short_run
    assert len(log.prediction_time) >= 3
    assert len(log.prediction_time) == len(log.predicted_apogee)
    assert len(log.latest_prediction) > 0


@pytest.mark.parametrize("dt", [0.0, -1.0])
def test_invalid_dt_raises(dt, rocket):
    with pytest.raises(ValueError):
        run_simulation(rocket, create_test_config(), dt=dt)


def test_max_time_override(rocket):
    state, _, reason = run_simulation(rocket, create_test_config(max_time=100.0), max_time=1.0)
    assert reason == REASON_MAX_TIME
    assert state.time < 2.0


def test_terminal_initial_state(rocket):
    landed = SimulationState(time=30.0, phase=FlightPhase.LANDED)
    state, log, reason = run_simulation(rocket, create_test_config(), initial_state=landed)
    assert state is landed
    assert reason == "LANDED"
    assert len(log) == 1


def test_stop_on_orbit(rocket):
    cfg = create_test_config(max_time=1000.0, stop_on_orbit=True)
    state, log, reason = run_simulation(rocket, cfg, initial_state=_orbiting_state())
    assert reason == REASON_STABLE_ORBIT
    assert state.is_orbiting
    assert log.phase_name[-1] == "ORBITING"


def test_orbit_continues_without_stop(rocket):
    cfg = create_test_config(max_time=605.0)
    state, _, reason = run_simulation(rocket, cfg, initial_state=_orbiting_state())
    assert reason == REASON_MAX_TIME
    assert state.phase is FlightPhase.COASTING


def test_validation_passes_on_nominal_run(rocket):
    _, _, reason = run_simulation(rocket, create_test_config(max_time=2.0, validate_states=True))
    assert reason == REASON_MAX_TIME


def test_validation_failure_stops_run(rocket):
    bad = SimulationState(stage1_fuel=rocket.stage1.fuel_mass + 100.0,
                          stage2_fuel=rocket.stage2.fuel_mass)
    _, _, reason = run_simulation(rocket, create_test_config(validate_states=True),
                                  initial_state=bad)
    assert reason.startswith("Validation failure")


def test_event_sink_receives_events(rocket):
    sink = RecordingEventSink()
    run_simulation(rocket, create_test_config(max_time=60.0), event_sink=sink)
    assert "maxq-warning" in sink.keys
    assert len(sink.keys) == len(set(sink.keys))


# ============================================================================
# SimulationLog
# ============================================================================

def test_log_to_csv(short_run, tmp_path):
    _, log, _ = short_run
    path = tmp_path / "out" / "telemetry.csv"
    log.to_csv(str(path))
    with open(path, newline='') as fh:
        rows = list(csv.reader(fh))
    assert rows[0][0] == "time"
    assert rows[0][-1] == "phase"
    assert len(rows) == len(log) + 1
    assert rows[1][-1] == "PRE_LAUNCH"


def test_empty_log():
    log = SimulationLog()
    assert len(log) == 0
    log.record_prediction(1.0, [])
    assert log.predicted_apogee == [0.0]
