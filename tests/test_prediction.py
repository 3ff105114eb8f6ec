import pytest
from tsr_sim.config import create_default_rocket, create_test_config
from tsr_sim.integrators import step
from tsr_sim.prediction import TrajectoryPoint, predict_trajectory, predicted_apogee
from tsr_sim.state import FlightPhase, SimulationState, create_initial_state


@pytest.fixture
def rocket():
    return create_default_rocket()


@pytest.fixture
def cfg():
    return create_test_config()


@pytest.fixture
def burning_state(rocket, cfg):
    state = step(create_initial_state(rocket, cfg), rocket, config=cfg)
    for _ in range(100):
        state = step(state, rocket, config=cfg)
    return state


def test_first_point_is_current_state(burning_state, rocket, cfg):
    first = next(predict_trajectory(burning_state, rocket, cfg))
    assert first == TrajectoryPoint(burning_state.time, burning_state.altitude)


def test_prediction_does_not_modify_state(burning_state, rocket, cfg):
    before = burning_state.copy()
    list(predict_trajectory(burning_state, rocket, cfg))
    assert burning_state == before


def test_prediction_point_count(burning_state, rocket, cfg):
    points = list(predict_trajectory(burning_state, rocket, cfg, horizon=10.0, step=0.5))
    assert len(points) <= 10.0 / 0.5 + 1
    assert points[-1].time == pytest.approx(burning_state.time + 10.0)


def test_prediction_times_increase(burning_state, rocket, cfg):
    times = [p.time for p in predict_trajectory(burning_state, rocket, cfg)]
    assert all(t2 > t1 for t1, t2 in zip(times, times[1:]))


def test_burning_vehicle_predicted_to_climb(burning_state, rocket, cfg):
    points = list(predict_trajectory(burning_state, rocket, cfg))
    assert predicted_apogee(points) > burning_state.altitude


def test_falling_vehicle_stops_at_ground(rocket, cfg):
    state = SimulationState(time=300.0, altitude=100.0, vertical_velocity=-50.0,
                            stage1_fuel=0.0, is_booster=True, phase=FlightPhase.DESCENT)
    points = list(predict_trajectory(state, rocket, cfg))
    assert points[-1].predicted_altitude == 0.0
    assert len(points) < cfg.prediction_horizon / cfg.prediction_step + 1
    assert all(p.predicted_altitude >= 0.0 for p in points)


def test_predicted_apogee_empty():
    assert predicted_apogee([]) == 0.0


def test_landing_reserve_lowers_predicted_apogee(burning_state, rocket):
    full = predicted_apogee(predict_trajectory(burning_state, rocket, create_test_config()))
    held = predicted_apogee(predict_trajectory(
        burning_state, rocket, create_test_config(booster_landing_reserve_kg=6000.0)))
    assert held < full


def test_reserve_only_stage_never_thrusts(rocket):
    state = SimulationState(time=5.0, stage1_fuel=2000.0, stage2_fuel=0.0,
                            phase=FlightPhase.BURNING)
    cfg = create_test_config(booster_landing_reserve_kg=2000.0)
    points = list(predict_trajectory(state, rocket, cfg))
    assert [p.predicted_altitude for p in points] == [0.0, 0.0]
