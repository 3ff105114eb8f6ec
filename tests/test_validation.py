import pytest
import numpy as np
from tsr_sim import validation
from tsr_sim.config import create_default_rocket
from tsr_sim.state import SimulationState, create_initial_state


# ============================================================================
# check_fuel_valid tests
# ============================================================================

def test_check_fuel_valid():
    assert validation.check_fuel_valid(500.0, 8000.0, 1)

def test_check_fuel_full_tank():
    assert validation.check_fuel_valid(8000.0, 8000.0, 1)

def test_check_fuel_negative():
    with pytest.raises(validation.ValidationError):
        validation.check_fuel_valid(-0.1, 8000.0, 1)

def test_check_fuel_overfilled():
    with pytest.raises(validation.ValidationError):
        validation.check_fuel_valid(3100.0, 3000.0, 2)


# ============================================================================
# check_altitude_valid / check_finite tests
# ============================================================================

def test_check_altitude_valid():
    assert validation.check_altitude_valid(0.0)
    assert validation.check_altitude_valid(120000.0)

def test_check_altitude_below_ground():
    with pytest.raises(validation.ValidationError):
        validation.check_altitude_valid(-1.0)

def test_check_finite():
    assert validation.check_finite(SimulationState(altitude=1000.0, vertical_velocity=50.0))

@pytest.mark.parametrize("field", ["altitude", "vertical_velocity", "acceleration"])
def test_check_finite_rejects_nan(field):
    with pytest.raises(validation.ValidationError):
        validation.check_finite(SimulationState(**{field: np.nan}))

def test_check_finite_rejects_inf():
    with pytest.raises(validation.ValidationError):
        validation.check_finite(SimulationState(downrange=np.inf))


# ============================================================================
# check_grounded_at_rest / check_stage_valid tests
# ============================================================================

def test_grounded_at_rest():
    assert validation.check_grounded_at_rest(SimulationState())

def test_grounded_moving():
    with pytest.raises(validation.ValidationError):
        validation.check_grounded_at_rest(SimulationState(altitude=0.0, horizontal_velocity=2.0))

def test_airborne_may_move():
    assert validation.check_grounded_at_rest(SimulationState(altitude=10.0, vertical_velocity=20.0))

def test_check_stage_valid():
    assert validation.check_stage_valid(1)
    assert validation.check_stage_valid(2)
    with pytest.raises(validation.ValidationError):
        validation.check_stage_valid(3)


# ============================================================================
# validate_state tests
# ============================================================================

def test_validate_initial_state():
    rocket = create_default_rocket()
    assert validation.validate_state(create_initial_state(rocket), rocket)

def test_validate_state_catches_overfill():
    rocket = create_default_rocket()
    state = SimulationState(stage1_fuel=rocket.stage1.fuel_mass + 10.0)
    with pytest.raises(validation.ValidationError):
        validation.validate_state(state, rocket)
