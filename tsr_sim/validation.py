"""
TSR Flight Simulation - Validation Checks

This module implements state invariant checks:
- Propellant within [0, tank capacity]
- Altitude non-negative, values finite
- Grounded vehicle at rest
- Active stage is 1 or 2

Abort on violation.
"""

import numpy as np

from . import constants as C
from .config import RocketConfig
from .state import SimulationState


class ValidationError(Exception):
    """Raised when a state invariant check fails."""
    pass


def check_fuel_valid(fuel: float, capacity: float, stage: int) -> bool:
    """
    Check that a stage's propellant is within its tank.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    if fuel < 0.0:
        raise ValidationError(f"Stage {stage} propellant negative: {fuel:.3f} kg")
    if fuel > capacity * (1.0 + 1e-9):
        raise ValidationError(
            f"Stage {stage} propellant exceeds capacity: {fuel:.3f} kg > {capacity:.3f} kg"
        )
    return True


def check_altitude_valid(altitude: float) -> bool:
    if altitude < 0.0:
        raise ValidationError(f"Altitude below ground: {altitude:.3f} m")
    return True


def check_finite(state: SimulationState) -> bool:
    """Kinematic fields must be finite numbers."""
    values = {
        'altitude': state.altitude,
        'downrange': state.downrange,
        'vertical_velocity': state.vertical_velocity,
        'horizontal_velocity': state.horizontal_velocity,
        'acceleration': state.acceleration,
    }
    for name, value in values.items():
        if not np.isfinite(value):
            raise ValidationError(f"Non-finite {name}: {value}")
    return True


def check_grounded_at_rest(state: SimulationState) -> bool:
    """A vehicle sitting on the ground has zero velocity."""
    if state.altitude <= 0.0:
        speed = float(np.hypot(state.horizontal_velocity, state.vertical_velocity))
        if speed > C.ZERO_TOLERANCE:
            raise ValidationError(
                f"Grounded vehicle moving: |v| = {speed:.3f} m/s at t={state.time:.2f}s"
            )
    return True


def check_stage_valid(active_stage: int) -> bool:
    if active_stage not in (1, 2):
        raise ValidationError(f"Active stage must be 1 or 2, got {active_stage}")
    return True


def validate_state(state: SimulationState, rocket: RocketConfig) -> bool:
    """
    Perform all validation checks on a state.

    Args:
        state: State to validate
        rocket: Vehicle (tank capacities)

    Returns:
        True if every check passes

    Raises:
        ValidationError: On the first failed check
    """
    check_stage_valid(state.active_stage)
    check_finite(state)
    check_fuel_valid(state.stage1_fuel, rocket.stage1.fuel_mass, 1)
    check_fuel_valid(state.stage2_fuel, rocket.stage2.fuel_mass, 2)
    check_altitude_valid(state.altitude)
    check_grounded_at_rest(state)
    return True
