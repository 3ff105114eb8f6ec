"""
TSR Flight Simulation - Trajectory Prediction

A coarse look-ahead of the altitude profile for display. The model is
vertical-only (thrust projected on the local vertical, drag, constant
surface gravity) with the same stage hand-over as the integrator.

The predictor is a generator: points are produced lazily and the source
state is never touched.
"""

from typing import Iterable, Iterator, NamedTuple, Optional

import numpy as np

from . import constants as C
from .config import RocketConfig, SimulationConfig, create_default_config
from .forces import compute_atmosphere_properties
from .mass import compute_vehicle_mass
from .state import FlightPhase, SimulationState


class TrajectoryPoint(NamedTuple):
    time: float
    predicted_altitude: float


def predict_trajectory(state: SimulationState, rocket: RocketConfig,
                       config: Optional[SimulationConfig] = None,
                       horizon: Optional[float] = None,
                       step: Optional[float] = None) -> Iterator[TrajectoryPoint]:
    """
    Yield predicted (time, altitude) points from the current state.

    The first point is the current altitude. Prediction stops at the
    horizon or after yielding a ground-contact point at altitude 0.

    Args:
        state: Starting state (read only)
        rocket: Vehicle description
        config: Supplies default horizon, step and separation impulse
        horizon: Look-ahead span (s)
        step: Prediction step (s)

    Yields:
        TrajectoryPoint
    """
    if config is None:
        config = create_default_config()
    if horizon is None:
        horizon = config.prediction_horizon
    if step is None:
        step = config.prediction_step

    t = state.time
    altitude = state.altitude
    velocity = state.vertical_velocity
    stage1_fuel = state.stage1_fuel
    stage2_fuel = state.stage2_fuel
    active_stage = state.active_stage
    burning = state.phase is FlightPhase.BURNING
    # Stage 1 burns down to the booster landing reserve
    reserve = 0.0 if state.is_booster else config.booster_landing_reserve_kg
    cos_angle = float(np.cos(np.radians(state.thrust_angle)))

    yield TrajectoryPoint(float(t), float(altitude))

    for _ in range(int(round(horizon / step))):
        mass, _dry = compute_vehicle_mass(active_stage, stage1_fuel, stage2_fuel, rocket,
                                          state.is_booster)
        density = compute_atmosphere_properties(altitude)['density']
        drag = (-0.5 * density * velocity * velocity * rocket.drag_coefficient
                * config.reference_area * np.sign(velocity))

        thrust = 0.0
        if burning:
            if active_stage == 1:
                if stage1_fuel > reserve:
                    thrust = rocket.stage1.thrust
                    stage1_fuel = max(reserve, stage1_fuel - rocket.stage1.burn_rate * step)
                elif state.is_booster or stage2_fuel <= 0.0:
                    burning = False
                else:
                    active_stage = 2
                    velocity += config.separation_impulse
            elif stage2_fuel > 0.0:
                thrust = rocket.stage2.thrust
                stage2_fuel = max(0.0, stage2_fuel - rocket.stage2.burn_rate * step)
            else:
                burning = False

        acceleration = (thrust * cos_angle + drag) / mass - C.G0
        velocity += acceleration * step
        altitude += velocity * step
        t += step

        if altitude <= 0.0:
            yield TrajectoryPoint(float(t), 0.0)
            return
        yield TrajectoryPoint(float(t), float(altitude))


def predicted_apogee(points: Iterable[TrajectoryPoint]) -> float:
    """Highest predicted altitude (m); 0 for an empty prediction."""
    return max((p.predicted_altitude for p in points), default=0.0)
