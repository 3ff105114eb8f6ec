"""
TSR Flight Simulation - Booster Landing Guidance

Stateless recovery-physics helpers: suicide-burn ignition altitude, impact
timing, burn triggers, throttle and steering commands and touchdown scoring.
All functions read a SimulationState and never modify it.
"""

from typing import Optional

import numpy as np

from . import constants as C
from .config import RocketConfig, SimulationConfig, create_default_config
from .forces import compute_gravity
from .mass import compute_vehicle_mass
from .state import FlightPhase, SimulationState
from .types import LandingGuidanceOutput
from .utils import sign


# =============================================================================
# BURN TIMING
# =============================================================================

def calculate_suicide_burn_altitude(velocity: float, mass: float, thrust: float,
                                    burn_rate: float = 0.0, fuel: float = float("inf"),
                                    gravity: float = C.G0) -> float:
    """
    Altitude at which a full-thrust burn stops the descent at the ground.

        h = v^2 / (2 * (T/m - g)) + margin

    With a burn rate the average mass over the burn is refined by a few
    fixed-point passes (burn time -> propellant used -> mean mass), which
    raises the mean deceleration. This is an approximation; it is not a
    closed-form variable-mass solution.

    Args:
        velocity: Vertical velocity (m/s); only its magnitude is used
        mass: Vehicle mass at ignition (kg)
        thrust: Available thrust (N)
        burn_rate: Propellant flow at full thrust (kg/s), 0 for constant mass
        fuel: Propellant available for the burn (kg)
        gravity: Local gravitational acceleration (m/s^2)

    Returns:
        Ignition altitude (m); 0 when thrust cannot overcome gravity
    """
    if mass <= 0.0 or thrust <= 0.0:
        return 0.0
    if thrust / mass - gravity <= 0.0:
        return 0.0

    speed = abs(velocity)
    mean_mass = mass
    if burn_rate > 0.0:
        available = min(fuel, mass)
        for _ in range(C.SUICIDE_BURN_ITERATIONS):
            deceleration = thrust / mean_mass - gravity
            burn_time = speed / deceleration
            used = min(burn_rate * burn_time, available)
            mean_mass = mass - 0.5 * used

    deceleration = thrust / mean_mass - gravity
    return speed * speed / (2.0 * deceleration) + C.SUICIDE_BURN_MARGIN


def calculate_time_to_impact(altitude: float, velocity: float, gravity: float = C.G0) -> float:
    """
    Seconds until ground contact for an unpowered fall.

    Solves h = |v| t + 0.5 g_eff t^2 with a slightly reduced gravity as a
    crude allowance for drag.

    Returns:
        Time (s); infinity while ascending, 0 if no real root exists
    """
    if velocity >= 0.0:
        return float("inf")

    g_eff = C.IMPACT_GRAVITY_FACTOR * gravity
    a = 0.5 * g_eff
    b = -velocity
    c = altitude
    discriminant = b * b + 4.0 * a * c
    if discriminant < 0.0:
        return 0.0
    t = (-b + np.sqrt(discriminant)) / (2.0 * a)
    return max(0.0, float(t))


# =============================================================================
# TRIGGERS
# =============================================================================

def should_start_boostback(state: SimulationState) -> bool:
    """Coasting first stage inside the boostback altitude window."""
    return (
        state.active_stage == 1
        and state.phase is FlightPhase.COASTING
        and C.BOOSTBACK_MIN_ALTITUDE < state.altitude < C.BOOSTBACK_MAX_ALTITUDE
        and not state.boostback_complete
    )


def should_start_reentry_burn(state: SimulationState) -> bool:
    """Fast-falling first stage in the entry window after boostback."""
    return (
        state.active_stage == 1
        and C.REENTRY_MIN_ALTITUDE < state.altitude < C.REENTRY_MAX_ALTITUDE
        and state.vertical_velocity < C.REENTRY_TRIGGER_VELOCITY
        and state.boostback_complete
        and not state.reentry_burn_complete
    )


def should_start_landing_burn(state: SimulationState, suicide_burn_altitude: float) -> bool:
    """Descending below the ignition altitude after the entry burn."""
    return (
        state.altitude <= suicide_burn_altitude
        and state.altitude > C.LANDING_BURN_MIN_ALTITUDE
        and state.vertical_velocity < 0.0
        and state.reentry_burn_complete
    )


def should_deploy_legs(state: SimulationState) -> bool:
    return (
        0.0 < state.altitude < C.LEG_DEPLOY_ALTITUDE
        and state.vertical_velocity < 0.0
        and not state.legs_deployed
    )


def should_deploy_grid_fins(state: SimulationState) -> bool:
    return (
        state.altitude < C.GRID_FIN_DEPLOY_ALTITUDE
        and state.vertical_velocity < 0.0
        and not state.grid_fins_deployed
        and state.boostback_complete
    )


# =============================================================================
# COMMANDS
# =============================================================================

def calculate_landing_throttle(state: SimulationState, mass: float, thrust: float,
                               gravity: float,
                               config: Optional[SimulationConfig] = None) -> float:
    """
    Landing-burn throttle from a descent-rate loop.

    The target descent rate shrinks with altitude (floored at
    min_descent_rate). The rate error drives a proportional term, the
    downward acceleration a damping term, and the hover throttle m g / T
    is the feed-forward.

    Returns:
        Throttle clamped to [0.1, 1.0]
    """
    if config is None:
        config = create_default_config()
    if thrust <= 0.0:
        return C.MAX_LANDING_THROTTLE

    target_rate = max(config.min_descent_rate, config.landing_descent_rate_gain * state.altitude)
    descent_rate = -state.vertical_velocity
    error = descent_rate - target_rate
    hover = mass * gravity / thrust
    throttle = hover + config.landing_kp * error - config.landing_kd * state.vertical_acceleration
    return float(np.clip(throttle, C.MIN_LANDING_THROTTLE, C.MAX_LANDING_THROTTLE))


def calculate_lateral_angle(state: SimulationState, landing_target: float) -> float:
    """
    Tilt toward the pad during the landing burn.

    Offsets inside the deadband, or any phase other than LANDING, give 0.
    Otherwise the tilt is offset/100 deg capped at 10 deg.
    """
    error = state.downrange - landing_target
    if state.phase is not FlightPhase.LANDING or abs(error) <= C.LATERAL_DEADBAND:
        return 0.0
    return sign(-error) * min(C.MAX_LATERAL_ANGLE, abs(error) * C.LATERAL_GAIN)


def calculate_boostback_angle(state: SimulationState, landing_target: float) -> float:
    """Horizontal thrust pointing back toward the pad (+/-90 deg)."""
    direction = sign(landing_target - state.downrange)
    if direction == 0.0:
        direction = -sign(state.horizontal_velocity)
    return 90.0 * direction


def calculate_target_throttle(state: SimulationState, mass: float, thrust: float,
                              gravity: float,
                              config: Optional[SimulationConfig] = None) -> float:
    """Throttle for the current recovery phase; 0 outside recovery burns."""
    if state.phase is FlightPhase.BOOSTBACK:
        return C.BOOSTBACK_THROTTLE
    if state.phase is FlightPhase.RE_ENTRY:
        return C.REENTRY_THROTTLE
    if state.phase is FlightPhase.LANDING:
        return calculate_landing_throttle(state, mass, thrust, gravity, config)
    return 0.0


def calculate_target_angle(state: SimulationState, landing_target: float) -> float:
    """Thrust angle for the current recovery phase; the held angle otherwise."""
    if state.phase is FlightPhase.BOOSTBACK:
        return calculate_boostback_angle(state, landing_target)
    if state.phase is FlightPhase.RE_ENTRY:
        return 0.0
    if state.phase is FlightPhase.LANDING:
        return calculate_lateral_angle(state, landing_target)
    return state.thrust_angle


def calculate_recovery_percentage(velocity: float, landing_accuracy: float, tilt: float) -> float:
    """
    Score a touchdown from 0 to 100.

    Velocity tiers set the base score; accuracy and tilt scale it down.
    """
    speed = abs(velocity)
    if speed < 2.0:
        score = 100.0
    elif speed < 5.0:
        score = 90.0
    elif speed < 10.0:
        score = 70.0
    elif speed < 20.0:
        score = 30.0
    else:
        score = 0.0

    if landing_accuracy > 100.0:
        score *= 0.7
    elif landing_accuracy > 50.0:
        score *= 0.85

    tilt = abs(tilt)
    if tilt > 10.0:
        score *= 0.5
    elif tilt > 5.0:
        score *= 0.8

    return float(np.clip(score, 0.0, 100.0))


# =============================================================================
# CONTROLLER
# =============================================================================

def compute_landing_guidance(state: SimulationState, rocket: RocketConfig,
                             landing_target: float = 0.0,
                             config: Optional[SimulationConfig] = None) -> LandingGuidanceOutput:
    """
    Evaluate every landing-guidance output for the current state.

    Args:
        state: Current vehicle state (first stage)
        rocket: Supplies stage-1 thrust, burn rate and masses
        landing_target: Pad downrange offset (m)
        config: Throttle-loop gains

    Returns:
        LandingGuidanceOutput
    """
    if config is None:
        config = create_default_config()

    stage = rocket.stage1
    mass, _ = compute_vehicle_mass(state.active_stage, state.stage1_fuel, state.stage2_fuel,
                                   rocket, state.is_booster)
    gravity = compute_gravity(state.altitude)

    suicide_altitude = calculate_suicide_burn_altitude(
        state.vertical_velocity, mass, stage.thrust,
        burn_rate=stage.burn_rate, fuel=state.stage1_fuel, gravity=gravity,
    )

    return {
        'suicide_burn_altitude': suicide_altitude,
        'time_to_impact': calculate_time_to_impact(state.altitude, state.vertical_velocity, gravity),
        'should_start_boostback': should_start_boostback(state),
        'should_start_reentry_burn': should_start_reentry_burn(state),
        'should_start_landing_burn': should_start_landing_burn(state, suicide_altitude),
        'should_deploy_legs': should_deploy_legs(state),
        'should_deploy_grid_fins': should_deploy_grid_fins(state),
        'landing_accuracy': abs(state.downrange - landing_target),
        'target_throttle': calculate_target_throttle(state, mass, stage.thrust, gravity, config),
        'target_angle': calculate_target_angle(state, landing_target),
    }
