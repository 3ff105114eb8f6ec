"""
TSR Flight Simulation - Ascent Guidance

Open-loop gravity-turn pitch program. The vehicle rises vertically, pitches
over linearly to a mid-altitude angle, then continues to tip toward the
horizontal until a ceiling angle. The commanded angle is tracked by a
rate-limited thrust angle.

Angles are degrees from the local vertical, positive toward downrange.
"""

from typing import Optional

import numpy as np

from .config import SimulationConfig, create_default_config


def compute_gravity_turn_angle(altitude: float,
                               config: Optional[SimulationConfig] = None) -> float:
    """
    Commanded pitch from vertical for the ascent.

    Schedule (default config):
        h < 1 km         : 0 deg
        1 km .. 10 km    : linear to 45 deg
        above 10 km      : 45 deg + 25 deg per 30 km, capped at 70 deg

    Args:
        altitude: Current altitude (m)
        config: Supplies the schedule breakpoints

    Returns:
        Target thrust angle (deg)
    """
    if config is None:
        config = create_default_config()

    start = config.gravity_turn_start_altitude
    mid = config.gravity_turn_mid_altitude
    mid_angle = config.gravity_turn_mid_angle
    max_angle = config.gravity_turn_max_angle

    if altitude < start:
        return 0.0
    if altitude < mid:
        return (altitude - start) / (mid - start) * mid_angle

    span = config.gravity_turn_end_altitude - mid
    if span <= 0.0:
        return max_angle
    angle = mid_angle + (altitude - mid) / span * (max_angle - mid_angle)
    return min(max_angle, angle)


def slew_thrust_angle(current: float, target: float, max_step: float) -> float:
    """Move current toward target by at most max_step degrees."""
    diff = target - current
    step = float(np.clip(diff, -max_step, max_step))
    return current + step


def compute_ascent_thrust_angle(altitude: float, current_angle: float, burning: bool,
                                config: Optional[SimulationConfig] = None) -> tuple:
    """
    Next thrust angle during ascent.

    The angle slews toward the gravity-turn target only while the engines
    are burning; otherwise it is held.

    Returns:
        (target_angle, new_angle) in degrees
    """
    if config is None:
        config = create_default_config()
    target = compute_gravity_turn_angle(altitude, config)
    if not burning:
        return target, current_angle
    return target, slew_thrust_angle(current_angle, target, config.max_pitch_step_deg)
