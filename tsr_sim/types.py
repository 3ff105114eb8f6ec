"""
TSR Flight Simulation - Type Definitions

This module provides TypedDict definitions for structured return types,
improving type safety and IDE support.
"""

from typing import TypedDict

import numpy as np
from numpy.typing import NDArray


class AtmosphereProperties(TypedDict):
    """Return type for atmosphere model output."""
    density: float  # Density (kg/m³)
    temperature: float  # Temperature (K)
    pressure: float  # Pressure (Pa)
    speed_of_sound: float  # Speed of sound (m/s)
    layer: str  # Name of the containing layer


class ForceBreakdown(TypedDict):
    """Per-axis forces in the local vertical/downrange frame (N)."""
    thrust_vertical: float
    thrust_horizontal: float
    drag_vertical: float
    drag_horizontal: float
    gravity: float  # Weight along the local vertical (positive magnitude)
    net_vertical: float
    net_horizontal: float


class OrbitalElements(TypedDict):
    """Return type for the orbital elements calculator."""
    apogee: float  # Altitude of the farthest point (m, floored at 0)
    perigee: float  # Altitude of the nearest point (m, floored at 0)
    eccentricity: float
    semi_major_axis: float  # m (negative for hyperbolic trajectories)
    period: float  # s
    inclination: float  # Velocity heading from the local vertical (deg)
    specific_energy: float  # J/kg
    angular_momentum: float  # m²/s (signed, planar)


class ApsisTimes(TypedDict):
    """Time until the next apogee/perigee passage (s, inf when unbound)."""
    time_to_apogee: float
    time_to_perigee: float


class HohmannTransfer(TypedDict):
    """Two-impulse coplanar transfer between circular orbits."""
    delta_v1: float  # m/s at departure
    delta_v2: float  # m/s at arrival
    total_delta_v: float  # m/s
    transfer_time: float  # s (half the transfer ellipse period)


class RelativeState(TypedDict):
    """Chaser motion expressed relative to a target."""
    relative_position: NDArray[np.float64]
    relative_velocity: NDArray[np.float64]
    distance: float  # m
    closing_speed: float  # m/s, positive while approaching


class LandingGuidanceOutput(TypedDict):
    """Return type for the booster landing guidance controller."""
    suicide_burn_altitude: float  # m
    time_to_impact: float  # s
    should_start_boostback: bool
    should_start_reentry_burn: bool
    should_start_landing_burn: bool
    should_deploy_legs: bool
    should_deploy_grid_fins: bool
    landing_accuracy: float  # Distance from the landing target (m)
    target_throttle: float  # 0..1
    target_angle: float  # Thrust angle from vertical (deg)
