"""
TSR Flight Simulation - Orbital Mechanics

Two-body planar orbital elements, stability checks, apsis timing and
impulsive manoeuvre helpers.

Vectors are planet-centred numpy arrays of shape (2,). Callers must not pass
zero-length position or velocity vectors to the element functions; the
integrator substitutes ground elements for a stationary vehicle.
"""

from enum import Enum
from typing import Optional

import numpy as np

from . import constants as C
from .types import ApsisTimes, HohmannTransfer, OrbitalElements, RelativeState
from .utils import cross_2d, normalize, vector_magnitude


# =============================================================================
# BASIC QUANTITIES
# =============================================================================

def calculate_gravity(altitude: float) -> float:
    """Gravitational acceleration mu / r^2 at an altitude (m/s^2)."""
    r = C.R_EARTH + altitude
    return C.MU_EARTH / (r * r)


def calculate_circular_velocity(altitude: float) -> float:
    """Circular orbital speed sqrt(mu / r) (m/s)."""
    return float(np.sqrt(C.MU_EARTH / (C.R_EARTH + altitude)))


def calculate_escape_velocity(altitude: float) -> float:
    """Escape speed sqrt(2 mu / r) (m/s)."""
    return float(np.sqrt(2.0 * C.MU_EARTH / (C.R_EARTH + altitude)))


# =============================================================================
# ORBITAL ELEMENTS
# =============================================================================

def calculate_orbital_elements(position: np.ndarray, velocity: np.ndarray) -> OrbitalElements:
    """
    Classical elements from a planar state vector.

        eps = v^2/2 - mu/r
        h   = r x v
        a   = -mu / (2 eps)
        e   = sqrt(1 + 2 eps h^2 / mu^2)

    Apogee and perigee are altitudes above the mean radius, floored at 0.
    The inclination field is a heading proxy: the velocity angle from the
    local vertical.

    Args:
        position: Planet-centred position (m), non-zero
        velocity: Inertial velocity (m/s), non-zero

    Returns:
        OrbitalElements
    """
    r = vector_magnitude(position)
    v = vector_magnitude(velocity)
    energy = 0.5 * v * v - C.MU_EARTH / r
    h = cross_2d(position, velocity)

    e_squared = 1.0 + 2.0 * energy * h * h / (C.MU_EARTH * C.MU_EARTH)
    eccentricity = float(np.sqrt(max(0.0, e_squared)))

    if abs(energy) < C.ZERO_TOLERANCE:
        # Parabolic: unbounded apoapsis, periapsis from the angular momentum
        semi_major_axis = float("inf")
        apogee = float("inf")
        perigee = max(0.0, h * h / (2.0 * C.MU_EARTH) - C.R_EARTH)
        period = float("inf")
    else:
        semi_major_axis = -C.MU_EARTH / (2.0 * energy)
        apogee = max(0.0, semi_major_axis * (1.0 + eccentricity) - C.R_EARTH)
        perigee = max(0.0, semi_major_axis * (1.0 - eccentricity) - C.R_EARTH)
        period = float(C.TWO_PI * np.sqrt(abs(semi_major_axis) ** 3 / C.MU_EARTH))

    inclination = abs(float(np.degrees(np.arctan2(velocity[0], velocity[1]))))

    return {
        'apogee': float(apogee),
        'perigee': float(perigee),
        'eccentricity': eccentricity,
        'semi_major_axis': float(semi_major_axis),
        'period': period,
        'inclination': inclination,
        'specific_energy': float(energy),
        'angular_momentum': float(h),
    }


def is_stable_orbit(position: np.ndarray, velocity: np.ndarray,
                    elements: Optional[OrbitalElements] = None) -> bool:
    """
    True for a bound orbit whose perigee clears the atmosphere.

    Requires 0.9 v_circ <= v < v_esc, perigee above 100 km and e < 1.
    """
    r = vector_magnitude(position)
    v = vector_magnitude(velocity)
    altitude = r - C.R_EARTH

    if v < C.ORBIT_VELOCITY_MARGIN * calculate_circular_velocity(altitude):
        return False
    if v >= calculate_escape_velocity(altitude):
        return False

    if elements is None:
        elements = calculate_orbital_elements(position, velocity)
    return elements['perigee'] > C.MIN_STABLE_PERIGEE and elements['eccentricity'] < 1.0


def calculate_true_anomaly(position: np.ndarray, velocity: np.ndarray,
                           eccentricity: float) -> float:
    """
    True anomaly (rad, 0..2pi) from the eccentricity vector.

    The quadrant comes from r . v (outbound after perigee). Circular
    orbits have no perigee; they report 0.
    """
    if eccentricity < C.ECCENTRICITY_TOLERANCE:
        return 0.0
    r = vector_magnitude(position)
    v = vector_magnitude(velocity)
    r_dot_v = float(np.dot(position, velocity))
    e_vec = ((v * v - C.MU_EARTH / r) * position - r_dot_v * velocity) / C.MU_EARTH
    cos_nu = float(np.clip(np.dot(e_vec, position) / (eccentricity * r), -1.0, 1.0))
    nu = float(np.arccos(cos_nu))
    if r_dot_v < 0.0:
        nu = C.TWO_PI - nu
    return nu


def calculate_time_to_apsides(position: np.ndarray, velocity: np.ndarray,
                              elements: Optional[OrbitalElements] = None) -> ApsisTimes:
    """
    Time until the next apogee and perigee passage.

    Uses the true anomaly, Kepler's equation and the mean motion. Unbound
    trajectories (e >= 1) never return to an apsis and report infinity.
    """
    if elements is None:
        elements = calculate_orbital_elements(position, velocity)
    e = elements['eccentricity']
    period = elements['period']
    if e >= 1.0 or not np.isfinite(period) or period <= 0.0:
        return {'time_to_apogee': float("inf"), 'time_to_perigee': float("inf")}

    nu = calculate_true_anomaly(position, velocity, e)
    eccentric_anomaly = 2.0 * np.arctan2(np.sqrt(1.0 - e) * np.sin(nu / 2.0),
                                         np.sqrt(1.0 + e) * np.cos(nu / 2.0))
    mean_anomaly = float((eccentric_anomaly - e * np.sin(eccentric_anomaly)) % C.TWO_PI)
    mean_motion = C.TWO_PI / period

    time_to_perigee = ((C.TWO_PI - mean_anomaly) % C.TWO_PI) / mean_motion
    time_to_apogee = ((np.pi - mean_anomaly) % C.TWO_PI) / mean_motion
    return {'time_to_apogee': float(time_to_apogee), 'time_to_perigee': float(time_to_perigee)}


# =============================================================================
# MANOEUVRES
# =============================================================================

def calculate_circularization_delta_v(apogee: float, perigee: float) -> float:
    """Burn at apogee that raises the perigee to make the orbit circular (m/s)."""
    ra = C.R_EARTH + apogee
    rp = C.R_EARTH + perigee
    a = 0.5 * (ra + rp)
    v_elliptical = np.sqrt(C.MU_EARTH * (2.0 / ra - 1.0 / a))
    v_circular = np.sqrt(C.MU_EARTH / ra)
    return float(abs(v_circular - v_elliptical))


def calculate_hohmann_transfer(current_altitude: float, target_altitude: float) -> HohmannTransfer:
    """
    Two-impulse transfer between coplanar circular orbits.

    Returns:
        HohmannTransfer with both burns, their sum and the coast time
    """
    r1 = C.R_EARTH + current_altitude
    r2 = C.R_EARTH + target_altitude
    a_transfer = 0.5 * (r1 + r2)

    v1 = np.sqrt(C.MU_EARTH / r1)
    v_transfer_peri = np.sqrt(C.MU_EARTH * (2.0 / r1 - 1.0 / a_transfer))
    delta_v1 = abs(v_transfer_peri - v1)

    v2 = np.sqrt(C.MU_EARTH / r2)
    v_transfer_apo = np.sqrt(C.MU_EARTH * (2.0 / r2 - 1.0 / a_transfer))
    delta_v2 = abs(v2 - v_transfer_apo)

    return {
        'delta_v1': float(delta_v1),
        'delta_v2': float(delta_v2),
        'total_delta_v': float(delta_v1 + delta_v2),
        'transfer_time': float(np.pi * np.sqrt(a_transfer ** 3 / C.MU_EARTH)),
    }


class ManeuverType(Enum):
    PROGRADE = "prograde"
    RETROGRADE = "retrograde"
    NORMAL = "normal"
    ANTI_NORMAL = "anti-normal"
    RADIAL_IN = "radial-in"
    RADIAL_OUT = "radial-out"
    CIRCULARIZE = "circularize"


def execute_maneuver(position: np.ndarray, velocity: np.ndarray,
                     maneuver: ManeuverType, delta_v: float = 0.0) -> np.ndarray:
    """
    Apply an impulsive burn and return the new velocity.

    In the plane the "normal" direction is prograde rotated 90 deg
    counter-clockwise. CIRCULARIZE ignores delta_v and burns prograde by
    the apogee circularization amount.
    """
    maneuver = ManeuverType(maneuver)
    radial_out = normalize(position)
    prograde = normalize(velocity)
    normal = np.array([-prograde[1], prograde[0]])

    if maneuver is ManeuverType.PROGRADE:
        burn = prograde * delta_v
    elif maneuver is ManeuverType.RETROGRADE:
        burn = -prograde * delta_v
    elif maneuver is ManeuverType.NORMAL:
        burn = normal * delta_v
    elif maneuver is ManeuverType.ANTI_NORMAL:
        burn = -normal * delta_v
    elif maneuver is ManeuverType.RADIAL_IN:
        burn = -radial_out * delta_v
    elif maneuver is ManeuverType.RADIAL_OUT:
        burn = radial_out * delta_v
    else:
        elements = calculate_orbital_elements(position, velocity)
        burn = prograde * calculate_circularization_delta_v(elements['apogee'], elements['perigee'])

    return np.asarray(velocity, dtype=np.float64) + burn


def calculate_relative_state(own_position: np.ndarray, own_velocity: np.ndarray,
                             target_position: np.ndarray,
                             target_velocity: np.ndarray) -> RelativeState:
    """Target motion seen from the chaser; closing speed is positive while approaching."""
    relative_position = np.asarray(target_position, dtype=np.float64) - own_position
    relative_velocity = np.asarray(target_velocity, dtype=np.float64) - own_velocity
    closing_speed = -float(np.dot(normalize(relative_position), relative_velocity))
    return {
        'relative_position': relative_position,
        'relative_velocity': relative_velocity,
        'distance': vector_magnitude(relative_position),
        'closing_speed': closing_speed,
    }


def propagate_orbit(position: np.ndarray, velocity: np.ndarray, dt: float) -> tuple:
    """
    Advance a two-body state by one semi-implicit Euler step.

    Returns:
        (new_position, new_velocity)
    """
    position = np.asarray(position, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    r = vector_magnitude(position)
    acceleration = -normalize(position) * (C.MU_EARTH / (r * r))
    new_velocity = velocity + acceleration * dt
    new_position = position + new_velocity * dt
    return new_position, new_velocity


def calculate_launch_azimuth(target_inclination: float,
                             launch_latitude: float = C.DEFAULT_LAUNCH_LATITUDE) -> float:
    """
    Launch azimuth from north (deg) for a target inclination.

    Inclinations below the launch latitude are unreachable by a direct
    ascent; those fall back to 0 or 180 deg.
    """
    sin_az = np.cos(np.radians(target_inclination)) / np.cos(np.radians(launch_latitude))
    if abs(sin_az) > 1.0:
        return 0.0 if target_inclination > launch_latitude else 180.0
    return float(np.degrees(np.arcsin(sin_az)))
