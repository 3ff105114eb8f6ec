"""
TSR Flight Simulation - Force Computations

This module implements the environment and force models:
- Layered standard atmosphere
- Inverse-square gravity
- Thrust decomposition by pitch angle
- Aerodynamic drag
"""

import numpy as np

from . import constants as C
from .types import AtmosphereProperties, ForceBreakdown


_LAYER_NAMES = tuple(layer[0] for layer in C.ATMOSPHERE_LAYERS)
_LAYER_H = np.array([layer[1] for layer in C.ATMOSPHERE_LAYERS])
_LAYER_L = np.array([layer[2] for layer in C.ATMOSPHERE_LAYERS])
_LAYER_TB = None
_LAYER_PB = None


def _layer_profile(T0: float, P0: float, lapse: float, dh: float) -> tuple:
    """Temperature and pressure dh metres above a layer base."""
    if abs(lapse) > 1e-12:
        T = T0 + lapse * dh
        exponent = -C.G0 / (lapse * C.R_GAS)
        P = P0 * (T / T0) ** exponent
    else:
        T = T0
        P = P0 * np.exp(-C.G0 * dh / (C.R_GAS * T0))
    return float(T), float(P)


def _build_layer_tables():
    """Precompute layer-base temperatures and pressures."""
    global _LAYER_TB, _LAYER_PB
    if _LAYER_TB is not None and _LAYER_PB is not None:
        return

    tb = [C.ATM_T0]
    pb = [C.ATM_P0]
    for i in range(len(_LAYER_L) - 1):
        T1, P1 = _layer_profile(tb[-1], pb[-1], _LAYER_L[i], _LAYER_H[i + 1] - _LAYER_H[i])
        tb.append(T1)
        pb.append(P1)

    _LAYER_TB = np.array(tb)
    _LAYER_PB = np.array(pb)


def layer_table() -> list:
    """
    The layer table as (name, base altitude, ceiling, base T, base P, lapse) rows.

    The exosphere row closes the table with an infinite ceiling.
    """
    _build_layer_tables()
    ceilings = list(_LAYER_H[1:]) + [C.EXOSPHERE_BASE_ALTITUDE]
    rows = [
        (_LAYER_NAMES[i], float(_LAYER_H[i]), float(ceilings[i]),
         float(_LAYER_TB[i]), float(_LAYER_PB[i]), float(_LAYER_L[i]))
        for i in range(len(_LAYER_NAMES))
    ]
    rows.append((C.EXOSPHERE_NAME, C.EXOSPHERE_BASE_ALTITUDE, float("inf"),
                 C.EXOSPHERE_TEMPERATURE, 0.0, 0.0))
    return rows


# =============================================================================
# ATMOSPHERE MODEL (layered ISA)
# =============================================================================

def compute_atmosphere_properties(altitude: float) -> AtmosphereProperties:
    """
    Compute atmospheric properties at a geometric altitude.

    The containing layer is the first whose ceiling exceeds the altitude.
    Temperature varies linearly in a layer; pressure follows the power law
    for a non-zero lapse rate and the isothermal exponential otherwise.
    Above the exosphere base the model returns vacuum.

    Args:
        altitude: Geometric altitude above sea level (m). Negative values
            are treated as sea level.

    Returns:
        AtmosphereProperties with density, temperature, pressure,
        speed_of_sound and layer name
    """
    _build_layer_tables()
    h = max(0.0, float(altitude))

    if h >= C.EXOSPHERE_BASE_ALTITUDE:
        T = C.EXOSPHERE_TEMPERATURE
        return {
            'density': 0.0,
            'temperature': T,
            'pressure': 0.0,
            'speed_of_sound': float(np.sqrt(C.GAMMA * C.R_GAS * T)),
            'layer': C.EXOSPHERE_NAME,
        }

    idx = int(np.searchsorted(_LAYER_H, h, side='right') - 1)
    idx = max(0, min(idx, len(_LAYER_L) - 1))
    T, P = _layer_profile(_LAYER_TB[idx], _LAYER_PB[idx], _LAYER_L[idx], h - _LAYER_H[idx])

    P = max(0.0, P)
    rho = max(0.0, P / (C.R_GAS * T)) if T > 0.0 else 0.0
    speed_of_sound = float(np.sqrt(C.GAMMA * C.R_GAS * T)) if T > 0.0 else C.SPEED_OF_SOUND_SEA_LEVEL
    return {
        'density': float(rho),
        'temperature': float(T),
        'pressure': float(P),
        'speed_of_sound': speed_of_sound,
        'layer': _LAYER_NAMES[idx],
    }


# =============================================================================
# FORCE MODELS
# =============================================================================

def compute_gravity(altitude: float) -> float:
    """
    Inverse-square gravitational acceleration magnitude.

        g = mu / (R + h)^2
    """
    r = C.R_EARTH + max(0.0, altitude)
    return C.MU_EARTH / (r * r)


def compute_thrust_components(thrust: float, thrust_angle_deg: float) -> tuple:
    """
    Split thrust by its angle from the local vertical.

    Returns:
        (horizontal, vertical) thrust in N; positive horizontal is downrange
    """
    theta = np.radians(thrust_angle_deg)
    return float(thrust * np.sin(theta)), float(thrust * np.cos(theta))


def compute_dynamic_pressure(density: float, speed: float) -> float:
    """q = 0.5 * rho * v^2 (Pa)."""
    return 0.5 * density * speed * speed


def compute_drag_force(density: float, horizontal_velocity: float, vertical_velocity: float,
                       drag_coefficient: float, reference_area: float = C.REFERENCE_AREA) -> tuple:
    """
    Aerodynamic drag opposing the velocity.

        D = 0.5 * rho * v^2 * Cd * A

    Returns:
        (horizontal, vertical) drag force in N; zero for a vehicle at rest
    """
    speed = float(np.hypot(horizontal_velocity, vertical_velocity))
    if speed < C.ZERO_TOLERANCE or density <= 0.0:
        return 0.0, 0.0
    magnitude = compute_dynamic_pressure(density, speed) * drag_coefficient * reference_area
    return (-magnitude * horizontal_velocity / speed,
            -magnitude * vertical_velocity / speed)


def compute_force_breakdown(mass: float, altitude: float, density: float,
                            horizontal_velocity: float, vertical_velocity: float,
                            thrust: float, thrust_angle_deg: float,
                            drag_coefficient: float,
                            reference_area: float = C.REFERENCE_AREA) -> ForceBreakdown:
    """Sum thrust, drag and gravity per axis of the local frame."""
    thrust_h, thrust_v = compute_thrust_components(thrust, thrust_angle_deg)
    drag_h, drag_v = compute_drag_force(density, horizontal_velocity, vertical_velocity,
                                        drag_coefficient, reference_area)
    weight = mass * compute_gravity(altitude)
    return {
        'thrust_vertical': thrust_v,
        'thrust_horizontal': thrust_h,
        'drag_vertical': drag_v,
        'drag_horizontal': drag_h,
        'gravity': weight,
        'net_vertical': thrust_v + drag_v - weight,
        'net_horizontal': thrust_h + drag_h,
    }
