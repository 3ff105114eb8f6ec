"""
TSR Flight Simulation - Utility Functions

Planar vector helpers shared by the orbital, guidance and driver modules.
Vectors are numpy arrays of shape (2,) ordered [horizontal, vertical].
"""

import numpy as np

from . import constants as C


def as_vector(x: float, y: float) -> np.ndarray:
    """Build a planar vector."""
    return np.array([x, y], dtype=np.float64)


def vector_magnitude(v: np.ndarray) -> float:
    """Euclidean norm as a plain float."""
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Unit vector along v.

    A zero-length input yields the zero vector instead of NaNs.
    """
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm < C.ZERO_TOLERANCE:
        return np.zeros_like(v)
    return v / norm


def cross_2d(a: np.ndarray, b: np.ndarray) -> float:
    """z-component of the cross product of two planar vectors."""
    return float(a[0] * b[1] - a[1] * b[0])


def local_state_vectors(altitude: float, horizontal_velocity: float,
                        vertical_velocity: float) -> tuple:
    """
    Position and velocity in the vehicle's local planet-centred frame.

    The position lies along +y at distance R_EARTH + altitude; the velocity
    keeps its downrange (x) and vertical (y) components.

    Returns:
        (position, velocity) numpy arrays
    """
    position = as_vector(0.0, C.R_EARTH + altitude)
    velocity = as_vector(horizontal_velocity, vertical_velocity)
    return position, velocity


def sign(x: float) -> float:
    """Sign of x as a float (0.0 for zero)."""
    if x > 0.0:
        return 1.0
    if x < 0.0:
        return -1.0
    return 0.0
