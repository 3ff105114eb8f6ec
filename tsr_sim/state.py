"""
TSR Flight Simulation - Global State Vector

This module defines the single immutable state dataclass that holds every
simulation variable, the flight-phase enumeration and its transition table.
A new state is built wholesale on every tick; nothing is mutated in place.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

import numpy as np

from . import constants as C
from .config import RocketConfig, SimulationConfig, create_default_config
from .mass import compute_remaining_delta_v
from .utils import local_state_vectors


class PhaseTransitionError(ValueError):
    """Raised when a phase change is not in the transition table."""
    pass


class FlightPhase(Enum):
    PRE_LAUNCH = auto()
    BURNING = auto()
    STAGING = auto()
    COASTING = auto()
    BOOSTBACK = auto()
    RE_ENTRY = auto()
    DESCENT = auto()
    LANDING = auto()
    LANDED = auto()
    CRASHED = auto()
    ORBITING = auto()  # Display only, never a transition target

    @property
    def label(self) -> str:
        """Telemetry name (RE_ENTRY is shown as RE-ENTRY)."""
        return self.name.replace("_", "-") if self is FlightPhase.RE_ENTRY else self.name

    @property
    def is_terminal(self) -> bool:
        return self in (FlightPhase.LANDED, FlightPhase.CRASHED)

    @property
    def is_recovery_burn(self) -> bool:
        return self in (FlightPhase.BOOSTBACK, FlightPhase.RE_ENTRY, FlightPhase.LANDING)

    @property
    def is_powered(self) -> bool:
        return self is FlightPhase.BURNING or self.is_recovery_burn


_GROUND = frozenset({FlightPhase.LANDED, FlightPhase.CRASHED})

PHASE_TRANSITIONS = {
    FlightPhase.PRE_LAUNCH: frozenset({FlightPhase.BURNING}),
    FlightPhase.BURNING: frozenset({FlightPhase.STAGING, FlightPhase.COASTING}) | _GROUND,
    FlightPhase.STAGING: frozenset({FlightPhase.BURNING}) | _GROUND,
    FlightPhase.COASTING: frozenset({
        FlightPhase.DESCENT, FlightPhase.BOOSTBACK, FlightPhase.RE_ENTRY, FlightPhase.LANDING,
    }) | _GROUND,
    FlightPhase.BOOSTBACK: frozenset({FlightPhase.COASTING}) | _GROUND,
    FlightPhase.DESCENT: frozenset({FlightPhase.RE_ENTRY, FlightPhase.LANDING}) | _GROUND,
    FlightPhase.RE_ENTRY: frozenset({FlightPhase.DESCENT}) | _GROUND,
    FlightPhase.LANDING: _GROUND,
    FlightPhase.LANDED: frozenset(),
    FlightPhase.CRASHED: frozenset(),
    FlightPhase.ORBITING: frozenset(),
}


def can_transition(current: FlightPhase, target: FlightPhase) -> bool:
    """True when target is a legal successor of current (or the same phase)."""
    return target is current or target in PHASE_TRANSITIONS[current]


def check_transition(current: FlightPhase, target: FlightPhase) -> FlightPhase:
    """Return target if the move is legal, raise PhaseTransitionError otherwise."""
    if not can_transition(current, target):
        raise PhaseTransitionError(f"Illegal phase transition {current.label} -> {target.label}")
    return target


@dataclass(frozen=True)
class SimulationState:
    """
    Complete vehicle state at one instant.

    Kinematics use two channels: altitude (vertical) and downrange
    (horizontal, measured along the ground track). Velocity is the
    magnitude of the two components.

    Attributes are grouped as kinematics, propellant/staging, environment
    and peaks, orbital elements, propulsion and the landing subsystem.
    """

    # Kinematics
    time: float = 0.0
    altitude: float = 0.0
    downrange: float = 0.0
    vertical_velocity: float = 0.0
    horizontal_velocity: float = 0.0
    velocity: float = 0.0
    acceleration: float = 0.0
    vertical_acceleration: float = 0.0

    # Propellant / staging
    stage1_fuel: float = 0.0
    stage2_fuel: float = 0.0
    active_stage: int = 1
    is_booster: bool = False
    separation_time: Optional[float] = None
    phase: FlightPhase = FlightPhase.PRE_LAUNCH
    phase_start_time: float = 0.0

    # Environment and running peaks
    max_altitude: float = 0.0
    max_velocity: float = 0.0
    g_force: float = 0.0
    max_g_force: float = 0.0
    dynamic_pressure: float = 0.0
    max_dynamic_pressure: float = 0.0
    temperature: float = C.INITIAL_TEMPERATURE
    max_temperature: float = C.INITIAL_TEMPERATURE
    mach: float = 0.0
    atmospheric_density: float = C.RHO_0
    atmosphere_layer: str = "Troposphere"

    # Orbital elements
    apogee: float = 0.0
    perigee: float = 0.0
    eccentricity: float = 0.0
    semi_major_axis: float = C.R_EARTH
    orbital_period: float = 0.0
    inclination: float = 0.0
    orbital_velocity: float = 0.0
    is_orbiting: bool = False
    time_to_apogee: float = 0.0
    time_to_perigee: float = 0.0

    # Propulsion
    delta_v_expended: float = 0.0
    delta_v_remaining: float = 0.0
    thrust_angle: float = 0.0  # deg from vertical, positive downrange
    throttle: float = 0.0
    structural_load: float = 0.0  # % of the structural g limit

    # Landing subsystem
    legs_deployed: bool = False
    grid_fins_deployed: bool = False
    boostback_complete: bool = False
    reentry_burn_complete: bool = False
    landing_burn_start_altitude: Optional[float] = None
    landing_target: float = 0.0
    landing_accuracy: float = 0.0
    touchdown_speed: float = 0.0
    recovery_percentage: float = 0.0

    def copy(self) -> 'SimulationState':
        """Independent copy (all fields are immutable scalars)."""
        return replace(self)

    @property
    def position_vector(self) -> np.ndarray:
        """Planet-centred position in the local frame (m)."""
        return local_state_vectors(self.altitude, self.horizontal_velocity, self.vertical_velocity)[0]

    @property
    def velocity_vector(self) -> np.ndarray:
        """[downrange, vertical] velocity (m/s)."""
        return local_state_vectors(self.altitude, self.horizontal_velocity, self.vertical_velocity)[1]

    @property
    def active_fuel(self) -> float:
        """Propellant remaining in the active stage (kg)."""
        return self.stage1_fuel if self.active_stage == 1 else self.stage2_fuel

    @property
    def is_grounded(self) -> bool:
        return self.altitude <= 0.0

    def __str__(self) -> str:
        """Human-readable state summary."""
        return (
            f"SimulationState(t={self.time:.2f}s, "
            f"alt={self.altitude/1000:.2f}km, "
            f"v={self.velocity:.1f}m/s, "
            f"stage={self.active_stage}, "
            f"phase={self.phase.label})"
        )


def create_initial_state(rocket: RocketConfig,
                         config: Optional[SimulationConfig] = None) -> SimulationState:
    """
    Create the pre-launch state: on the pad, tanks full, engines off.

    Args:
        rocket: Vehicle description (fuel loads)
        config: Supplies the landing target offset

    Returns:
        SimulationState in PRE_LAUNCH
    """
    if config is None:
        config = create_default_config()
    return SimulationState(
        stage1_fuel=rocket.stage1.fuel_mass,
        stage2_fuel=rocket.stage2.fuel_mass,
        active_stage=1,
        phase=FlightPhase.PRE_LAUNCH,
        delta_v_remaining=compute_remaining_delta_v(
            1, rocket.stage1.fuel_mass, rocket.stage2.fuel_mass, rocket
        ),
        landing_target=config.landing_target,
    )


def display_phase(state: SimulationState) -> FlightPhase:
    """Phase to show on a display: ORBITING for a coasting vehicle in a stable orbit."""
    if state.is_orbiting and state.phase is FlightPhase.COASTING:
        return FlightPhase.ORBITING
    return state.phase
