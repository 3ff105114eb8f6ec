"""
TSR Flight Simulation Package

Planar two-stage rocket ascent, orbit and propulsive booster recovery.

Modules:
    - constants: Physical constants, atmosphere table and vehicle defaults
    - config: Rocket and simulation configuration
    - state: Immutable state vector and flight-phase table
    - forces: Atmosphere, gravity, thrust and drag
    - mass: Stage mass and delta-v
    - thermal: Mach, skin heating and load factor
    - guidance: Ascent gravity-turn program
    - orbital: Orbital elements and maneuvers
    - recovery: Booster landing guidance
    - mission_manager: Recovery sequencing and booster separation
    - integrators: Fixed-step force integrator
    - prediction: Trajectory look-ahead
    - events: Flight event detection
    - analysis: Mission statistics and remote debrief
    - validation: State invariant checks
    - main: Simulation entry point
"""

from .config import (
    RocketConfig, SimulationConfig, StageConfig, create_default_config,
    create_default_rocket, create_test_config,
)
from .state import FlightPhase, SimulationState, create_initial_state
from .integrators import step
from .main import run_simulation, run_full_mission, FullMissionResult, SimulationLog

__version__ = "1.0.0"
__author__ = "TSR Simulation Team"

__all__ = [
    'RocketConfig',
    'StageConfig',
    'SimulationConfig',
    'create_default_config',
    'create_default_rocket',
    'create_test_config',
    'FlightPhase',
    'SimulationState',
    'create_initial_state',
    'step',
    'run_simulation',
    'run_full_mission',
    'FullMissionResult',
    'SimulationLog',
]
