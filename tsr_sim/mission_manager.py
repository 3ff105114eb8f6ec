"""
TSR Mission Manager

High-level sequencing of the booster recovery: burn starts and completions,
hardware deployment and the stage-separation fork.

Transitions handled here:
  - Boostback:      coasting first stage in the 60-80 km window
  - Boostback end:  burn duration / propellant budget spent -> COASTING
  - Re-entry burn:  falling faster than 500 m/s in the 60-75 km window
  - Re-entry end:   below 50 km or propellant exhausted -> DESCENT
  - Landing burn:   altitude at or below the suicide-burn altitude

Ascent transitions (ignition, staging, burnout, touchdown) live in the
integrator because they depend on the physics of the same tick.
"""

from dataclasses import replace
import logging
from typing import Optional

import numpy as np

from . import constants as C
from .config import RocketConfig, SimulationConfig, create_default_config
from .mass import compute_remaining_delta_v
from .recovery import compute_landing_guidance
from .state import FlightPhase, SimulationState, check_transition

logger = logging.getLogger(__name__)


def log_phase_change(previous: SimulationState, current: SimulationState):
    """Log a phase transition with telemetry."""
    if previous.phase is current.phase:
        return
    logger.info(f"{previous.phase.label} -> {current.phase.label} at t={current.time:.2f}s, "
                f"Alt={current.altitude/1000:.1f}km, V={current.velocity:.0f}m/s, "
                f"stage={current.active_stage}")


def _boostback_burn_limit(rocket: RocketConfig, config: SimulationConfig) -> float:
    """Boostback duration allowed by the burn timer and the propellant budget (s)."""
    flow = rocket.stage1.burn_rate * C.BOOSTBACK_THROTTLE
    budget_time = config.booster_boostback_budget_kg / flow if flow > 0.0 else float("inf")
    return min(config.boostback_burn_duration, budget_time)


def advance_recovery_sequence(state: SimulationState, rocket: RocketConfig,
                              config: Optional[SimulationConfig] = None) -> SimulationState:
    """
    Apply landing-guidance decisions to a freshly integrated state.

    Only first-stage vehicles in flight are affected. Burn completions are
    evaluated before new triggers so a finished burn cannot immediately
    restart.

    Args:
        state: State produced by the integrator for this tick
        rocket: Vehicle description
        config: Guidance configuration

    Returns:
        State with updated phase, completion flags and deployment flags
    """
    if config is None:
        config = create_default_config()
    if state.phase.is_terminal or state.active_stage != 1 or state.altitude <= 0.0:
        return state

    guidance = compute_landing_guidance(state, rocket, config.landing_target, config)

    phase = state.phase
    boostback_complete = state.boostback_complete
    reentry_complete = state.reentry_burn_complete
    landing_start_altitude = state.landing_burn_start_altitude

    if phase is FlightPhase.BOOSTBACK:
        elapsed = state.time - state.phase_start_time
        if elapsed >= _boostback_burn_limit(rocket, config) or state.stage1_fuel <= 0.0:
            boostback_complete = True
            phase = FlightPhase.COASTING
    elif phase is FlightPhase.RE_ENTRY:
        if state.altitude < config.reentry_burn_end_altitude or state.stage1_fuel <= 0.0:
            reentry_complete = True
            phase = FlightPhase.DESCENT
    elif guidance['should_start_boostback']:
        phase = FlightPhase.BOOSTBACK
    elif guidance['should_start_reentry_burn']:
        phase = FlightPhase.RE_ENTRY
    elif guidance['should_start_landing_burn'] and phase is not FlightPhase.LANDING:
        phase = FlightPhase.LANDING
        if landing_start_altitude is None:
            landing_start_altitude = state.altitude
            logger.info(f"Landing burn ignition at {state.altitude:.0f}m "
                        f"(suicide-burn altitude {guidance['suicide_burn_altitude']:.0f}m, "
                        f"impact in {guidance['time_to_impact']:.1f}s)")

    check_transition(state.phase, phase)

    legs = state.legs_deployed or guidance['should_deploy_legs']
    fins = state.grid_fins_deployed or guidance['should_deploy_grid_fins']
    if legs and not state.legs_deployed:
        logger.info(f"Landing legs deployed at {state.altitude:.0f}m")
    if fins and not state.grid_fins_deployed:
        logger.info(f"Grid fins deployed at {state.altitude/1000:.1f}km")

    updated = replace(
        state,
        phase=phase,
        phase_start_time=state.time if phase is not state.phase else state.phase_start_time,
        boostback_complete=boostback_complete,
        reentry_burn_complete=reentry_complete,
        landing_burn_start_altitude=landing_start_altitude,
        legs_deployed=legs,
        grid_fins_deployed=fins,
    )
    log_phase_change(state, updated)
    return updated


def separate_booster(stack_state: SimulationState, rocket: RocketConfig,
                     config: Optional[SimulationConfig] = None) -> SimulationState:
    """
    Fork the spent first stage off the stack at separation.

    The booster keeps the stack's position and pre-separation velocity
    (the separation impulse pushes the upper stage only), its remaining
    stage-1 propellant, and starts coasting.

    Args:
        stack_state: Stack state on the tick separation was recorded
        rocket: Vehicle description
        config: Supplies the separation impulse

    Returns:
        Booster SimulationState
    """
    if config is None:
        config = create_default_config()

    vertical_velocity = stack_state.vertical_velocity - config.separation_impulse
    velocity = float(np.hypot(stack_state.horizontal_velocity, vertical_velocity))
    booster = replace(
        stack_state,
        vertical_velocity=vertical_velocity,
        velocity=velocity,
        stage2_fuel=0.0,
        active_stage=1,
        is_booster=True,
        phase=FlightPhase.COASTING,
        phase_start_time=stack_state.time,
        throttle=0.0,
        delta_v_remaining=compute_remaining_delta_v(1, stack_state.stage1_fuel, 0.0, rocket,
                                                    is_booster=True),
        boostback_complete=False,
        reentry_burn_complete=False,
        legs_deployed=False,
        grid_fins_deployed=False,
        landing_burn_start_altitude=None,
        recovery_percentage=0.0,
    )
    logger.info(f"Booster separated at t={booster.time:.2f}s, Alt={booster.altitude/1000:.1f}km, "
                f"propellant={booster.stage1_fuel:.0f}kg")
    return booster
