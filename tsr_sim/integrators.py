"""
TSR Flight Simulation - Force Integrator

This module advances the vehicle by one fixed time step with a
semi-implicit (symplectic) Euler scheme and runs the flight-phase state
machine for ascent, staging, burnout and touchdown.

Execution order per tick:
  1. Velocity components, mass, atmosphere
  2. Throttle and thrust angle (gravity turn or landing guidance)
  3. Propellant consumption and burnout/staging
  4. Forces -> accelerations -> v += a dt, x += v_new dt
  5. Loads, Mach, skin temperature, remaining delta-v
  6. Touchdown and descent checks, ground clamp
  7. Orbital elements and running peaks
  8. Booster recovery sequencing (mission_manager)
"""

import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from . import constants as C
from .config import RocketConfig, SimulationConfig, create_default_config
from .forces import compute_atmosphere_properties, compute_dynamic_pressure, compute_force_breakdown
from .guidance import compute_ascent_thrust_angle
from .mass import compute_remaining_delta_v, compute_vehicle_mass, update_fuel, usable_fuel
from .mission_manager import advance_recovery_sequence, log_phase_change
from .orbital import (
    calculate_circular_velocity,
    calculate_orbital_elements,
    calculate_time_to_apsides,
    is_stable_orbit,
)
from .recovery import calculate_recovery_percentage, compute_landing_guidance
from .state import FlightPhase, SimulationState, check_transition
from .thermal import compute_g_force, compute_mach, compute_structural_load, update_skin_temperature
from .utils import local_state_vectors

logger = logging.getLogger(__name__)


def _ground_elements() -> dict:
    """Orbital fields for a vehicle on the ground or at rest."""
    return {
        'apogee': 0.0,
        'perigee': 0.0,
        'eccentricity': 0.0,
        'semi_major_axis': C.R_EARTH,
        'period': 0.0,
        'inclination': 0.0,
        'time_to_apogee': 0.0,
        'time_to_perigee': 0.0,
        'is_orbiting': False,
    }


def compute_orbit_fields(altitude: float, horizontal_velocity: float,
                         vertical_velocity: float) -> dict:
    """
    Orbital elements, apsis times and stability for a local state.

    Grounded or stationary vehicles get ground defaults so the element
    calculator never sees a zero vector.
    """
    if altitude <= 0.0 or np.hypot(horizontal_velocity, vertical_velocity) < C.ZERO_TOLERANCE:
        return _ground_elements()

    position, velocity = local_state_vectors(altitude, horizontal_velocity, vertical_velocity)
    elements = calculate_orbital_elements(position, velocity)
    times = calculate_time_to_apsides(position, velocity, elements)
    return {
        'apogee': elements['apogee'],
        'perigee': elements['perigee'],
        'eccentricity': elements['eccentricity'],
        'semi_major_axis': elements['semi_major_axis'],
        'period': elements['period'],
        'inclination': elements['inclination'],
        'time_to_apogee': times['time_to_apogee'],
        'time_to_perigee': times['time_to_perigee'],
        'is_orbiting': is_stable_orbit(position, velocity, elements),
    }


def ignite(state: SimulationState) -> SimulationState:
    """PRE_LAUNCH -> BURNING on the first tick; time does not advance."""
    ignited = replace(
        state,
        phase=check_transition(state.phase, FlightPhase.BURNING),
        phase_start_time=state.time,
        throttle=1.0,
    )
    log_phase_change(state, ignited)
    return ignited


def integrate_state(state: SimulationState, rocket: RocketConfig, dt: float,
                    config: SimulationConfig) -> SimulationState:
    """
    Physics half of the tick: forces, integration and ascent phase logic.

    Returns a fully populated state; recovery sequencing is applied by step().
    """
    t = state.time
    new_time = t + dt
    altitude = state.altitude
    vh = state.horizontal_velocity
    vv = state.vertical_velocity
    speed = float(np.hypot(vh, vv))

    stage_number = state.active_stage
    is_booster = state.is_booster
    stage1_fuel = state.stage1_fuel
    stage2_fuel = state.stage2_fuel
    mass, _ = compute_vehicle_mass(stage_number, stage1_fuel, stage2_fuel, rocket, is_booster)
    atm = compute_atmosphere_properties(altitude)

    phase = state.phase
    phase_start_time = state.phase_start_time
    separation_time = state.separation_time

    def advance_phase(target: FlightPhase):
        nonlocal phase, phase_start_time
        if target is not phase:
            phase = check_transition(phase, target)
            phase_start_time = new_time

    # ── Throttle and steering ────────────────────────────────────────────
    if phase is FlightPhase.BURNING:
        throttle = 1.0
        _, thrust_angle = compute_ascent_thrust_angle(altitude, state.thrust_angle, True, config)
    elif phase.is_recovery_burn:
        guidance = compute_landing_guidance(state, rocket, config.landing_target, config)
        throttle = guidance['target_throttle']
        thrust_angle = guidance['target_angle']
    else:
        throttle = 0.0
        thrust_angle = state.thrust_angle

    # ── Propellant, burnout and staging ──────────────────────────────────
    stage = rocket.stage(stage_number)
    ascent_reserve = 0.0
    if phase is FlightPhase.BURNING and stage_number == 1 and not is_booster:
        ascent_reserve = config.booster_landing_reserve_kg
    fuel = stage1_fuel if stage_number == 1 else stage2_fuel

    thrust = 0.0
    separation_kick = 0.0
    delta_v_expended = state.delta_v_expended
    if (phase.is_powered and usable_fuel(fuel, ascent_reserve) > 0.0
            and throttle > 0.0 and stage.thrust > 0.0):
        thrust = stage.thrust * throttle
        fuel, _ = update_fuel(fuel, stage.burn_rate, throttle, dt, floor=ascent_reserve)
        if stage_number == 1:
            stage1_fuel = fuel
        else:
            stage2_fuel = fuel
        delta_v_expended += thrust * dt / mass
    elif phase is FlightPhase.BURNING:
        upper_stage_ready = rocket.stage2.thrust > 0.0 and stage2_fuel > 0.0
        if stage_number == 1 and not is_booster and upper_stage_ready:
            advance_phase(FlightPhase.STAGING)
            separation_time = t
            separation_kick = config.separation_impulse
            logger.info(f"Stage 1 burnout at t={t:.2f}s, Alt={altitude/1000:.1f}km, "
                        f"V={speed:.0f}m/s; separating")
        else:
            advance_phase(FlightPhase.COASTING)
            logger.info(f"Stage {stage_number} burnout at t={t:.2f}s, Alt={altitude/1000:.1f}km")
        throttle = 0.0
    else:
        throttle = 0.0

    if (state.phase is FlightPhase.STAGING and separation_time is not None
            and t - separation_time > config.staging_dwell_time):
        advance_phase(FlightPhase.BURNING)
        stage_number = 2
        logger.info(f"Stage 2 ignition at t={t:.2f}s, Alt={altitude/1000:.1f}km")

    # ── Forces and integration ───────────────────────────────────────────
    forces = compute_force_breakdown(
        mass, altitude, atm['density'], vh, vv, thrust, thrust_angle,
        rocket.drag_coefficient, config.reference_area,
    )
    ah = forces['net_horizontal'] / mass
    av = forces['net_vertical'] / mass
    r = C.R_EARTH + altitude
    if config.enable_curvature:
        av += vh * vh / r
        ah -= vh * vv / r

    # Pad reaction: a grounded vehicle without net lift stays put
    if altitude <= 0.0 and vv <= 0.0 and av <= 0.0:
        av = 0.0
        ah = 0.0

    new_vv = vv + av * dt + separation_kick
    new_vh = vh + ah * dt
    new_altitude = altitude + new_vv * dt
    ground_track_scale = C.R_EARTH / r if config.enable_curvature else 1.0
    new_downrange = state.downrange + new_vh * dt * ground_track_scale

    acceleration = float(np.hypot(ah, av))
    g_force = compute_g_force(acceleration)

    # ── Environment ──────────────────────────────────────────────────────
    mach = compute_mach(speed, atm['speed_of_sound'])
    dynamic_pressure = compute_dynamic_pressure(atm['density'], speed)
    temperature = update_skin_temperature(
        state.temperature, atm['temperature'], mach, atm['density'], thrust > 0.0, dt,
    )
    delta_v_remaining = compute_remaining_delta_v(stage_number, stage1_fuel, stage2_fuel,
                                                  rocket, is_booster)

    # ── Touchdown / descent ──────────────────────────────────────────────
    landing_accuracy = abs(new_downrange - config.landing_target)
    recovery_percentage = state.recovery_percentage
    touchdown_speed = state.touchdown_speed
    if new_altitude <= 0.0 and t > config.startup_grace_period:
        impact_speed = float(np.hypot(new_vh, new_vv))
        touchdown_speed = impact_speed
        if impact_speed <= C.SAFE_LANDING_SPEED:
            advance_phase(FlightPhase.LANDED)
            recovery_percentage = calculate_recovery_percentage(
                impact_speed, landing_accuracy, thrust_angle)
        else:
            advance_phase(FlightPhase.CRASHED)
            recovery_percentage = 0.0
        logger.info(f"Ground contact at t={new_time:.2f}s, {impact_speed:.1f}m/s -> {phase.label}")

    if new_altitude <= 0.0:
        new_altitude = 0.0
        new_vv = 0.0
        new_vh = 0.0
    new_speed = float(np.hypot(new_vh, new_vv))

    orbit = compute_orbit_fields(new_altitude, new_vh, new_vv)
    # Only an unpowered coast falls into DESCENT; burns keep their phase while falling
    if phase is FlightPhase.COASTING and new_vv < 0.0 and not orbit['is_orbiting']:
        advance_phase(FlightPhase.DESCENT)

    return SimulationState(
        time=new_time,
        altitude=new_altitude,
        downrange=new_downrange,
        vertical_velocity=new_vv,
        horizontal_velocity=new_vh,
        velocity=new_speed,
        acceleration=acceleration,
        vertical_acceleration=av,
        stage1_fuel=stage1_fuel,
        stage2_fuel=stage2_fuel,
        active_stage=stage_number,
        is_booster=is_booster,
        separation_time=separation_time,
        phase=phase,
        phase_start_time=phase_start_time,
        max_altitude=max(state.max_altitude, new_altitude),
        max_velocity=max(state.max_velocity, new_speed),
        g_force=g_force,
        max_g_force=max(state.max_g_force, g_force),
        dynamic_pressure=dynamic_pressure,
        max_dynamic_pressure=max(state.max_dynamic_pressure, dynamic_pressure),
        temperature=temperature,
        max_temperature=max(state.max_temperature, temperature),
        mach=mach,
        atmospheric_density=atm['density'],
        atmosphere_layer=atm['layer'],
        apogee=orbit['apogee'],
        perigee=orbit['perigee'],
        eccentricity=orbit['eccentricity'],
        semi_major_axis=orbit['semi_major_axis'],
        orbital_period=orbit['period'],
        inclination=orbit['inclination'],
        orbital_velocity=calculate_circular_velocity(new_altitude),
        is_orbiting=orbit['is_orbiting'],
        time_to_apogee=orbit['time_to_apogee'],
        time_to_perigee=orbit['time_to_perigee'],
        delta_v_expended=delta_v_expended,
        delta_v_remaining=delta_v_remaining,
        thrust_angle=thrust_angle,
        throttle=throttle if thrust > 0.0 else 0.0,
        structural_load=compute_structural_load(g_force),
        legs_deployed=state.legs_deployed,
        grid_fins_deployed=state.grid_fins_deployed,
        boostback_complete=state.boostback_complete,
        reentry_burn_complete=state.reentry_burn_complete,
        landing_burn_start_altitude=state.landing_burn_start_altitude,
        landing_target=config.landing_target,
        landing_accuracy=landing_accuracy,
        touchdown_speed=touchdown_speed,
        recovery_percentage=recovery_percentage,
    )


def step(state: SimulationState, rocket: RocketConfig, dt: Optional[float] = None,
         config: Optional[SimulationConfig] = None) -> SimulationState:
    """
    Advance the simulation by one tick.

    Pure: the input state is never modified. Terminal states are returned
    unchanged; a PRE_LAUNCH state only ignites.

    Args:
        state: Current state
        rocket: Vehicle description
        dt: Time step (s); defaults to config.dt
        config: Simulation configuration

    Returns:
        New SimulationState

    Raises:
        ValueError: If dt <= 0
    """
    if config is None:
        config = create_default_config()
    if dt is None:
        dt = config.dt
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")

    if state.phase.is_terminal:
        return state
    if state.phase is FlightPhase.PRE_LAUNCH:
        return ignite(state)

    new_state = integrate_state(state, rocket, dt, config)
    log_phase_change(state, new_state)
    return advance_recovery_sequence(new_state, rocket, config)
