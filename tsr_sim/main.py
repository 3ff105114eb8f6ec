"""
TSR Flight Simulation - Main Entry Point

This module implements the simulation driver:
- Fixed-step loop around the pure step() function
- Termination on touchdown, max time or (optionally) a stable orbit
- Telemetry logging and periodic trajectory prediction
- Flight events forwarded to an optional sink
- Full mission: stacked ascent, then orbiter and booster after separation
"""

import csv
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import RocketConfig, SimulationConfig, create_default_config, create_default_rocket
from .events import EventSink, detect_events
from .integrators import step
from .mass import compute_vehicle_mass
from .mission_manager import separate_booster
from .prediction import TrajectoryPoint, predict_trajectory, predicted_apogee
from .state import FlightPhase, SimulationState, create_initial_state, display_phase
from .validation import ValidationError, validate_state

# Configure module logger
logger = logging.getLogger(__name__)

REASON_STABLE_ORBIT = "STABLE ORBIT"
REASON_MAX_TIME = "Maximum simulation time reached"
REASON_SEPARATION = "STAGE SEPARATION"


@dataclass
class SimulationLog:
    """Container for logged simulation data."""
    time: List[float] = field(default_factory=list)
    altitude: List[float] = field(default_factory=list)  # km
    downrange: List[float] = field(default_factory=list)  # km
    velocity: List[float] = field(default_factory=list)
    vertical_velocity: List[float] = field(default_factory=list)
    horizontal_velocity: List[float] = field(default_factory=list)
    acceleration: List[float] = field(default_factory=list)
    mass: List[float] = field(default_factory=list)
    stage1_fuel: List[float] = field(default_factory=list)
    stage2_fuel: List[float] = field(default_factory=list)
    active_stage: List[int] = field(default_factory=list)
    thrust_angle: List[float] = field(default_factory=list)
    throttle: List[float] = field(default_factory=list)
    mach: List[float] = field(default_factory=list)
    dynamic_pressure: List[float] = field(default_factory=list)  # Pa
    g_force: List[float] = field(default_factory=list)
    temperature: List[float] = field(default_factory=list)  # K
    atmospheric_density: List[float] = field(default_factory=list)
    apogee: List[float] = field(default_factory=list)  # km
    perigee: List[float] = field(default_factory=list)  # km
    eccentricity: List[float] = field(default_factory=list)
    delta_v_remaining: List[float] = field(default_factory=list)
    recovery_percentage: List[float] = field(default_factory=list)
    phase_name: List[str] = field(default_factory=list)
    # Trajectory predictions, one entry per prediction run
    prediction_time: List[float] = field(default_factory=list)
    predicted_apogee: List[float] = field(default_factory=list)  # km
    latest_prediction: List[TrajectoryPoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.time)

    def append(self, state: SimulationState, rocket: RocketConfig):
        """Log data from current timestep."""
        mass, _ = compute_vehicle_mass(state.active_stage, state.stage1_fuel, state.stage2_fuel,
                                       rocket, state.is_booster)
        self.time.append(state.time)
        self.altitude.append(state.altitude / 1000)
        self.downrange.append(state.downrange / 1000)
        self.velocity.append(state.velocity)
        self.vertical_velocity.append(state.vertical_velocity)
        self.horizontal_velocity.append(state.horizontal_velocity)
        self.acceleration.append(state.acceleration)
        self.mass.append(mass)
        self.stage1_fuel.append(state.stage1_fuel)
        self.stage2_fuel.append(state.stage2_fuel)
        self.active_stage.append(state.active_stage)
        self.thrust_angle.append(state.thrust_angle)
        self.throttle.append(state.throttle)
        self.mach.append(state.mach)
        self.dynamic_pressure.append(state.dynamic_pressure)
        self.g_force.append(state.g_force)
        self.temperature.append(state.temperature)
        self.atmospheric_density.append(state.atmospheric_density)
        self.apogee.append(state.apogee / 1000)
        self.perigee.append(state.perigee / 1000)
        self.eccentricity.append(state.eccentricity)
        self.delta_v_remaining.append(state.delta_v_remaining)
        self.recovery_percentage.append(state.recovery_percentage)
        self.phase_name.append(display_phase(state).label)

    def record_prediction(self, t: float, points: List[TrajectoryPoint]):
        """Keep the newest predicted profile and its apogee."""
        self.prediction_time.append(t)
        self.predicted_apogee.append(predicted_apogee(points) / 1000)
        self.latest_prediction = list(points)

    def to_csv(self, filename: str):
        """Write logged telemetry to CSV for offline analysis."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        header = [
            'time', 'altitude_km', 'downrange_km', 'velocity', 'vel_vert', 'vel_horiz',
            'acceleration', 'mass', 'stage1_fuel_kg', 'stage2_fuel_kg', 'active_stage',
            'thrust_angle_deg', 'throttle', 'mach', 'dynamic_pressure_Pa', 'g_force',
            'temperature_K', 'density_kg_m3', 'apogee_km', 'perigee_km', 'eccentricity',
            'delta_v_remaining', 'recovery_pct', 'phase',
        ]
        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            for i in range(len(self.time)):
                writer.writerow([
                    self.time[i], self.altitude[i], self.downrange[i], self.velocity[i],
                    self.vertical_velocity[i], self.horizontal_velocity[i],
                    self.acceleration[i], self.mass[i], self.stage1_fuel[i],
                    self.stage2_fuel[i], self.active_stage[i], self.thrust_angle[i],
                    self.throttle[i], self.mach[i], self.dynamic_pressure[i],
                    self.g_force[i], self.temperature[i], self.atmospheric_density[i],
                    self.apogee[i], self.perigee[i], self.eccentricity[i],
                    self.delta_v_remaining[i], self.recovery_percentage[i],
                    self.phase_name[i],
                ])


def check_termination(state: SimulationState, max_time: float,
                      config: SimulationConfig) -> tuple:
    """
    Check if simulation should terminate.

    Args:
        state: Current state
        max_time: Maximum allowed simulation time (s)
        config: Supplies stop_on_orbit

    Returns:
        (should_terminate, reason) tuple
    """
    if state.phase.is_terminal:
        return True, state.phase.label
    if config.stop_on_orbit and state.is_orbiting and state.phase is FlightPhase.COASTING:
        return True, REASON_STABLE_ORBIT
    if state.time >= max_time:
        return True, REASON_MAX_TIME
    return False, None


def _fly(state: SimulationState, rocket: RocketConfig, config: SimulationConfig,
         dt: float, max_time: float, log: SimulationLog,
         event_sink: Optional[EventSink], verbose: bool,
         until: Optional[Callable[[SimulationState], bool]] = None) -> tuple:
    """
    Step until termination (or until the predicate holds).

    Returns:
        (final_state, reason, step_count)
    """
    step_count = 0
    last_print_time = state.time - 10.0

    while True:
        should_terminate, reason = check_termination(state, max_time, config)
        if should_terminate:
            break
        if until is not None and until(state):
            reason = REASON_SEPARATION
            break

        previous = state
        state = step(state, rocket, dt, config)
        step_count += 1

        if config.validate_states:
            try:
                validate_state(state, rocket)
            except ValidationError as e:
                logger.error(f"Validation failed: {e}")
                reason = f"Validation failure: {e}"
                break

        if event_sink is not None:
            for event in detect_events(previous, state):
                event_sink.emit(event)

        log.append(state, rocket)

        if step_count % config.prediction_interval == 0:
            log.record_prediction(state.time, list(predict_trajectory(state, rocket, config)))

        if verbose and state.time - last_print_time >= 10.0:
            _print_status(state, rocket)
            last_print_time = state.time

    return state, reason, step_count


def run_simulation(rocket: Optional[RocketConfig] = None,
                   config: Optional[SimulationConfig] = None,
                   initial_state: Optional[SimulationState] = None,
                   event_sink: Optional[EventSink] = None,
                   verbose: Optional[bool] = None,
                   dt: Optional[float] = None,
                   max_time: Optional[float] = None) -> tuple:
    """
    Run a single-vehicle flight from the given (or pre-launch) state.

    Args:
        rocket: Vehicle (default rocket if None)
        config: SimulationConfig instance. If None a default is created.
        initial_state: Optional starting state. If None, starts on the pad.
        event_sink: Receives flight events; None disables detection
        verbose: Print progress rows. Defaults to config.verbose.
        dt: Time step; overrides config.dt if given
        max_time: Maximum simulation time; overrides config.max_time if given

    Returns:
        (final_state, log, termination_reason) tuple

    Raises:
        ValueError: If dt <= 0
    """
    if config is None:
        config = create_default_config()
    if rocket is None:
        rocket = create_default_rocket()
    if verbose is None:
        verbose = config.verbose
    if dt is None:
        dt = config.dt
    if max_time is None:
        max_time = config.max_time
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")

    state = initial_state if initial_state is not None else create_initial_state(rocket, config)
    log = SimulationLog()
    log.append(state, rocket)

    logger.info(f"Starting simulation: dt={dt}s, max_time={max_time}s, rocket={rocket.name}")
    logger.debug(f"Initial state: {state}")
    if verbose:
        _print_header(f"TSR FLIGHT SIMULATION | {rocket.name} | dt={dt}s | T_max={max_time}s")

    start_time = time.time()
    state, reason, steps = _fly(state, rocket, config, dt, max_time, log, event_sink, verbose)
    elapsed = time.time() - start_time

    logger.info(f"Simulation terminated: {reason}")
    if verbose:
        print(f"\nTermination: {reason}")
    _log_completion(state, steps, elapsed, verbose)
    return state, log, reason


def _print_header(title: str):
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)
    print(f"{'Time (s)':^10} | {'Alt (km)':^10} | {'Vel (m/s)':^10} | {'Mass (kg)':^12} | {'Phase':<12}")
    print("-" * 80)


def _print_status(state: SimulationState, rocket: RocketConfig):
    """Print a formatted status row."""
    mass, _ = compute_vehicle_mass(state.active_stage, state.stage1_fuel, state.stage2_fuel,
                                   rocket, state.is_booster)
    msg = (f"{state.time:10.1f} | {state.altitude/1000:10.1f} | "
           f"{state.velocity:10.1f} | {mass:12.1f} | {display_phase(state).label:<12}")
    print(msg)
    logger.debug(msg)


def _log_completion(state: SimulationState, steps: int, elapsed: float, verbose: bool):
    """Log and print completion statistics."""
    logger.info(f"Simulation complete: {steps} steps in {elapsed:.2f}s")
    logger.info(f"Final state: alt={state.altitude/1000:.2f}km, v={state.velocity:.1f}m/s, "
                f"phase={display_phase(state).label}")
    if verbose:
        print("-" * 80)
        print("SIMULATION COMPLETED")
        print("-" * 80)
        print(f"Final Time:     {state.time:.2f} s")
        print(f"Final Altitude: {state.altitude/1000:.2f} km")
        print(f"Final Velocity: {state.velocity:.2f} m/s")
        print(f"Max Altitude:   {state.max_altitude/1000:.2f} km")
        print(f"Max G:          {state.max_g_force:.2f} g")
        if state.phase is FlightPhase.LANDED:
            print(f"Recovery:       {state.recovery_percentage:.0f} %")
        print("-" * 80)
        print(f"Steps:       {steps:,}")
        print(f"Wall Time:   {elapsed:.2f} s")
        print(f"Performance: {steps/elapsed:.0f} steps/s" if elapsed > 0 else "Performance: N/A")
        print("=" * 80)


@dataclass
class FullMissionResult:
    """Result of a full mission with dual-vehicle tracking.

    The ascent log covers liftoff to the tick separation is recorded.
    The orbiter and booster logs start at separation.
    separation_time is None when the stack never separated; both
    post-separation logs are then empty.
    """
    # Stacked ascent
    ascent_log: SimulationLog
    ascent_final_state: SimulationState
    ascent_reason: str
    separation_time: Optional[float]

    # Upper stage after separation
    orbiter_log: SimulationLog
    orbiter_final_state: SimulationState
    orbiter_reason: str

    # First stage after separation
    booster_log: SimulationLog
    booster_final_state: SimulationState
    booster_reason: str


def run_full_mission(rocket: Optional[RocketConfig] = None,
                     config: Optional[SimulationConfig] = None,
                     event_sink: Optional[EventSink] = None,
                     verbose: Optional[bool] = None) -> FullMissionResult:
    """
    Run a full mission: stacked ascent, separation, then orbiter and booster.

    The stack flies until the STAGING phase first appears. The first stage
    is then forked off as a booster carrying whatever stage-1 propellant
    was held back (booster_landing_reserve_kg) and flown to touchdown; the
    stack continues as the upper stage.

    Args:
        rocket: Vehicle (default rocket if None)
        config: SimulationConfig (default created if None)
        event_sink: Receives events from all three segments
        verbose: Print status updates. Defaults to config.verbose.

    Returns:
        FullMissionResult with telemetry for ascent, orbiter and booster.
    """
    if config is None:
        config = create_default_config()
    if rocket is None:
        rocket = create_default_rocket()
    if verbose is None:
        verbose = config.verbose
    dt = config.dt
    max_time = config.max_time
    start_time = time.time()

    # ── Phase A: stacked ascent ──────────────────────────────────────────
    if verbose:
        _print_header(f"FULL MISSION SIMULATION | {rocket.name} | Phase A: stacked ascent")
    ascent_log = SimulationLog()
    state = create_initial_state(rocket, config)
    ascent_log.append(state, rocket)
    stack_state, ascent_reason, steps = _fly(
        state, rocket, config, dt, max_time, ascent_log, event_sink, verbose,
        until=lambda s: s.phase is FlightPhase.STAGING,
    )

    if ascent_reason != REASON_SEPARATION:
        logger.warning(f"No stage separation: {ascent_reason}")
        return FullMissionResult(
            ascent_log=ascent_log,
            ascent_final_state=stack_state,
            ascent_reason=ascent_reason,
            separation_time=None,
            orbiter_log=SimulationLog(),
            orbiter_final_state=stack_state,
            orbiter_reason=ascent_reason,
            booster_log=SimulationLog(),
            booster_final_state=stack_state,
            booster_reason=ascent_reason,
        )

    separation_time = stack_state.separation_time
    booster_state = separate_booster(stack_state, rocket, config)

    # ── Phase B: upper stage ─────────────────────────────────────────────
    if verbose:
        print(f"\n  *** STAGE SEPARATION at t={separation_time:.2f}s | "
              f"Alt={stack_state.altitude/1000:.1f} km | booster propellant "
              f"{booster_state.stage1_fuel:.0f} kg")
        _print_header("Phase B: upper stage")
    orbiter_log = SimulationLog()
    orbiter_log.append(stack_state, rocket)
    orbiter_state, orbiter_reason, orbiter_steps = _fly(
        stack_state, rocket, config, dt, max_time, orbiter_log, event_sink, verbose,
    )

    # ── Phase C: booster recovery ────────────────────────────────────────
    if verbose:
        _print_header("Phase C: booster recovery")
    booster_log = SimulationLog()
    booster_log.append(booster_state, rocket)
    booster_state, booster_reason, booster_steps = _fly(
        booster_state, rocket, config, dt, max_time, booster_log, event_sink, verbose,
    )

    elapsed = time.time() - start_time
    total_steps = steps + orbiter_steps + booster_steps
    logger.info(f"Full mission complete: orbiter {orbiter_reason}, booster {booster_reason}, "
                f"{total_steps} steps in {elapsed:.2f}s")

    if verbose:
        print("\n" + "=" * 90)
        print("FULL MISSION SUMMARY")
        print("=" * 90)
        print(f"Separation:    t={separation_time:.2f}s")
        print(f"Orbiter:       {orbiter_reason}")
        print(f"  Final Alt:   {orbiter_state.altitude/1000:.1f} km | V={orbiter_state.velocity:.0f} m/s"
              f" | Perigee={orbiter_state.perigee/1000:.1f} km")
        print(f"Booster:       {booster_reason}")
        print(f"  Final Alt:   {booster_state.altitude/1000:.1f} km | "
              f"Touchdown={booster_state.touchdown_speed:.1f} m/s | "
              f"Recovery={booster_state.recovery_percentage:.0f} %")
        print(f"Total Steps:   {total_steps:,} | Wall Time: {elapsed:.2f}s")
        print("=" * 90)

    return FullMissionResult(
        ascent_log=ascent_log,
        ascent_final_state=stack_state,
        ascent_reason=ascent_reason,
        separation_time=separation_time,
        orbiter_log=orbiter_log,
        orbiter_final_state=orbiter_state,
        orbiter_reason=orbiter_reason,
        booster_log=booster_log,
        booster_final_state=booster_state,
        booster_reason=booster_reason,
    )
