"""
TSR Flight Simulation - Trajectory Visualization

Offline plots of a SimulationLog: altitude, velocity, propellant, loads,
thermal state, ground track, phase timeline and predicted apogee, plus
mission-level plots that overlay the ascent, orbiter and booster segments.

Every plot function writes one PNG into output_dir and returns its path.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
import numpy as np

from .state import FlightPhase

PHASE_ORDER = [phase.label for phase in FlightPhase]


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class TrajectoryData:
    """Container for processed trajectory data used in plotting.

    Attributes:
        time: Time array in seconds
        altitude: Altitude in kilometers
        downrange: Downrange distance in kilometers
        velocity: Speed in m/s
        vertical_velocity: Vertical velocity component in m/s
        horizontal_velocity: Horizontal velocity component in m/s
        mass: Vehicle mass in kg
        stage1_fuel: Stage-1 propellant in kg
        stage2_fuel: Stage-2 propellant in kg
        throttle: Throttle setting (0.0 to 1.0)
        thrust_angle: Thrust angle from vertical in degrees
        mach: Mach number
        dynamic_pressure: Dynamic pressure in Pascals
        g_force: Load factor in g
        temperature: Skin temperature in K
        phase_index: Flight phase as an index into PHASE_ORDER
        prediction_time: Times of trajectory predictions (s)
        predicted_apogee: Predicted apogee per prediction (km)
    """
    time: np.ndarray
    altitude: np.ndarray
    downrange: np.ndarray
    velocity: np.ndarray
    vertical_velocity: np.ndarray
    horizontal_velocity: np.ndarray
    mass: np.ndarray
    stage1_fuel: np.ndarray
    stage2_fuel: np.ndarray
    throttle: np.ndarray
    thrust_angle: np.ndarray
    mach: np.ndarray
    dynamic_pressure: np.ndarray
    g_force: np.ndarray
    temperature: np.ndarray
    phase_index: np.ndarray
    prediction_time: np.ndarray = None
    predicted_apogee: np.ndarray = None


# =============================================================================
# Configuration
# =============================================================================

def configure_plot_style() -> None:
    """Configure matplotlib defaults for the report plots."""
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'figure.dpi': 150,
        'savefig.dpi': 150,
        'axes.grid': True,
        'axes.axisbelow': True,
        'grid.alpha': 0.3,
        'grid.linestyle': '-',
        'grid.linewidth': 0.5,
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'legend.framealpha': 0.95,
        'lines.linewidth': 1.8,
        'xtick.direction': 'in',
        'ytick.direction': 'in',
    })


# =============================================================================
# Data Processing
# =============================================================================

def extract_log_data(log) -> TrajectoryData:
    """Extract simulation log lists into numpy arrays for plotting.

    Args:
        log: SimulationLog with at least one sample

    Returns:
        TrajectoryData object with processed arrays

    Raises:
        ValueError: If the log is empty
    """
    if len(log.time) == 0:
        raise ValueError("Cannot plot an empty simulation log")

    phase_index = np.array([
        PHASE_ORDER.index(name) if name in PHASE_ORDER else -1
        for name in log.phase_name
    ])
    return TrajectoryData(
        time=np.array(log.time),
        altitude=np.array(log.altitude),
        downrange=np.array(log.downrange),
        velocity=np.array(log.velocity),
        vertical_velocity=np.array(log.vertical_velocity),
        horizontal_velocity=np.array(log.horizontal_velocity),
        mass=np.array(log.mass),
        stage1_fuel=np.array(log.stage1_fuel),
        stage2_fuel=np.array(log.stage2_fuel),
        throttle=np.array(log.throttle),
        thrust_angle=np.array(log.thrust_angle),
        mach=np.array(log.mach),
        dynamic_pressure=np.array(log.dynamic_pressure),
        g_force=np.array(log.g_force),
        temperature=np.array(log.temperature),
        phase_index=phase_index,
        prediction_time=np.array(log.prediction_time),
        predicted_apogee=np.array(log.predicted_apogee),
    )


def _save(fig, output_dir: str, name: str) -> str:
    plt.tight_layout()
    path = os.path.join(output_dir, name)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


def _phase_change_indices(data: TrajectoryData) -> np.ndarray:
    """Sample indices where the flight phase changes."""
    if len(data.phase_index) < 2:
        return np.array([], dtype=int)
    return np.where(np.diff(data.phase_index) != 0)[0] + 1


# =============================================================================
# Single-vehicle plots
# =============================================================================

def plot_altitude_profile(data: TrajectoryData, output_dir: str) -> str:
    """Altitude vs time with the apex and phase changes marked."""
    fig, ax = plt.subplots()

    ax.fill_between(data.time, 0, data.altitude, alpha=0.25, color='#1f77b4')
    ax.plot(data.time, data.altitude, 'b-', linewidth=2, label='Altitude')

    apex = int(np.argmax(data.altitude))
    ax.scatter([data.time[apex]], [data.altitude[apex]], c='red', s=80, marker='x', zorder=5,
               label=f'Apex ({data.altitude[apex]:.1f} km)')
    for idx in _phase_change_indices(data):
        ax.axvline(data.time[idx], color='gray', linestyle=':', alpha=0.7)
        ax.text(data.time[idx], ax.get_ylim()[1] * 0.95, PHASE_ORDER[data.phase_index[idx]],
                rotation=90, fontsize=8, va='top')

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Altitude Profile', fontweight='bold')
    ax.legend(loc='lower right')
    ax.set_ylim(0, None)
    return _save(fig, output_dir, '01_altitude_profile.png')


def plot_velocity_profile(data: TrajectoryData, output_dir: str) -> str:
    """Speed and its vertical/horizontal components."""
    fig, ax = plt.subplots()

    ax.plot(data.time, data.velocity, 'r-', linewidth=2, label='Speed')
    ax.plot(data.time, data.vertical_velocity, 'g--', label='Vertical')
    ax.plot(data.time, data.horizontal_velocity, 'b--', label='Horizontal')
    ax.axhline(0.0, color='k', linewidth=0.8)

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Velocity (m/s)')
    ax.set_title('Velocity Profile', fontweight='bold')
    ax.legend(loc='best')
    return _save(fig, output_dir, '02_velocity_profile.png')


def plot_mass_profile(data: TrajectoryData, output_dir: str) -> str:
    """Vehicle mass and per-stage propellant."""
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(10, 8))

    ax1.plot(data.time, data.mass, 'k-', linewidth=2)
    ax1.set_ylabel('Mass (kg)')
    ax1.set_title('Vehicle Mass and Propellant', fontweight='bold')

    ax2.plot(data.time, data.stage1_fuel, color='tab:blue', label='Stage 1')
    ax2.plot(data.time, data.stage2_fuel, color='tab:orange', label='Stage 2')
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Propellant (kg)')
    ax2.legend(loc='upper right')
    return _save(fig, output_dir, '03_mass_profile.png')


def plot_loads(data: TrajectoryData, output_dir: str) -> str:
    """G-force and dynamic pressure with max-Q marked."""
    fig, ax1 = plt.subplots()

    ax1.plot(data.time, data.g_force, color='tab:red', label='G-force')
    ax1.set_xlabel('Time (s)')
    ax1.set_ylabel('Load factor (g)', color='tab:red')

    ax2 = ax1.twinx()
    q_kpa = data.dynamic_pressure / 1000.0
    ax2.plot(data.time, q_kpa, color='tab:purple', label='Dynamic pressure')
    ax2.set_ylabel('Dynamic pressure (kPa)', color='tab:purple')
    ax2.grid(False)
    if len(q_kpa) > 0 and np.max(q_kpa) > 0.0:
        i_max = int(np.argmax(q_kpa))
        ax2.scatter([data.time[i_max]], [q_kpa[i_max]], c='purple', marker='v', s=60, zorder=5)
        ax2.annotate(f'Max Q {q_kpa[i_max]:.1f} kPa', (data.time[i_max], q_kpa[i_max]),
                     textcoords='offset points', xytext=(5, 5), fontsize=9)

    ax1.set_title('Structural Loads', fontweight='bold')
    return _save(fig, output_dir, '04_loads.png')


def plot_thermal_profile(data: TrajectoryData, output_dir: str) -> str:
    """Skin temperature and Mach number."""
    fig, ax1 = plt.subplots()

    ax1.plot(data.time, data.temperature, color='tab:orange', label='Skin temperature')
    ax1.set_xlabel('Time (s)')
    ax1.set_ylabel('Temperature (K)', color='tab:orange')

    ax2 = ax1.twinx()
    ax2.plot(data.time, data.mach, color='tab:cyan', linestyle='--', label='Mach')
    ax2.axhline(1.0, color='tab:cyan', linewidth=0.8, alpha=0.6)
    ax2.set_ylabel('Mach number', color='tab:cyan')
    ax2.grid(False)

    ax1.set_title('Thermal Environment', fontweight='bold')
    return _save(fig, output_dir, '05_thermal_profile.png')


def plot_trajectory(data: TrajectoryData, output_dir: str) -> str:
    """Altitude vs downrange."""
    fig, ax = plt.subplots()
    ax.plot(data.downrange, data.altitude, 'b-', linewidth=2)
    ax.scatter([data.downrange[0]], [data.altitude[0]], c='green', s=60, zorder=5, label='Start')
    ax.scatter([data.downrange[-1]], [data.altitude[-1]], c='red', s=60, zorder=5, label='End')
    ax.set_xlabel('Downrange (km)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Trajectory', fontweight='bold')
    ax.legend(loc='best')
    return _save(fig, output_dir, '06_trajectory.png')


def plot_guidance(data: TrajectoryData, output_dir: str) -> str:
    """Thrust angle and throttle history."""
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(10, 8))
    ax1.plot(data.time, data.thrust_angle, color='tab:green')
    ax1.set_ylabel('Thrust angle (deg)')
    ax1.set_title('Guidance Commands', fontweight='bold')
    ax2.step(data.time, data.throttle, where='post', color='tab:red')
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Throttle')
    ax2.set_ylim(-0.05, 1.05)
    return _save(fig, output_dir, '07_guidance.png')


def plot_phase_timeline(data: TrajectoryData, output_dir: str) -> str:
    """Flight phase as a step function of time."""
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.step(data.time, data.phase_index, where='post', color='k')
    used = sorted(set(int(i) for i in data.phase_index if i >= 0))
    ax.set_yticks(used)
    ax.set_yticklabels([PHASE_ORDER[i] for i in used])
    ax.set_xlabel('Time (s)')
    ax.set_title('Flight Phase Timeline', fontweight='bold')
    return _save(fig, output_dir, '08_phase_timeline.png')


def plot_predicted_apogee(data: TrajectoryData, output_dir: str) -> Optional[str]:
    """Predicted apogee over time; None when no prediction was recorded."""
    if data.prediction_time is None or len(data.prediction_time) == 0:
        return None
    fig, ax = plt.subplots()
    ax.plot(data.prediction_time, data.predicted_apogee, 'm.-', label='Predicted apogee')
    ax.plot(data.time, data.altitude, 'b-', alpha=0.5, label='Altitude')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Trajectory Prediction', fontweight='bold')
    ax.legend(loc='best')
    return _save(fig, output_dir, '09_predicted_apogee.png')


# =============================================================================
# Mission plots (ascent / orbiter / booster)
# =============================================================================

def _extract_series(log, field: str) -> np.ndarray:
    """Return telemetry field as numpy array, or empty array if unavailable."""
    values = getattr(log, field, None)
    if values is None:
        return np.array([])
    return np.array(values)


def _plot_mission_split(ascent_log, orbiter_log, booster_log, separation_time: float,
                        field: str, ylabel: str, title: str, output_dir: str, name: str) -> str:
    fig, ax = plt.subplots(figsize=(11, 6))
    segments = (
        (ascent_log, 'tab:blue', 'Stacked Ascent'),
        (orbiter_log, 'tab:green', 'Orbiter (S2)'),
        (booster_log, 'tab:red', 'Booster (S1)'),
    )
    for log, color, label in segments:
        t = _extract_series(log, "time")
        if len(t) > 0:
            ax.plot(t, _extract_series(log, field), color=color, linewidth=2.0, label=label)

    if separation_time is not None:
        ax.axvline(separation_time, color='k', linestyle='--', alpha=0.8,
                   label=f'Stage Separation ({separation_time:.1f}s)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel(ylabel)
    ax.set_title(title, fontweight='bold')
    ax.legend(loc='best')
    return _save(fig, output_dir, name)


def plot_booster_landing_zoom(booster_log, output_dir: str, window_s: float = 60.0) -> Optional[str]:
    """Final seconds of the booster descent: altitude, vertical speed, throttle."""
    t = _extract_series(booster_log, "time")
    if len(t) == 0:
        return None
    mask = t >= t[-1] - window_s
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(10, 8))
    ax1.plot(t[mask], _extract_series(booster_log, "altitude")[mask] * 1000.0, 'b-')
    ax1.set_ylabel('Altitude (m)')
    ax1.set_title('Booster Landing', fontweight='bold')
    ax2.plot(t[mask], _extract_series(booster_log, "vertical_velocity")[mask], 'r-',
             label='Vertical velocity')
    ax2.set_ylabel('Vertical velocity (m/s)')
    ax2.set_xlabel('Time (s)')
    ax3 = ax2.twinx()
    ax3.step(t[mask], _extract_series(booster_log, "throttle")[mask], where='post',
             color='tab:orange', alpha=0.7)
    ax3.set_ylabel('Throttle', color='tab:orange')
    ax3.grid(False)
    return _save(fig, output_dir, '22_booster_landing_zoom.png')


def plot_full_mission(result, output_dir: str = "plots") -> List[str]:
    """Mission-level plots for a FullMissionResult."""
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()

    paths = [
        _plot_mission_split(result.ascent_log, result.orbiter_log, result.booster_log,
                            result.separation_time, "altitude", 'Altitude (km)',
                            'Mission Altitude Timeline', output_dir, '20_mission_altitude.png'),
        _plot_mission_split(result.ascent_log, result.orbiter_log, result.booster_log,
                            result.separation_time, "velocity", 'Velocity (m/s)',
                            'Mission Velocity Timeline', output_dir, '21_mission_velocity.png'),
        plot_booster_landing_zoom(result.booster_log, output_dir),
    ]
    return [p for p in paths if p is not None]


# =============================================================================
# Main Generation Function
# =============================================================================

def generate_all_plots(log, output_dir: str = "plots") -> List[str]:
    """Generate all single-vehicle trajectory and telemetry plots.

    Args:
        log: SimulationLog from run_simulation
        output_dir: Directory to save plots (created if it doesn't exist)

    Returns:
        List of paths to saved plot files

    Example:
        >>> from tsr_sim.main import run_simulation
        >>> state, log, reason = run_simulation()
        >>> plot_files = generate_all_plots(log, "output/plots")
    """
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()
    data = extract_log_data(log)

    plotters = [
        plot_altitude_profile,
        plot_velocity_profile,
        plot_mass_profile,
        plot_loads,
        plot_thermal_profile,
        plot_trajectory,
        plot_guidance,
        plot_phase_timeline,
        plot_predicted_apogee,
    ]
    paths = [plotter(data, output_dir) for plotter in plotters]
    return [p for p in paths if p is not None]
