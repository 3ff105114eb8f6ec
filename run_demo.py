"""Demo script: run a full mission and show booster + orbiter tracking."""
import numpy as np

from tsr_sim.config import SimulationConfig
from tsr_sim.main import run_full_mission


def print_track(title, log, final_state, reason):
    print(f"\n===== {title} TRACKING DETAILS =====")
    if len(log) == 0:
        print("No telemetry recorded")
        return
    times = np.array(log.time)
    alts = np.array(log.altitude)
    vels = np.array(log.velocity)
    masses = np.array(log.mass)
    phases = log.phase_name
    print(f"Log entries: {len(times)}")
    print(f"Time range: {times[0]:.1f}s - {times[-1]:.1f}s")
    print(f"Peak altitude: {np.max(alts):.1f} km")
    print(f"Final altitude: {alts[-1]:.1f} km")
    print(f"Final velocity: {vels[-1]:.1f} m/s")
    print(f"Final mass: {masses[-1]:.1f} kg")
    print(f"Outcome: {reason}")
    if final_state.phase.is_terminal:
        print(f"Touchdown speed: {final_state.touchdown_speed:.2f} m/s | "
              f"Recovery: {final_state.recovery_percentage:.0f}%")
    print()
    print("Phase Timeline:")
    prev_phase = None
    for i in range(len(phases)):
        if phases[i] != prev_phase:
            print(f"  t={times[i]:8.1f}s | Alt={alts[i]:8.1f} km | "
                  f"V={vels[i]:8.1f} m/s | Phase: {phases[i]}")
            prev_phase = phases[i]


if __name__ == "__main__":
    config = SimulationConfig(dt=0.05, booster_landing_reserve_kg=1500.0)
    result = run_full_mission(config=config, verbose=True)
    print_track("BOOSTER", result.booster_log, result.booster_final_state, result.booster_reason)
    print_track("ORBITER", result.orbiter_log, result.orbiter_final_state, result.orbiter_reason)
