"""
TSR Flight Simulation - Aerothermal and Structural Load Model

First-order skin-temperature model: the skin relaxes toward the adiabatic
recovery temperature (plus engine heating while thrusting) at a rate that
scales with air density.
"""

from . import constants as C


def compute_mach(speed: float, speed_of_sound: float) -> float:
    """Mach number; zero when the speed of sound is undefined."""
    if speed_of_sound <= 0.0:
        return 0.0
    return speed / speed_of_sound


def recovery_temperature(ambient_temperature: float, mach: float) -> float:
    """
    Adiabatic wall (recovery) temperature.

        T_rec = T_amb * (1 + 0.17 * M^2)
    """
    return ambient_temperature * (1.0 + C.RECOVERY_FACTOR * mach * mach)


def heat_transfer_rate(density: float) -> float:
    """Relaxation rate k = 0.05 * rho/rho0 + 0.001 (1/s)."""
    return C.THERMAL_RATE_DENSITY * (density / C.RHO_0) + C.THERMAL_RATE_BASE


def update_skin_temperature(temperature: float, ambient_temperature: float, mach: float,
                            density: float, thrusting: bool, dt: float) -> float:
    """
    Advance the skin temperature by one step.

    Args:
        temperature: Current skin temperature (K)
        ambient_temperature: Local static air temperature (K)
        mach: Current Mach number
        density: Local air density (kg/m^3)
        thrusting: Engines firing (adds ENGINE_HEAT to the target)
        dt: Time step (s)

    Returns:
        New skin temperature (K)
    """
    target = recovery_temperature(ambient_temperature, mach)
    if thrusting:
        target += C.ENGINE_HEAT
    k = heat_transfer_rate(density)
    return temperature + (target - temperature) * k * dt


def compute_g_force(acceleration: float) -> float:
    """Acceleration magnitude in standard g."""
    return abs(acceleration) / C.G0


def compute_structural_load(g_force: float) -> float:
    """Load as a percentage of the structural g limit."""
    return g_force / C.MAX_STRUCTURAL_LOAD * 100.0
