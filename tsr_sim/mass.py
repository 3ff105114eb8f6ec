"""
TSR Flight Simulation - Stage mass and delta-v computations.
"""

import numpy as np

from . import constants as C
from .config import RocketConfig


def compute_vehicle_mass(active_stage: int, stage1_fuel: float, stage2_fuel: float,
                         rocket: RocketConfig, is_booster: bool = False) -> tuple:
    """
    Current and dry mass of the flying vehicle.

    Stage 1 carries stage 2 and the payload until separation. Stage 2
    carries only the payload. A separated booster carries only itself.

    Returns:
        (total_mass, dry_mass) in kg
    """
    s1 = rocket.stage1
    s2 = rocket.stage2
    stage1_fuel = max(0.0, stage1_fuel)
    stage2_fuel = max(0.0, stage2_fuel)

    if is_booster:
        dry = s1.dry_mass
        return dry + stage1_fuel, dry
    if active_stage == 1:
        dry = s1.dry_mass + s2.dry_mass + rocket.payload_mass
        return dry + stage1_fuel + stage2_fuel, dry
    dry = s2.dry_mass + rocket.payload_mass
    return dry + stage2_fuel, dry


def compute_delta_v(initial_mass: float, final_mass: float, exhaust_velocity: float) -> float:
    """Tsiolkovsky delta-v; zero for non-positive or non-decreasing masses."""
    if initial_mass <= 0.0 or final_mass <= 0.0 or final_mass >= initial_mass:
        return 0.0
    return float(exhaust_velocity * np.log(initial_mass / final_mass))


def compute_remaining_delta_v(active_stage: int, stage1_fuel: float, stage2_fuel: float,
                              rocket: RocketConfig, is_booster: bool = False) -> float:
    """
    Delta-v still available from unspent propellant.

    While stage 1 is active on the stacked vehicle the full stage-2
    potential (payload riding along) is added.
    """
    stage = rocket.stage(active_stage)
    fuel = max(0.0, stage1_fuel if active_stage == 1 else stage2_fuel)
    mass, _ = compute_vehicle_mass(active_stage, stage1_fuel, stage2_fuel, rocket, is_booster)
    delta_v = compute_delta_v(mass, mass - fuel, stage.exhaust_velocity)

    if active_stage == 1 and not is_booster:
        s2 = rocket.stage2
        upper_dry = s2.dry_mass + rocket.payload_mass
        delta_v += compute_delta_v(upper_dry + max(0.0, stage2_fuel), upper_dry, s2.exhaust_velocity)
    return delta_v


def compute_thrust_to_weight(rocket: RocketConfig, active_stage: int = 1,
                             stage1_fuel: float = None, stage2_fuel: float = None) -> float:
    """Sea-level thrust-to-weight ratio (full tanks unless fuel is given)."""
    if stage1_fuel is None:
        stage1_fuel = rocket.stage1.fuel_mass
    if stage2_fuel is None:
        stage2_fuel = rocket.stage2.fuel_mass
    mass, _ = compute_vehicle_mass(active_stage, stage1_fuel, stage2_fuel, rocket)
    if mass <= 0.0:
        return 0.0
    return rocket.stage(active_stage).thrust / (mass * C.G0)


def update_fuel(fuel: float, burn_rate: float, throttle: float, dt: float,
                floor: float = 0.0) -> tuple:
    """
    Euler update for one stage's propellant.

    Returns:
        (new_fuel, burned) with new_fuel never below floor
    """
    demand = burn_rate * float(np.clip(throttle, 0.0, 1.0)) * dt
    new_fuel = max(min(floor, fuel), fuel - demand)
    return new_fuel, max(0.0, fuel - new_fuel)


def usable_fuel(state_fuel: float, reserve: float = 0.0) -> float:
    """Propellant above a reserve (kg)."""
    return max(0.0, state_fuel - reserve)
