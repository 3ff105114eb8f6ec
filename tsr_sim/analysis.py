"""
TSR Flight Simulation - Mission Statistics and Remote Analysis

Summary figures for a finished flight, and the boundary to an external
text-generation service that writes the mission debrief and design tips.

The service is opaque: anything with an ``async generate(prompt) -> str``
method works. A failing or silent service never reaches the simulation;
it is replaced by a fixed fallback string.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Protocol

from .config import RocketConfig
from .mass import compute_delta_v, compute_thrust_to_weight
from .state import SimulationState, display_phase

logger = logging.getLogger(__name__)

ANALYSIS_OFFLINE = "Mission Control AI offline."
ANALYSIS_UNAVAILABLE = "Analysis unavailable."
ADVICE_OFFLINE = "Advice module offline."
ADVICE_UNAVAILABLE = "No advice available."


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


@dataclass(frozen=True)
class MissionStatistics:
    """Figures handed to the debrief."""
    rocket_name: str
    final_phase: str
    flight_time: float
    max_altitude: float
    max_velocity: float
    max_g_force: float
    max_dynamic_pressure: float
    max_temperature: float
    apogee: float
    perigee: float
    eccentricity: float
    reached_orbit: bool
    delta_v_expended: float
    design_delta_v: float
    liftoff_twr: float
    recovery_percentage: float


def compute_mission_statistics(rocket: RocketConfig, state: SimulationState) -> MissionStatistics:
    """
    Collect the headline numbers of a flight.

    Args:
        rocket: Vehicle flown
        state: Final state of the run

    Returns:
        MissionStatistics
    """
    payload = rocket.payload_mass
    s1, s2 = rocket.stage1, rocket.stage2
    upper_wet = s2.wet_mass + payload
    design_delta_v = (
        compute_delta_v(s1.wet_mass + upper_wet, s1.dry_mass + upper_wet, s1.exhaust_velocity)
        + compute_delta_v(upper_wet, s2.dry_mass + payload, s2.exhaust_velocity)
    )
    return MissionStatistics(
        rocket_name=rocket.name,
        final_phase=display_phase(state).label,
        flight_time=state.time,
        max_altitude=state.max_altitude,
        max_velocity=state.max_velocity,
        max_g_force=state.max_g_force,
        max_dynamic_pressure=state.max_dynamic_pressure,
        max_temperature=state.max_temperature,
        apogee=state.apogee,
        perigee=state.perigee,
        eccentricity=state.eccentricity,
        reached_orbit=state.is_orbiting,
        delta_v_expended=state.delta_v_expended,
        design_delta_v=design_delta_v,
        liftoff_twr=compute_thrust_to_weight(rocket),
        recovery_percentage=state.recovery_percentage,
    )


def build_analysis_prompt(rocket: RocketConfig, stats: MissionStatistics) -> str:
    return (
        "Act as a senior aerospace engineer. Analyze the following 2-stage rocket "
        "launch simulation.\n\n"
        f"Vehicle: {rocket.name}\n"
        "Stage 1 (Booster):\n"
        f"- Thrust: {rocket.stage1.thrust:.0f} N\n"
        f"- Fuel: {rocket.stage1.fuel_mass:.0f} kg\n"
        "Stage 2 (Upper):\n"
        f"- Thrust: {rocket.stage2.thrust:.0f} N\n"
        f"- Fuel: {rocket.stage2.fuel_mass:.0f} kg\n\n"
        "Outcomes:\n"
        f"- Max Alt: {stats.max_altitude:.0f} m\n"
        f"- Max Vel: {stats.max_velocity:.0f} m/s\n"
        f"- Max G: {stats.max_g_force:.1f} g\n"
        f"- Apogee / Perigee: {stats.apogee:.0f} m / {stats.perigee:.0f} m\n"
        f"- Delta-v used: {stats.delta_v_expended:.0f} of {stats.design_delta_v:.0f} m/s\n"
        f"- Final Status: {stats.final_phase}\n\n"
        "Provide:\n"
        "1. Flight Summary.\n"
        "2. Stage separation efficiency comment.\n"
        "3. Tips to reach higher orbit.\n\n"
        "Keep it under 150 words."
    )


def build_advice_prompt(rocket: RocketConfig, query: str) -> str:
    return (
        f'User Query: "{query}"\n\n'
        "Rocket Specs:\n"
        f"- S1 Thrust: {rocket.stage1.thrust:.0f} N\n"
        f"- S2 Thrust: {rocket.stage2.thrust:.0f} N\n"
        f"- Liftoff TWR: {compute_thrust_to_weight(rocket):.2f}\n\n"
        "Provide a short physics tip (max 2 sentences)."
    )


async def analyze_mission(client: TextGenerator, rocket: RocketConfig,
                          final_state: SimulationState,
                          stats: Optional[MissionStatistics] = None) -> str:
    """
    Ask the text service for a mission debrief.

    Returns:
        The service text, or a fallback string when the reply is empty or
        the call fails.
    """
    if stats is None:
        stats = compute_mission_statistics(rocket, final_state)
    try:
        text = await client.generate(build_analysis_prompt(rocket, stats))
    except Exception as e:
        logger.error(f"Mission analysis failed: {e}")
        return ANALYSIS_OFFLINE
    if not text:
        logger.warning("Mission analysis returned no text")
        return ANALYSIS_UNAVAILABLE
    return text


async def get_design_advice(client: TextGenerator, rocket: RocketConfig,
                            query: str = "How can I improve this design?") -> str:
    """Short design tip for the current vehicle, or a fallback string."""
    try:
        text = await client.generate(build_advice_prompt(rocket, query))
    except Exception as e:
        logger.error(f"Design advice failed: {e}")
        return ADVICE_OFFLINE
    if not text:
        logger.warning("Design advice returned no text")
        return ADVICE_UNAVAILABLE
    return text
