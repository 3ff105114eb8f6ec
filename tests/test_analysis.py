"""Tests for mission statistics and the text-service boundary."""
import asyncio

import pytest
from tsr_sim import analysis
from tsr_sim.config import create_default_rocket
from tsr_sim.state import FlightPhase, SimulationState


class FakeClient:
    def __init__(self, reply="Nominal flight."):
        self.reply = reply
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        return self.reply


class BrokenClient:
    async def generate(self, prompt):
        raise ConnectionError("service unreachable")


@pytest.fixture
def rocket():
    return create_default_rocket()


@pytest.fixture
def final_state():
    return SimulationState(
        time=420.0, phase=FlightPhase.COASTING, is_orbiting=True,
        max_altitude=250000.0, max_velocity=7800.0, max_g_force=3.1,
        apogee=260000.0, perigee=180000.0, eccentricity=0.006,
        delta_v_expended=8200.0,
    )


def test_mission_statistics(rocket, final_state):
    stats = analysis.compute_mission_statistics(rocket, final_state)
    assert stats.rocket_name == rocket.name
    assert stats.final_phase == "ORBITING"
    assert stats.reached_orbit is True
    assert stats.max_altitude == 250000.0
    assert stats.design_delta_v > stats.delta_v_expended * 0.5
    assert stats.liftoff_twr == pytest.approx(1.78, abs=0.01)


def test_analysis_prompt_mentions_figures(rocket, final_state):
    stats = analysis.compute_mission_statistics(rocket, final_state)
    prompt = analysis.build_analysis_prompt(rocket, stats)
    assert "250000 m" in prompt
    assert "ORBITING" in prompt
    assert rocket.name in prompt


def test_analyze_mission_returns_reply(rocket, final_state):
    client = FakeClient("Good flight.")
    text = asyncio.run(analysis.analyze_mission(client, rocket, final_state))
    assert text == "Good flight."
    assert len(client.prompts) == 1


def test_analyze_mission_offline(rocket, final_state):
    text = asyncio.run(analysis.analyze_mission(BrokenClient(), rocket, final_state))
    assert text == analysis.ANALYSIS_OFFLINE


def test_analyze_mission_empty_reply(rocket, final_state):
    text = asyncio.run(analysis.analyze_mission(FakeClient(""), rocket, final_state))
    assert text == analysis.ANALYSIS_UNAVAILABLE


def test_design_advice(rocket):
    client = FakeClient("Add thrust.")
    text = asyncio.run(analysis.get_design_advice(client, rocket, "More payload?"))
    assert text == "Add thrust."
    assert '"More payload?"' in client.prompts[0]


def test_design_advice_fallbacks(rocket):
    assert asyncio.run(analysis.get_design_advice(BrokenClient(), rocket)) == analysis.ADVICE_OFFLINE
    assert asyncio.run(analysis.get_design_advice(FakeClient(""), rocket)) == analysis.ADVICE_UNAVAILABLE
