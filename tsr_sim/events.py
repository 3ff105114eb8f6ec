"""
TSR Flight Simulation - Flight Events

Mission-control callouts derived from consecutive states: phase changes,
altitude milestones, the sound barrier and load warnings.

Detection is pure (previous state, current state) -> events. Each event
carries a key; sinks use it to announce every event at most once per run.
A separated booster's keys carry the "booster-" prefix, so both vehicles
of a full mission can report the same event.
"""

from dataclasses import dataclass, replace
from enum import Enum
import logging
from typing import List, Protocol, Set

from . import constants as C
from .state import FlightPhase, SimulationState

logger = logging.getLogger(__name__)


class EventKind(Enum):
    PHASE = "phase"
    CALLOUT = "callout"
    WARNING = "warning"


@dataclass(frozen=True)
class FlightEvent:
    key: str
    kind: EventKind
    message: str
    time: float


class EventSink(Protocol):
    """Anything that accepts flight events (logger, audio, UI)."""

    def emit(self, event: FlightEvent) -> None:
        ...


# Phase entered -> (key, message)
PHASE_CALLOUTS = {
    FlightPhase.STAGING: ("staging", "Stage separation confirmed"),
    FlightPhase.BOOSTBACK: ("boostback", "Boostback burn initiated"),
    FlightPhase.RE_ENTRY: ("reentry", "Re-entry burn"),
    FlightPhase.LANDING: ("landing", "Landing burn"),
    FlightPhase.CRASHED: ("crashed", "Flight terminated"),
}

KARMAN_CALLOUT = ("karman", "Karman line. We are now in space")
MACH1_CALLOUT = ("mach1", "Mach 1. Supersonic")

# Events raised by a separated booster are keyed apart from the stack
BOOSTER_KEY_PREFIX = "booster-"


def _phase_events(previous: SimulationState, current: SimulationState) -> List[FlightEvent]:
    if current.phase is previous.phase:
        return []
    if current.phase is FlightPhase.LANDED:
        if current.touchdown_speed < C.LANDING_SUCCESS_SPEED:
            return [FlightEvent("landed-success", EventKind.PHASE, "Landing successful", current.time)]
        return [FlightEvent("landed-hard", EventKind.PHASE, "Hard landing detected", current.time)]
    callout = PHASE_CALLOUTS.get(current.phase)
    if callout is None:
        return []
    key, message = callout
    return [FlightEvent(key, EventKind.PHASE, message, current.time)]


def _crossed(previous_value: float, current_value: float, threshold: float) -> bool:
    """True when the value rises through threshold on this tick."""
    return previous_value <= threshold < current_value


def detect_events(previous: SimulationState, current: SimulationState) -> List[FlightEvent]:
    """
    Events raised by the transition previous -> current.

    Args:
        previous: State before the tick
        current: State after the tick

    Returns:
        Events in announcement order (phase, callouts, warnings)
    """
    events = _phase_events(previous, current)
    t = current.time

    for key, altitude, message in C.CALLOUT_ALTITUDES:
        if _crossed(previous.altitude, current.altitude, altitude):
            events.append(FlightEvent(key, EventKind.CALLOUT, message, t))
    if _crossed(previous.altitude, current.altitude, C.KARMAN_LINE):
        events.append(FlightEvent(KARMAN_CALLOUT[0], EventKind.CALLOUT, KARMAN_CALLOUT[1], t))
    if _crossed(previous.mach, current.mach, 1.0):
        events.append(FlightEvent(MACH1_CALLOUT[0], EventKind.CALLOUT, MACH1_CALLOUT[1], t))

    if current.grid_fins_deployed and not previous.grid_fins_deployed:
        events.append(FlightEvent("grid-fins", EventKind.CALLOUT, "Grid fins deployed", t))
    if current.legs_deployed and not previous.legs_deployed:
        events.append(FlightEvent("legs", EventKind.CALLOUT, "Landing legs deployed", t))

    if (current.dynamic_pressure >= C.MAX_Q_WARNING_MIN_PRESSURE
            and current.dynamic_pressure > current.max_dynamic_pressure * C.MAX_Q_WARNING_FRACTION):
        events.append(FlightEvent("maxq-warning", EventKind.WARNING, "Approaching Max Q", t))
    if current.g_force > C.STRUCTURAL_WARNING_G:
        events.append(FlightEvent("structural-warning", EventKind.WARNING,
                                  f"Structural load warning: {current.g_force:.1f} g", t))

    if current.is_booster:
        events = [replace(e, key=BOOSTER_KEY_PREFIX + e.key, message=f"Booster: {e.message}")
                  for e in events]
    return events


class RecordingEventSink:
    """Logs each event key once and keeps the announced events in order."""

    def __init__(self):
        self.events: List[FlightEvent] = []
        self._announced: Set[str] = set()

    def emit(self, event: FlightEvent) -> None:
        if event.key in self._announced:
            return
        self._announced.add(event.key)
        self.events.append(event)
        if event.kind is EventKind.WARNING:
            logger.warning(f"[t={event.time:.2f}s] {event.message}")
        else:
            logger.info(f"[t={event.time:.2f}s] {event.message}")

    @property
    def keys(self) -> List[str]:
        return [event.key for event in self.events]

    def reset(self):
        """Forget announced keys (new mission)."""
        self.events.clear()
        self._announced.clear()
