"""
TSR Flight Simulation - Configuration

This module provides the vehicle description (RocketConfig, StageConfig) and
a SimulationConfig dataclass for dependency injection, allowing different
simulation parameters to be passed without modifying global constants.

All configs are frozen. Create variants via dataclasses.replace().
"""

from dataclasses import dataclass
from typing import Any, Mapping

from . import constants as C


class ConfigError(ValueError):
    """Raised when a vehicle or simulation configuration is inconsistent."""
    pass


@dataclass(frozen=True)
class StageConfig:
    """
    One propulsive stage.

    Attributes:
        fuel_mass: Loaded propellant (kg)
        dry_mass: Structure and engines (kg)
        thrust: Full-throttle thrust (N)
        burn_rate: Full-throttle propellant flow (kg/s)
        propellant_type: Key into constants.PROPELLANT_TYPES
        isp_sea_level: Catalog sea-level specific impulse (s)
        isp_vacuum: Catalog vacuum specific impulse (s)
        engine_count: Number of engines on the stage
    """
    fuel_mass: float
    dry_mass: float
    thrust: float
    burn_rate: float
    propellant_type: str = C.DEFAULT_PROPELLANT
    isp_sea_level: float = 311.0
    isp_vacuum: float = 353.0
    engine_count: int = 1

    def __post_init__(self):
        for name in ("fuel_mass", "dry_mass", "thrust", "burn_rate"):
            if getattr(self, name) < 0.0:
                raise ConfigError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.thrust > 0.0 and self.burn_rate <= 0.0:
            raise ConfigError("burn_rate must be positive for a stage that produces thrust")
        if self.propellant_type not in C.PROPELLANT_TYPES:
            raise ConfigError(
                f"Unknown propellant '{self.propellant_type}', "
                f"expected one of {sorted(C.PROPELLANT_TYPES)}"
            )
        if self.engine_count < 1:
            raise ConfigError(f"engine_count must be at least 1, got {self.engine_count}")

    @property
    def exhaust_velocity(self) -> float:
        """Effective exhaust velocity thrust / mdot (m/s)."""
        if self.burn_rate <= 0.0:
            return 0.0
        return self.thrust / self.burn_rate

    @property
    def effective_isp(self) -> float:
        """Specific impulse implied by thrust and burn rate (s)."""
        return self.exhaust_velocity / C.G0

    @property
    def burn_time(self) -> float:
        """Full-throttle burn duration (s)."""
        if self.burn_rate <= 0.0:
            return 0.0
        return self.fuel_mass / self.burn_rate

    @property
    def wet_mass(self) -> float:
        return self.dry_mass + self.fuel_mass


def create_stage(fuel_mass: float, dry_mass: float, thrust: float, burn_rate: float,
                 propellant_type: str = C.DEFAULT_PROPELLANT,
                 engine_count: int = 1) -> StageConfig:
    """Build a stage whose catalog Isp figures come from the propellant table."""
    props = C.PROPELLANT_TYPES.get(propellant_type)
    if props is None:
        raise ConfigError(f"Unknown propellant '{propellant_type}'")
    return StageConfig(
        fuel_mass=fuel_mass,
        dry_mass=dry_mass,
        thrust=thrust,
        burn_rate=burn_rate,
        propellant_type=propellant_type,
        isp_sea_level=props["isp_sea_level"],
        isp_vacuum=props["isp_vacuum"],
        engine_count=engine_count,
    )


@dataclass(frozen=True)
class RocketConfig:
    """Two-stage vehicle. Immutable for the duration of a run."""
    stage1: StageConfig
    stage2: StageConfig
    drag_coefficient: float = C.DRAG_COEFFICIENT
    payload_mass: float = C.PAYLOAD_MASS
    name: str = C.DEFAULT_ROCKET_NAME

    def __post_init__(self):
        if self.drag_coefficient < 0.0:
            raise ConfigError(f"drag_coefficient must be non-negative, got {self.drag_coefficient}")
        if self.payload_mass < 0.0:
            raise ConfigError(f"payload_mass must be non-negative, got {self.payload_mass}")

    def stage(self, number: int) -> StageConfig:
        """Return stage 1 or 2."""
        if number == 1:
            return self.stage1
        if number == 2:
            return self.stage2
        raise ConfigError(f"Stage number must be 1 or 2, got {number}")

    @property
    def liftoff_mass(self) -> float:
        return self.stage1.wet_mass + self.stage2.wet_mass + self.payload_mass

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RocketConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON).

        Missing keys fall back to the default rocket. Stage mappings accept
        the StageConfig field names.
        """
        default = create_default_rocket()
        try:
            stage1 = _stage_from_dict(data.get("stage1", {}), default.stage1)
            stage2 = _stage_from_dict(data.get("stage2", {}), default.stage2)
            return cls(
                stage1=stage1,
                stage2=stage2,
                drag_coefficient=float(data.get("drag_coefficient", default.drag_coefficient)),
                payload_mass=float(data.get("payload_mass", default.payload_mass)),
                name=str(data.get("name", default.name)),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid rocket configuration: {exc}") from exc


def _stage_from_dict(data: Mapping[str, Any], default: StageConfig) -> StageConfig:
    propellant = str(data.get("propellant_type", default.propellant_type))
    catalog = C.PROPELLANT_TYPES.get(propellant, {})
    return StageConfig(
        fuel_mass=float(data.get("fuel_mass", default.fuel_mass)),
        dry_mass=float(data.get("dry_mass", default.dry_mass)),
        thrust=float(data.get("thrust", default.thrust)),
        burn_rate=float(data.get("burn_rate", default.burn_rate)),
        propellant_type=propellant,
        isp_sea_level=float(data.get("isp_sea_level", catalog.get("isp_sea_level", default.isp_sea_level))),
        isp_vacuum=float(data.get("isp_vacuum", catalog.get("isp_vacuum", default.isp_vacuum))),
        engine_count=int(data.get("engine_count", default.engine_count)),
    )


def create_default_rocket() -> RocketConfig:
    """Default two-stage kerosene vehicle."""
    return RocketConfig(
        stage1=create_stage(C.STAGE1_FUEL_MASS, C.STAGE1_DRY_MASS, C.STAGE1_THRUST,
                            C.STAGE1_BURN_RATE, engine_count=C.STAGE1_ENGINE_COUNT),
        stage2=create_stage(C.STAGE2_FUEL_MASS, C.STAGE2_DRY_MASS, C.STAGE2_THRUST,
                            C.STAGE2_BURN_RATE, engine_count=C.STAGE2_ENGINE_COUNT),
    )


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for simulation parameters.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Simulation timing
      2. Staging
      3. Ascent guidance
      4. Booster recovery
      5. Physics toggles
      6. Prediction
      7. Misc
    """

    # ── 1. Simulation timing ─────────────────────────────────────────────
    dt: float = C.DT
    max_time: float = C.MAX_TIME
    startup_grace_period: float = C.STARTUP_GRACE_PERIOD

    # ── 2. Staging ───────────────────────────────────────────────────────
    separation_impulse: float = C.SEPARATION_IMPULSE
    staging_dwell_time: float = C.STAGING_DWELL_TIME
    reference_area: float = C.REFERENCE_AREA

    # ── 3. Ascent guidance ───────────────────────────────────────────────
    gravity_turn_start_altitude: float = C.GRAVITY_TURN_START_ALTITUDE
    gravity_turn_mid_altitude: float = C.GRAVITY_TURN_MID_ALTITUDE
    gravity_turn_mid_angle: float = C.GRAVITY_TURN_MID_ANGLE
    gravity_turn_end_altitude: float = C.GRAVITY_TURN_END_ALTITUDE
    gravity_turn_max_angle: float = C.GRAVITY_TURN_MAX_ANGLE
    max_pitch_step_deg: float = C.MAX_PITCH_STEP

    # ── 4. Booster recovery ──────────────────────────────────────────────
    # Landing pad offset measured along the ground track from the launch site.
    landing_target: float = 0.0
    # Stage-1 propellant held back from the ascent burn for the booster.
    booster_landing_reserve_kg: float = 0.0
    boostback_burn_duration: float = C.BOOSTBACK_BURN_DURATION
    booster_boostback_budget_kg: float = float("inf")
    reentry_burn_end_altitude: float = C.REENTRY_BURN_END_ALTITUDE
    landing_kp: float = C.LANDING_KP
    landing_kd: float = C.LANDING_KD
    landing_descent_rate_gain: float = C.LANDING_DESCENT_RATE_GAIN
    min_descent_rate: float = C.MIN_DESCENT_RATE

    # ── 5. Physics toggles ───────────────────────────────────────────────
    # Centripetal/Coriolis terms of the planar polar equations of motion.
    # With this off the downrange channel is a flat-Earth axis.
    enable_curvature: bool = True

    # ── 6. Prediction ────────────────────────────────────────────────────
    prediction_step: float = C.PREDICTION_STEP
    prediction_horizon: float = C.PREDICTION_HORIZON
    prediction_interval: int = C.PREDICTION_INTERVAL

    # ── 7. Misc ──────────────────────────────────────────────────────────
    stop_on_orbit: bool = False
    validate_states: bool = False
    verbose: bool = True

    def __post_init__(self):
        if self.dt <= 0.0:
            raise ConfigError(f"dt must be positive, got {self.dt}")
        if self.prediction_step <= 0.0:
            raise ConfigError(f"prediction_step must be positive, got {self.prediction_step}")
        if self.booster_landing_reserve_kg < 0.0:
            raise ConfigError("booster_landing_reserve_kg must be non-negative")
        if self.gravity_turn_mid_altitude <= self.gravity_turn_start_altitude:
            raise ConfigError("gravity_turn_mid_altitude must exceed gravity_turn_start_altitude")


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(dt: float = 0.05, max_time: float = 10.0,
                       **overrides) -> SimulationConfig:
    """Create a fast config suitable for testing.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(dt=dt, max_time=max_time, verbose=False)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
