"""
TSR Flight Simulation - Physical Constants and Vehicle Parameters

This module defines the physical constants, Earth parameters, the layered
atmosphere table, default vehicle figures and guidance thresholds used
throughout the simulation.
"""

import numpy as np

# =============================================================================
# EARTH PARAMETERS
# =============================================================================

# Gravitational parameter (m^3/s^2)
MU_EARTH = 3.986004418e14

# Earth mean radius (m)
R_EARTH = 6.371e6

# Standard gravitational acceleration at sea level (m/s^2)
G0 = 9.80665

# Earth rotation rate (rad/s), used for launch azimuth estimates
EARTH_ROTATION_RATE = 7.2921159e-5

# Sidereal surface speed at the equator (m/s)
EQUATORIAL_SURFACE_SPEED = EARTH_ROTATION_RATE * R_EARTH

# =============================================================================
# ATMOSPHERE (layered ISA)
# =============================================================================

RHO_0 = 1.225  # Sea level density (kg/m^3)
ATM_T0 = 288.15  # Sea level temperature (K)
ATM_P0 = 101325.0  # Sea level pressure (Pa)
R_GAS = 287.05  # Specific gas constant for air (J/(kg K))
GAMMA = 1.4  # Ratio of specific heats
SPEED_OF_SOUND_SEA_LEVEL = 343.0  # m/s

# Layer table: (name, base altitude m, lapse rate K/m).
# Base temperatures and pressures are built from the lapse rates so the
# profile is continuous across layer boundaries.
ATMOSPHERE_LAYERS = (
    ("Troposphere", 0.0, -0.0065),
    ("Tropopause", 11000.0, 0.0),
    ("Stratosphere", 20000.0, 0.0010),
    ("Upper Stratosphere", 32000.0, 0.0028),
    ("Stratopause", 47000.0, 0.0),
    ("Mesosphere", 51000.0, -0.0028),
    ("Upper Mesosphere", 71000.0, -0.0020),
    ("Thermosphere", 84852.0, 0.0),
)

# Above this altitude the model returns hard vacuum
EXOSPHERE_BASE_ALTITUDE = 200000.0
EXOSPHERE_TEMPERATURE = 1000.0  # K (nominal, no thermodynamic meaning in vacuum)
EXOSPHERE_NAME = "Exosphere"

# =============================================================================
# REFERENCE ALTITUDES
# =============================================================================

KARMAN_LINE = 100000.0  # m
LEO_MIN_ALTITUDE = 200000.0  # m
GEO_ALTITUDE = 35786000.0  # m

# =============================================================================
# SIMULATION TIMING
# =============================================================================

DT = 0.05  # Integration time step (s)
MAX_TIME = 3000.0  # Maximum simulation time (s)
STARTUP_GRACE_PERIOD = 1.0  # s before ground contact counts as touchdown

# =============================================================================
# AERODYNAMICS
# =============================================================================

REFERENCE_AREA = 2.5  # Vehicle cross-section (m^2)

# =============================================================================
# STAGING
# =============================================================================

SEPARATION_IMPULSE = 15.0  # m/s added to vertical velocity at separation
STAGING_DWELL_TIME = 2.0  # s between separation and stage-2 ignition

# =============================================================================
# PROPELLANTS (catalog specific impulse, s)
# =============================================================================

PROPELLANT_TYPES = {
    "RP-1/LOX": {"isp_sea_level": 311.0, "isp_vacuum": 353.0},
    "LH2/LOX": {"isp_sea_level": 381.0, "isp_vacuum": 452.0},
    "Methane/LOX": {"isp_sea_level": 334.0, "isp_vacuum": 380.0},
}
DEFAULT_PROPELLANT = "RP-1/LOX"

# =============================================================================
# DEFAULT VEHICLE
# =============================================================================

STAGE1_FUEL_MASS = 8000.0  # kg
STAGE1_DRY_MASS = 2000.0  # kg
STAGE1_THRUST = 250000.0  # N
STAGE1_BURN_RATE = 80.0  # kg/s
STAGE1_ENGINE_COUNT = 9

STAGE2_FUEL_MASS = 3000.0  # kg
STAGE2_DRY_MASS = 800.0  # kg
STAGE2_THRUST = 60000.0  # N
STAGE2_BURN_RATE = 20.0  # kg/s
STAGE2_ENGINE_COUNT = 1

DRAG_COEFFICIENT = 0.75
PAYLOAD_MASS = 500.0  # kg
DEFAULT_ROCKET_NAME = "Falcon 9"

# =============================================================================
# ASCENT GUIDANCE (gravity-turn pitch program, degrees from vertical)
# =============================================================================

GRAVITY_TURN_START_ALTITUDE = 1000.0  # m, vertical rise below this
GRAVITY_TURN_MID_ALTITUDE = 10000.0  # m
GRAVITY_TURN_MID_ANGLE = 45.0  # deg at the mid altitude
GRAVITY_TURN_END_ALTITUDE = 40000.0  # m
GRAVITY_TURN_MAX_ANGLE = 70.0  # deg ceiling
MAX_PITCH_STEP = 0.5  # deg per tick while burning

# =============================================================================
# THERMAL / STRUCTURAL
# =============================================================================

INITIAL_TEMPERATURE = 288.0  # K
RECOVERY_FACTOR = 0.17  # T_rec = T_amb * (1 + 0.17 M^2)
ENGINE_HEAT = 50.0  # K added to the recovery temperature while thrusting
THERMAL_RATE_DENSITY = 0.05  # 1/s per unit sea-level density ratio
THERMAL_RATE_BASE = 0.001  # 1/s radiative floor
MAX_STRUCTURAL_LOAD = 4.0  # g at 100 % structural load

# =============================================================================
# TOUCHDOWN
# =============================================================================

SAFE_LANDING_SPEED = 10.0  # m/s; faster ground contact is a crash
LANDING_SUCCESS_SPEED = 5.0  # m/s for the "landed-success" callout

# =============================================================================
# BOOSTER RECOVERY (landing guidance windows)
# =============================================================================

BOOSTBACK_MIN_ALTITUDE = 60000.0  # m
BOOSTBACK_MAX_ALTITUDE = 80000.0  # m
BOOSTBACK_BURN_DURATION = 15.0  # s
REENTRY_MIN_ALTITUDE = 60000.0  # m
REENTRY_MAX_ALTITUDE = 75000.0  # m
REENTRY_TRIGGER_VELOCITY = -500.0  # m/s, must be falling faster than this
REENTRY_BURN_END_ALTITUDE = 50000.0  # m
GRID_FIN_DEPLOY_ALTITUDE = 70000.0  # m
LEG_DEPLOY_ALTITUDE = 1000.0  # m
LANDING_BURN_MIN_ALTITUDE = 100.0  # m
SUICIDE_BURN_MARGIN = 100.0  # m added to the stopping distance
SUICIDE_BURN_ITERATIONS = 3

BOOSTBACK_THROTTLE = 1.0
REENTRY_THROTTLE = 0.7
MIN_LANDING_THROTTLE = 0.1
MAX_LANDING_THROTTLE = 1.0

# Landing-burn throttle loop
LANDING_DESCENT_RATE_GAIN = 0.1  # target descent rate per metre of altitude (1/s)
MIN_DESCENT_RATE = 2.0  # m/s
LANDING_KP = 0.05  # throttle per m/s of descent-rate error
LANDING_KD = 0.02  # throttle per m/s^2 of downward acceleration

# Lateral landing guidance
LATERAL_DEADBAND = 50.0  # m
LATERAL_GAIN = 0.01  # deg per metre of offset
MAX_LATERAL_ANGLE = 10.0  # deg

# Crude drag allowance in the impact-time estimate
IMPACT_GRAVITY_FACTOR = 0.9

# =============================================================================
# ORBIT CHECKS
# =============================================================================

ORBIT_VELOCITY_MARGIN = 0.9  # fraction of circular velocity
MIN_STABLE_PERIGEE = KARMAN_LINE
ECCENTRICITY_TOLERANCE = 1e-8
DEFAULT_LAUNCH_LATITUDE = 28.5  # deg (Cape Canaveral)

# =============================================================================
# TRAJECTORY PREDICTION
# =============================================================================

PREDICTION_STEP = 0.5  # s
PREDICTION_HORIZON = 60.0  # s
PREDICTION_INTERVAL = 10  # ticks between predictions in the driver

# =============================================================================
# FLIGHT EVENT THRESHOLDS
# =============================================================================

CALLOUT_ALTITUDES = (
    ("10km", 10000.0, "Passing 10 kilometres"),
    ("50km", 50000.0, "Passing 50 kilometres"),
)
MAX_Q_WARNING_FRACTION = 0.9
MAX_Q_WARNING_MIN_PRESSURE = 10000.0  # Pa, no max-Q warning below this
STRUCTURAL_WARNING_G = 3.5

# =============================================================================
# NUMERICAL
# =============================================================================

ZERO_TOLERANCE = 1e-10
TWO_PI = 2.0 * np.pi
