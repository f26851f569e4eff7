"""Internal constants shared across the library."""

import math

OVERPASS_URL = "https://overpass-api.de/api/interpreter"
USER_AGENT = "pydashcluster/0.1 (+https://github.com/pydashcluster/pydashcluster)"

# ------------------------------------------------------------------
# Motion fusion
# ------------------------------------------------------------------

STANDARD_GRAVITY = 9.80665  # m/s² per g
DEAD_BAND_G = 0.02
ALPHA_HIGH_PERFORMANCE = 0.15
ALPHA_STANDARD = 0.25
DELTA_V_HALF_LIFE_S = 2.0

# ------------------------------------------------------------------
# Unit conversions
# ------------------------------------------------------------------

METERS_TO_FEET = 3.28084
KPH_TO_MPH = 0.621371
MPS_TO_MPH = 2.23694
RAD_TO_DEG = 180.0 / math.pi

EARTH_RADIUS_M = 6_371_000.0


def low_pass_alpha(high_performance: bool) -> float:
    """Return the low-pass smoothing factor for the given performance mode."""
    return ALPHA_HIGH_PERFORMANCE if high_performance else ALPHA_STANDARD


def decay_factor(dt: float) -> float:
    """Multiplicative decay applied to the velocity integrator over *dt* seconds."""
    return 0.5 ** (dt / DELTA_V_HALF_LIFE_S)
