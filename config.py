# config.py
import numpy as np
import logging

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Fundamental Physical Constants (used across different config sections)
AU_KM = 149597870.7  # Astronomical Unit in kilometers
SECONDS_PER_DAY = 86400.0
MS_PER_DAY = SECONDS_PER_DAY * 1000.0
JOULES_PER_MEGATON_TNT = 4.184e15
EARTH_SURFACE_GRAVITY_M_S2 = 9.81

# Reference epoch shared by every orbiting body (J2000.0, 2000-01-01T12:00:00Z), in Unix ms
J2000_EPOCH_MS = 946728000000.0


class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()` and by `ImpactScaling.validate()`
    when settings are invalid or inconsistent, e.g. blast coefficients that
    would not keep the overpressure rings ordered.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass


class SimulationConfig:
    """Centralized, hierarchical configuration for the orbit and impact cores.

    Parameters are grouped into nested static classes (`SimulationConfig.Orbit`,
    `SimulationConfig.Impact`, `SimulationConfig.Catalog`, ...). An instance named
    `config` is created at the end of this module and is shared through
    `from config import config`.

    The constructor invokes `validate()`, so a broken table is reported at import
    time instead of producing silently wrong orbits or damage estimates.

    Example Usage:
        >>> from config import config
        >>> print(f"Kepler tolerance: {config.Orbit.KEPLER_TOLERANCE}")
        >>> print(f"1 psi blast coefficient: {config.Impact.BLAST_1PSI_KM}")
    """

    # --- Orbit Configuration ---
    class Orbit:
        """Configuration for the Kepler solver and the orbital position calculator.

        Attributes:
            KEPLER_TOLERANCE (float): Newton-Raphson stops once |dE| falls below this (radians).
            KEPLER_MAX_ITERATIONS (int): Hard cap on Newton-Raphson iterations.
            HIGH_ECCENTRICITY_SEED_THRESHOLD (float): At or above this eccentricity the solver
                                                      seeds with E0 = +/-pi (sign of M) instead of E0 = M.
            MAX_EFFECTIVE_ECCENTRICITY (float): Eccentricities are clamped to this value before
                                                reaching the solver.
            TRAIL_STEP_DAYS (float): Spacing between re-evaluated trail samples.
            TRAIL_MAX_DAYS (float): Longest trail drawn behind a body.
            TRAIL_PERIOD_FRACTION (float): Trail length as a fraction of the orbital period,
                                           capped by `TRAIL_MAX_DAYS`.
            OUTLINE_SAMPLES (int): Samples used when drawing a full orbit ellipse.
        """
        KEPLER_TOLERANCE = 1e-6
        KEPLER_MAX_ITERATIONS = 30
        HIGH_ECCENTRICITY_SEED_THRESHOLD = 0.8
        MAX_EFFECTIVE_ECCENTRICITY = 0.95

        TRAIL_STEP_DAYS = 1.0
        TRAIL_MAX_DAYS = 90.0
        TRAIL_PERIOD_FRACTION = 0.8
        OUTLINE_SAMPLES = 720

    # --- Impact Configuration ---
    class Impact:
        """Empirical scaling table for the impact physics engine.

        Every law is a power law of yield (megatons), of kinetic energy, or of the
        impactor diameter and velocity. Only the shape of each law is fixed; the
        coefficients below are tunable and are copied into `impact.ImpactScaling`.

        Attributes:
            ANGLE_ENERGY_COUPLING (bool): If True, kinetic energy is multiplied by sin(angle).
            MIN_IMPACT_ANGLE_DEG (float): Lower clamp for the impact angle.
            MAX_IMPACT_ANGLE_DEG (float): Upper clamp for the impact angle.
            TARGET_DENSITY_LAND_KG_M3 (float): Density of the rock target used by the crater law.
            CRATER_COEFFICIENT (float): Prefactor of the transient crater law (metres out).
            CRATER_DENSITY_EXPONENT (float): Exponent applied to (impactor / target) density.
            CRATER_DIAMETER_EXPONENT (float): Exponent applied to impactor diameter (m).
            CRATER_VELOCITY_EXPONENT (float): Exponent applied to impact velocity (m/s).
            CRATER_GRAVITY_EXPONENT (float): Exponent applied to surface gravity (m/s^2).
            CRATER_ANGLE_EXPONENT (float): Exponent applied to sin(impact angle).
            CRATER_DEPTH_RATIO (float): Crater depth as a fraction of its diameter.
            EJECTA_COEFFICIENT_M_PER_KM (float): Rim ejecta thickness per km of crater diameter.
            EJECTA_MIN_THICKNESS_M (float): Floor for the rim ejecta thickness on land.
            FIREBALL_COEFFICIENT_KM (float): Fireball radius for a 1 Mt yield.
            FIREBALL_EXPONENT (float): Fireball radius yield exponent.
            BLAST_20PSI_KM (float): Severe damage (20 psi) radius for a 1 Mt yield.
            BLAST_5PSI_KM (float): Moderate damage (5 psi) radius for a 1 Mt yield.
            BLAST_1PSI_KM (float): Light damage (1 psi) radius for a 1 Mt yield.
            BLAST_EXPONENT (float): Cube-root overpressure scaling exponent.
            THERMAL_COEFFICIENT_KM (float): Third-degree burn radius for a 1 Mt yield.
            THERMAL_EXPONENT (float): Thermal radius yield exponent.
            SEISMIC_LOG_SLOPE (float): Slope of magnitude against log10(energy in J).
            SEISMIC_LOG_OFFSET (float): Offset of the seismic magnitude law.
            TSUNAMI_THRESHOLD_MT (float): Ocean impacts above this yield raise a tsunami.
            TSUNAMI_COEFFICIENT_M (float): Wave height for a 1 Mt yield.
            TSUNAMI_EXPONENT (float): Wave height yield exponent (literature range 0.25..0.5).
            TSUNAMI_SEVERITY_THRESHOLDS_M (List[Tuple[float, str]]): Wave heights at which the
                                                                     severity label escalates.
            MATERIAL_DENSITIES_KG_M3 (Dict[str, float]): Bulk density per impactor material.
            IMPACTOR_PRESETS (Dict[str, Dict]): Named historical/candidate impactors.
        """
        ANGLE_ENERGY_COUPLING = False
        MIN_IMPACT_ANGLE_DEG = 5.0
        MAX_IMPACT_ANGLE_DEG = 90.0

        TARGET_DENSITY_LAND_KG_M3 = 2700.0
        CRATER_COEFFICIENT = 1.161
        CRATER_DENSITY_EXPONENT = 1.0 / 3.0
        CRATER_DIAMETER_EXPONENT = 0.78
        CRATER_VELOCITY_EXPONENT = 0.44
        CRATER_GRAVITY_EXPONENT = -0.22
        CRATER_ANGLE_EXPONENT = 1.0 / 3.0
        CRATER_DEPTH_RATIO = 1.0 / 3.0
        EJECTA_COEFFICIENT_M_PER_KM = 10.0
        EJECTA_MIN_THICKNESS_M = 1.0

        FIREBALL_COEFFICIENT_KM = 1.1
        FIREBALL_EXPONENT = 0.33

        BLAST_20PSI_KM = 3.2
        BLAST_5PSI_KM = 7.4
        BLAST_1PSI_KM = 12.0
        BLAST_EXPONENT = 1.0 / 3.0

        THERMAL_COEFFICIENT_KM = 13.0
        THERMAL_EXPONENT = 0.41

        SEISMIC_LOG_SLOPE = 0.67
        SEISMIC_LOG_OFFSET = -5.87

        TSUNAMI_THRESHOLD_MT = 1.0
        TSUNAMI_COEFFICIENT_M = 10.0
        TSUNAMI_EXPONENT = 0.25
        TSUNAMI_SEVERITY_THRESHOLDS_M = [(30.0, 'extreme'), (10.0, 'high'), (3.0, 'moderate'), (0.0, 'low')]

        MATERIAL_DENSITIES_KG_M3 = {
            'IRON': 8000.0,
            'STONE': 3500.0,
            'CARBON': 2200.0,
        }

        IMPACTOR_PRESETS = {
            'apophis': {'label': 'Apophis (99942)', 'diameter_m': 370.0, 'density_kg_m3': 3000.0,
                        'velocity_km_s': 7.4, 'impact_angle_deg': 45.0},
            'bennu': {'label': 'Bennu (101955)', 'diameter_m': 490.0, 'density_kg_m3': 1190.0,
                      'velocity_km_s': 12.8, 'impact_angle_deg': 45.0},
            'chelyabinsk': {'label': 'Chelyabinsk (2013)', 'diameter_m': 17.0, 'density_kg_m3': 3300.0,
                            'velocity_km_s': 19.0, 'impact_angle_deg': 20.0},
        }

    # --- Orbital Catalog ---
    class Catalog:
        """Built-in bodies tracked by the orrery.

        Attributes:
            PLANET_DATA (Dict[str, Dict]): Inner planets keyed by name.
            PRESET_ASTEROIDS (Dict[str, Dict]): Well-known near-Earth and main-belt asteroids.
            CUSTOM_MIN_A_AU (float): Smallest semi-major axis accepted from the custom body form.
            CUSTOM_MIN_PERIOD_DAYS (float): Shortest period accepted from the custom body form.

        Each entry holds `a_au`, `e`, `period_days`, `inclination_deg`,
        `arg_periapsis_deg`, `long_asc_node_deg` and an RGB `color`.
        """
        PLANET_DATA = {
            'Mercury': {'a_au': 0.3871, 'e': 0.2056, 'period_days': 87.969, 'color': (192, 132, 252),
                        'inclination_deg': 7.0, 'arg_periapsis_deg': 29.1, 'long_asc_node_deg': 48.3},
            'Venus': {'a_au': 0.7233, 'e': 0.0068, 'period_days': 224.701, 'color': (251, 191, 36),
                      'inclination_deg': 3.4, 'arg_periapsis_deg': 54.9, 'long_asc_node_deg': 76.7},
            'Earth': {'a_au': 1.0, 'e': 0.0167, 'period_days': 365.256, 'color': (34, 197, 94),
                      'inclination_deg': 0.0, 'arg_periapsis_deg': 114.2, 'long_asc_node_deg': -11.3},
            'Mars': {'a_au': 1.5237, 'e': 0.0934, 'period_days': 686.98, 'color': (239, 68, 68),
                     'inclination_deg': 1.85, 'arg_periapsis_deg': 286.5, 'long_asc_node_deg': 49.6},
        }

        PRESET_ASTEROIDS = {
            'Apophis': {'a_au': 0.922, 'e': 0.191, 'period_days': 323.6, 'color': (249, 115, 22),
                        'inclination_deg': 3.3, 'arg_periapsis_deg': 35.0, 'long_asc_node_deg': 250.0},
            'Itokawa': {'a_au': 1.324, 'e': 0.28, 'period_days': 556.5, 'color': (156, 163, 175),
                        'inclination_deg': 1.6, 'arg_periapsis_deg': 120.0, 'long_asc_node_deg': 69.0},
            'Bennu': {'a_au': 1.126, 'e': 0.203, 'period_days': 436.5, 'color': (253, 224, 71),
                      'inclination_deg': 6.0, 'arg_periapsis_deg': -20.0, 'long_asc_node_deg': 2.0},
            'Ryugu': {'a_au': 1.189, 'e': 0.19, 'period_days': 473.9, 'color': (96, 165, 250),
                      'inclination_deg': 5.9, 'arg_periapsis_deg': 60.0, 'long_asc_node_deg': 251.0},
            'Eros': {'a_au': 1.458, 'e': 0.223, 'period_days': 643.2, 'color': (251, 113, 133),
                     'inclination_deg': 10.8, 'arg_periapsis_deg': 15.0, 'long_asc_node_deg': 305.0},
            'Didymos': {'a_au': 1.644, 'e': 0.38, 'period_days': 771.0, 'color': (52, 211, 153),
                        'inclination_deg': 3.4, 'arg_periapsis_deg': 140.0, 'long_asc_node_deg': 73.0},
            '16 Psyche': {'a_au': 2.92, 'e': 0.14, 'period_days': 1825.0, 'color': (34, 211, 238),
                          'inclination_deg': 3.1, 'arg_periapsis_deg': 75.0, 'long_asc_node_deg': 150.0},
        }

        CUSTOM_MIN_A_AU = 0.2
        CUSTOM_MIN_PERIOD_DAYS = 10.0

    # --- Asteroid Belt ---
    class Belt:
        """Background main-belt point cloud.

        Attributes:
            COUNT (int): Number of points generated.
            SEED (int): Seed for the belt's random generator.
            INNER_AU (float): Inner edge of the belt.
            OUTER_AU (float): Outer edge of the belt.
            GAP_INNER_AU (float): Inner edge of the empty 3:1 Kirkwood gap.
            GAP_OUTER_AU (float): Outer edge of the gap.
            MAX_INCLINATION_RAD (float): Largest inclination given to a point.
        """
        COUNT = 4000
        SEED = 9
        INNER_AU = 2.2
        OUTER_AU = 3.3
        GAP_INNER_AU = 2.48
        GAP_OUTER_AU = 2.54
        MAX_INCLINATION_RAD = 0.25

    # --- View Configuration ---
    class View:
        """Configuration for the orthographic view.

        Attributes:
            DEFAULT_TILT_DEG (float): Initial viewing tilt about the horizontal axis.
            DEFAULT_ZOOM_PX_PER_AU (float): Initial zoom level.
            MIN_ZOOM_PX_PER_AU (float): Lower zoom clamp.
            MAX_ZOOM_PX_PER_AU (float): Upper zoom clamp.
        """
        DEFAULT_TILT_DEG = 20.0
        DEFAULT_ZOOM_PX_PER_AU = 150.0
        MIN_ZOOM_PX_PER_AU = 40.0
        MAX_ZOOM_PX_PER_AU = 700.0

    # --- Clock Configuration ---
    class Clock:
        """Configuration for the virtual simulation clock.

        Attributes:
            DEFAULT_RATE (float): Simulated seconds per real second (one day per second).
            MIN_RATE (float): Slowest rate reachable through `SimulationClock.slower()`.
            MAX_RATE (float): Fastest rate reachable through `SimulationClock.faster()`.
            RATE_STEP_FACTOR (float): Multiplier applied per faster/slower step.
        """
        DEFAULT_RATE = 86400.0
        MIN_RATE = 3600.0
        MAX_RATE = 31557600.0 * 8
        RATE_STEP_FACTOR = 2.0

    # --- Near-Earth-Object Feed ---
    class NeoFeed:
        """Configuration for the remote near-Earth-object feed.

        Attributes:
            URL (str): Feed endpoint.
            API_KEY (str): Default key; DEMO_KEY is heavily rate limited.
            TIMEOUT_SECONDS (float): HTTP timeout for a single request.
        """
        URL = 'https://api.nasa.gov/neo/rest/v1/feed'
        API_KEY = 'DEMO_KEY'
        TIMEOUT_SECONDS = 10.0

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            KEPLER_SOLVER (bool): Log solver non-convergence at DEBUG level.
            IMPACT_ENGINE (bool): Log every impact evaluation at DEBUG level.
        """
        KEPLER_SOLVER = False
        IMPACT_ENGINE = False

    def __init__(self):
        """Initializes the `SimulationConfig` instance and validates it.

        Raises:
            ConfigurationError: If `self.validate()` detects any issue.
        """
        self.validate()

    def validate(self):
        """Performs validation of all configuration settings.

        Checks that the solver parameters are usable, that every power-law
        coefficient is positive, that the blast coefficients keep the light ring
        outside the moderate ring outside the severe ring, and that every
        catalog body carries well-formed orbital elements.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        # Orbit validation
        if self.Orbit.KEPLER_TOLERANCE <= 0:
            raise ConfigurationError("Orbit.KEPLER_TOLERANCE must be positive.")
        if self.Orbit.KEPLER_MAX_ITERATIONS < 1:
            raise ConfigurationError("Orbit.KEPLER_MAX_ITERATIONS must be at least 1.")
        if not (0.0 <= self.Orbit.MAX_EFFECTIVE_ECCENTRICITY < 1.0):
            raise ConfigurationError(
                f"Orbit.MAX_EFFECTIVE_ECCENTRICITY ({self.Orbit.MAX_EFFECTIVE_ECCENTRICITY}) must be in [0, 1)."
            )
        if self.Orbit.TRAIL_STEP_DAYS <= 0 or self.Orbit.TRAIL_MAX_DAYS <= 0:
            raise ConfigurationError("Orbit.TRAIL_STEP_DAYS and Orbit.TRAIL_MAX_DAYS must be positive.")
        if not (0.0 < self.Orbit.TRAIL_PERIOD_FRACTION <= 1.0):
            raise ConfigurationError("Orbit.TRAIL_PERIOD_FRACTION must be in (0, 1].")
        if self.Orbit.OUTLINE_SAMPLES < 3:
            raise ConfigurationError("Orbit.OUTLINE_SAMPLES must be at least 3.")

        # Impact validation
        if not (0.0 < self.Impact.MIN_IMPACT_ANGLE_DEG <= self.Impact.MAX_IMPACT_ANGLE_DEG <= 90.0):
            raise ConfigurationError(
                f"Impact angle limits (min: {self.Impact.MIN_IMPACT_ANGLE_DEG}, "
                f"max: {self.Impact.MAX_IMPACT_ANGLE_DEG}) must satisfy 0 < min <= max <= 90."
            )
        positive_coefficients = [
            "TARGET_DENSITY_LAND_KG_M3", "CRATER_COEFFICIENT", "CRATER_DEPTH_RATIO",
            "EJECTA_COEFFICIENT_M_PER_KM", "EJECTA_MIN_THICKNESS_M",
            "FIREBALL_COEFFICIENT_KM", "FIREBALL_EXPONENT", "BLAST_20PSI_KM", "BLAST_5PSI_KM",
            "BLAST_1PSI_KM", "BLAST_EXPONENT", "THERMAL_COEFFICIENT_KM", "THERMAL_EXPONENT",
            "TSUNAMI_COEFFICIENT_M", "TSUNAMI_EXPONENT",
        ]
        for name in positive_coefficients:
            value = getattr(self.Impact, name)
            if not (np.isfinite(value) and value > 0):
                raise ConfigurationError(f"Impact.{name} ({value}) must be a positive finite number.")
        if not (self.Impact.BLAST_1PSI_KM > self.Impact.BLAST_5PSI_KM > self.Impact.BLAST_20PSI_KM):
            raise ConfigurationError(
                "Impact blast coefficients are not ordered. Expected BLAST_1PSI_KM > BLAST_5PSI_KM > BLAST_20PSI_KM, "
                f"got 1psi={self.Impact.BLAST_1PSI_KM}, 5psi={self.Impact.BLAST_5PSI_KM}, "
                f"20psi={self.Impact.BLAST_20PSI_KM}."
            )
        if self.Impact.TSUNAMI_THRESHOLD_MT < 0:
            raise ConfigurationError("Impact.TSUNAMI_THRESHOLD_MT cannot be negative.")
        if any(d <= 0 for d in self.Impact.MATERIAL_DENSITIES_KG_M3.values()):
            raise ConfigurationError("All Impact.MATERIAL_DENSITIES_KG_M3 values must be positive.")

        # Catalog validation
        seen = set()
        for group_name, group in (("PLANET_DATA", self.Catalog.PLANET_DATA),
                                  ("PRESET_ASTEROIDS", self.Catalog.PRESET_ASTEROIDS)):
            for name, data in group.items():
                if name in seen:
                    raise ConfigurationError(f"Catalog body '{name}' is defined more than once.")
                seen.add(name)
                if data.get('a_au', 0.0) <= 0:
                    raise ConfigurationError(f"Catalog.{group_name}['{name}'] semi-major axis must be positive.")
                if not (0.0 <= data.get('e', -1.0) < 1.0):
                    raise ConfigurationError(
                        f"Catalog.{group_name}['{name}'] eccentricity ({data.get('e')}) must be >= 0 and < 1."
                    )
                if data.get('period_days', 0.0) <= 0:
                    raise ConfigurationError(f"Catalog.{group_name}['{name}'] period must be positive.")

        # Belt validation
        if not (0 < self.Belt.INNER_AU < self.Belt.GAP_INNER_AU < self.Belt.GAP_OUTER_AU < self.Belt.OUTER_AU):
            raise ConfigurationError("Belt radii must satisfy 0 < INNER < GAP_INNER < GAP_OUTER < OUTER.")
        if self.Belt.COUNT < 0:
            raise ConfigurationError("Belt.COUNT cannot be negative.")

        # View and clock validation
        if not (0 < self.View.MIN_ZOOM_PX_PER_AU <= self.View.DEFAULT_ZOOM_PX_PER_AU <= self.View.MAX_ZOOM_PX_PER_AU):
            raise ConfigurationError("View zoom limits must satisfy 0 < MIN <= DEFAULT <= MAX.")
        if not (0 < self.Clock.MIN_RATE <= self.Clock.DEFAULT_RATE <= self.Clock.MAX_RATE):
            raise ConfigurationError("Clock rates must satisfy 0 < MIN_RATE <= DEFAULT_RATE <= MAX_RATE.")
        if self.Clock.RATE_STEP_FACTOR <= 1.0:
            raise ConfigurationError("Clock.RATE_STEP_FACTOR must be greater than 1.")
        if self.NeoFeed.TIMEOUT_SECONDS <= 0:
            raise ConfigurationError("NeoFeed.TIMEOUT_SECONDS must be positive.")

        logging.debug("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
