# solarsystem.py
import numpy as np
import math
import logging
from dataclasses import dataclass
from typing import Tuple, List, Dict, Iterable, Iterator, Optional
from config import config, MS_PER_DAY, J2000_EPOCH_MS  # Import the global config instance
from physics_utils import (InputValidationError, TWO_PI, safe_divide, require_positive, clamp,
                           wrap_angle_pi, rotation_x, rotation_z)

DEFAULT_BODY_COLOR = (200, 200, 255)


def color_from_name(name: str) -> Tuple[int, int, int]:
    """Derives a stable, reasonably bright RGB colour from a body name."""
    h = 0
    for ch in name:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return (100 + (h & 0xFF) % 156,
            100 + ((h >> 8) & 0xFF) % 156,
            100 + ((h >> 16) & 0xFF) % 156)


@dataclass(frozen=True)
class OrbitalElements:
    """Keplerian elements of a body orbiting the Sun.

    There is no mean anomaly at epoch: every body sits at periapsis (M = 0) at
    the shared J2000.0 reference epoch.

    Angles are unrestricted and normalised when used. `e` must be in [0, 1);
    values above `config.Orbit.MAX_EFFECTIVE_ECCENTRICITY` are accepted but
    clamped by `OrbitalMechanics` before reaching the Kepler solver.
    """
    name: str
    a_au: float  # Semi-major axis in AU
    e: float  # Eccentricity
    period_days: float
    inclination_deg: float = 0.0  # i
    arg_periapsis_deg: float = 0.0  # Argument of periapsis (ω)
    long_asc_node_deg: float = 0.0  # Longitude of ascending node (Ω)
    color: Tuple[int, int, int] = DEFAULT_BODY_COLOR

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise InputValidationError("Orbital body name cannot be empty.")
        object.__setattr__(self, 'name', str(self.name).strip())
        object.__setattr__(self, 'a_au', require_positive(f"{self.name}: semi-major axis", self.a_au))
        object.__setattr__(self, 'period_days', require_positive(f"{self.name}: period", self.period_days))

        e = float(self.e)
        if not (0.0 <= e < 1.0):
            raise InputValidationError(
                f"{self.name}: eccentricity {e} is outside [0, 1); parabolic and hyperbolic orbits are unsupported."
            )
        object.__setattr__(self, 'e', e)

        for field_name in ('inclination_deg', 'arg_periapsis_deg', 'long_asc_node_deg'):
            value = float(getattr(self, field_name))
            if not math.isfinite(value):
                raise InputValidationError(f"{self.name}: {field_name} must be finite, got {value}.")
            object.__setattr__(self, field_name, value)
        object.__setattr__(self, 'color', tuple(int(c) for c in self.color))

    @classmethod
    def from_dict(cls, name: str, data: Dict) -> 'OrbitalElements':
        return cls(
            name=name,
            a_au=data['a_au'],
            e=data['e'],
            period_days=data['period_days'],
            inclination_deg=data.get('inclination_deg', 0.0),
            arg_periapsis_deg=data.get('arg_periapsis_deg', 0.0),
            long_asc_node_deg=data.get('long_asc_node_deg', 0.0),
            color=data.get('color', DEFAULT_BODY_COLOR),
        )

    @classmethod
    def from_custom_input(cls, name: str, a_au: float, e: float, period_days: float,
                          inclination_deg: float = 0.0, arg_periapsis_deg: float = 0.0,
                          long_asc_node_deg: float = 0.0) -> 'OrbitalElements':
        """Builds elements from the custom-body form, applying the form's clamps.

        The form clamps a >= 0.2 AU, 0 <= e <= 0.95 and period >= 10 days before the
        body is added; the colour is derived from the name.
        """
        name = str(name or "Custom").strip() or "Custom"
        return cls(
            name=name,
            a_au=max(config.Catalog.CUSTOM_MIN_A_AU, float(a_au)),
            e=clamp(float(e), 0.0, config.Orbit.MAX_EFFECTIVE_ECCENTRICITY),
            period_days=max(config.Catalog.CUSTOM_MIN_PERIOD_DAYS, float(period_days)),
            inclination_deg=inclination_deg or 0.0,
            arg_periapsis_deg=arg_periapsis_deg or 0.0,
            long_asc_node_deg=long_asc_node_deg or 0.0,
            color=color_from_name(name),
        )


@dataclass(frozen=True)
class KeplerSolution:
    eccentric_anomaly: float
    iterations: int
    converged: bool
    residual: float  # E - e*sin(E) - M, with M wrapped into (-pi, pi]


class OrbitalMechanics:
    """Stateless orbital position calculator.

    Every position is a pure function of the elements and the time since the
    reference epoch. Trails are produced by re-evaluating past times, never by
    integrating, so pausing or rewinding the clock reproduces the same result as
    a direct evaluation.
    """

    def __init__(self, tolerance: Optional[float] = None, max_iterations: Optional[int] = None,
                 seed_threshold: Optional[float] = None, max_eccentricity: Optional[float] = None):
        self.tolerance = config.Orbit.KEPLER_TOLERANCE if tolerance is None else float(tolerance)
        self.max_iterations = config.Orbit.KEPLER_MAX_ITERATIONS if max_iterations is None else int(max_iterations)
        self.seed_threshold = (config.Orbit.HIGH_ECCENTRICITY_SEED_THRESHOLD
                               if seed_threshold is None else float(seed_threshold))
        self.max_eccentricity = (config.Orbit.MAX_EFFECTIVE_ECCENTRICITY
                                 if max_eccentricity is None else float(max_eccentricity))

    def effective_eccentricity(self, e: float) -> float:
        return clamp(float(e), 0.0, self.max_eccentricity)

    def solve_kepler_detailed(self, M_rad: float, e: float) -> KeplerSolution:
        """
        Solves Kepler's Equation M = E - e * sin(E) for eccentric anomaly E using Newton-Raphson.

        Args:
            M_rad: Mean anomaly in radians, any real value. Wrapped into (-pi, pi].
            e: Eccentricity, clamped into [0, max_eccentricity].

        Returns:
            KeplerSolution with the last estimate, the iterations used, whether the
            step size dropped below the tolerance and the final residual.
        """
        e = self.effective_eccentricity(e)
        m = wrap_angle_pi(M_rad)

        # Small seeds converge poorly for very eccentric orbits. A seed of +/-pi on the
        # same side as m keeps every Newton step between the seed and the root.
        E_rad = m if e < self.seed_threshold else math.copysign(math.pi, m)
        converged = False
        iterations = 0
        while iterations < self.max_iterations:
            iterations += 1
            f_E = E_rad - e * math.sin(E_rad) - m
            f_prime_E = 1.0 - e * math.cos(E_rad)  # >= 1 - max_eccentricity > 0
            delta_E = -safe_divide(f_E, f_prime_E, epsilon=1e-14)
            E_rad += delta_E
            if abs(delta_E) < self.tolerance:
                converged = True
                break

        residual = E_rad - e * math.sin(E_rad) - m
        if not converged and config.Debug.KEPLER_SOLVER:
            logging.debug(f"Kepler solver did not converge after {iterations} iterations for M={M_rad}, e={e}. "
                          f"Last E={E_rad}, residual={residual}")
        return KeplerSolution(E_rad, iterations, converged, residual)

    def solve_kepler_equation(self, M_rad: float, e: float) -> float:
        """Returns the eccentric anomaly for mean anomaly `M_rad`. Never raises."""
        return self.solve_kepler_detailed(M_rad, e).eccentric_anomaly

    @staticmethod
    def orbital_plane_rotation(elements: OrbitalElements) -> np.ndarray:
        """Perifocal -> heliocentric rotation.

        Applied right to left: periapsis about z, then inclination about x, then
        ascending node about z. The order matters.
        """
        return (rotation_z(math.radians(elements.long_asc_node_deg))
                @ rotation_x(math.radians(elements.inclination_deg))
                @ rotation_z(math.radians(elements.arg_periapsis_deg)))

    def perifocal_position(self, a_au: float, e: float, M_rad: float) -> np.ndarray:
        """Position in the orbital plane, periapsis along +x, in AU."""
        e = self.effective_eccentricity(e)
        E_rad = self.solve_kepler_equation(M_rad, e)
        cos_E = math.cos(E_rad)
        sin_E = math.sin(E_rad)
        r = a_au * (1.0 - e * cos_E)
        nu_rad = math.atan2(math.sqrt(1.0 - e * e) * sin_E, cos_E - e)
        return np.array([r * math.cos(nu_rad), r * math.sin(nu_rad), 0.0], dtype=np.float64)

    def position_from_mean_anomaly(self, elements: OrbitalElements, M_rad: float) -> np.ndarray:
        perifocal = self.perifocal_position(elements.a_au, elements.e, M_rad)
        return self.orbital_plane_rotation(elements) @ perifocal

    def mean_anomaly_at(self, elements: OrbitalElements, t_days: float) -> float:
        mean_motion = TWO_PI / elements.period_days
        return mean_motion * t_days

    def position_at(self, elements: OrbitalElements, t_days: float) -> np.ndarray:
        """
        Heliocentric position in AU at `t_days` days after the reference epoch.

        Args:
            elements: Orbital elements of the body.
            t_days: Days since the shared epoch; may be negative or arbitrarily large.

        Returns:
            np.ndarray of shape (3,): [x, y, z] in AU.
        """
        return self.position_from_mean_anomaly(elements, self.mean_anomaly_at(elements, t_days))

    def position_at_time_ms(self, elements: OrbitalElements, time_ms: float) -> np.ndarray:
        """Position at a Unix timestamp in milliseconds (e.g. a `SimulationClock.time_ms`)."""
        return self.position_at(elements, days_since_epoch(time_ms))

    def trail_span_days(self, elements: OrbitalElements) -> float:
        return min(config.Orbit.TRAIL_PERIOD_FRACTION * elements.period_days, config.Orbit.TRAIL_MAX_DAYS)

    def trail_positions(self, elements: OrbitalElements, t_days: float,
                        span_days: Optional[float] = None, step_days: Optional[float] = None) -> np.ndarray:
        """Positions over the trailing window ending at `t_days`, oldest first, shape (N, 3).

        The last row is exactly `position_at(elements, t_days)`.
        """
        span = self.trail_span_days(elements) if span_days is None else float(span_days)
        step = config.Orbit.TRAIL_STEP_DAYS if step_days is None else float(step_days)
        if span <= 0:
            return self.position_at(elements, t_days).reshape(1, 3)
        count = int(math.ceil(span / step)) + 1
        offsets = np.linspace(-span, 0.0, num=count)
        return np.array([self.position_at(elements, t_days + k) for k in offsets])

    def orbit_outline(self, elements: OrbitalElements, samples: Optional[int] = None) -> np.ndarray:
        """One full revolution sampled uniformly in mean anomaly, shape (samples, 3)."""
        samples = config.Orbit.OUTLINE_SAMPLES if samples is None else int(samples)
        rotation = self.orbital_plane_rotation(elements)
        points = [self.perifocal_position(elements.a_au, elements.e, (j / samples) * TWO_PI)
                  for j in range(samples)]
        return np.array(points) @ rotation.T


def days_since_epoch(time_ms: float) -> float:
    """Converts a Unix timestamp in milliseconds to days since J2000.0."""
    return (time_ms - J2000_EPOCH_MS) / MS_PER_DAY


class AsteroidBelt:
    """Static background point cloud for the main belt.

    Points are drawn uniformly by area between the inner and outer radius, with
    the 3:1 Kirkwood gap left empty, and given small random inclinations. The
    cloud does not orbit; it is generated once from a fixed seed so every run
    draws the same belt.
    """

    def __init__(self, count: Optional[int] = None, seed: Optional[int] = None):
        self.count = config.Belt.COUNT if count is None else int(count)
        self.seed = config.Belt.SEED if seed is None else int(seed)
        self.points = self.generate_asteroids()

    def _sample_radii(self, rng: np.random.Generator, n: int) -> np.ndarray:
        inner_sq = config.Belt.INNER_AU ** 2
        outer_sq = config.Belt.OUTER_AU ** 2
        radii = np.empty(0, dtype=np.float64)
        while radii.size < n:
            r = np.sqrt(inner_sq + (outer_sq - inner_sq) * rng.random(n))
            r = r[(r <= config.Belt.GAP_INNER_AU) | (r >= config.Belt.GAP_OUTER_AU)]
            radii = np.concatenate((radii, r))
        return radii[:n]

    def generate_asteroids(self) -> np.ndarray:
        """Returns the belt as an (N, 3) array of heliocentric positions in AU."""
        rng = np.random.default_rng(self.seed)
        r = self._sample_radii(rng, self.count)
        angle = rng.random(self.count) * TWO_PI
        inclination = (rng.random(self.count) - 0.5) * 2.0 * config.Belt.MAX_INCLINATION_RAD
        points = np.column_stack((r * np.cos(angle),
                                  r * np.sin(angle),
                                  r * np.cos(angle) * np.sin(inclination)))
        logging.debug(f"Generated {self.count} belt points (seed {self.seed}).")
        return points

    def __len__(self) -> int:
        return self.count


class OrbitalCatalog:
    """Name -> OrbitalElements mapping of built-in and user-added bodies.

    Names are unique across both groups. Elements are immutable; replacing a
    custom body swaps in a new instance.
    """

    def __init__(self, builtin: Iterable[OrbitalElements] = ()):
        self._builtin: Dict[str, OrbitalElements] = {}
        self._custom: Dict[str, OrbitalElements] = {}
        for body in builtin:
            if body.name in self._builtin:
                raise InputValidationError(f"Duplicate built-in body '{body.name}'.")
            self._builtin[body.name] = body

    @classmethod
    def from_config(cls, include_asteroids: bool = True) -> 'OrbitalCatalog':
        bodies = [OrbitalElements.from_dict(name, data) for name, data in config.Catalog.PLANET_DATA.items()]
        if include_asteroids:
            bodies.extend(OrbitalElements.from_dict(name, data)
                          for name, data in config.Catalog.PRESET_ASTEROIDS.items())
        return cls(bodies)

    def add_custom(self, elements: OrbitalElements) -> None:
        """Adds a custom body, replacing any custom body with the same name."""
        if elements.name in self._builtin:
            raise InputValidationError(f"'{elements.name}' is a built-in body and cannot be replaced.")
        replaced = elements.name in self._custom
        self._custom.pop(elements.name, None)
        self._custom[elements.name] = elements
        logging.info(f"{'Replaced' if replaced else 'Added'} custom body '{elements.name}' "
                     f"(a={elements.a_au} AU, e={elements.e}, P={elements.period_days} d).")

    def remove_custom(self, name: str) -> OrbitalElements:
        """Removes and returns the custom body called `name`.

        Raises:
            KeyError: If no custom body has that name.
        """
        try:
            removed = self._custom.pop(name)
        except KeyError:
            raise KeyError(f"No custom body named '{name}'.") from None
        logging.info(f"Removed custom body '{name}'.")
        return removed

    def is_custom(self, name: str) -> bool:
        return name in self._custom

    def bodies(self) -> Tuple[OrbitalElements, ...]:
        """Built-in bodies first, then custom bodies in insertion order (the draw order)."""
        return tuple(self._builtin.values()) + tuple(self._custom.values())

    def custom_bodies(self) -> Tuple[OrbitalElements, ...]:
        return tuple(self._custom.values())

    def names(self) -> List[str]:
        return [body.name for body in self.bodies()]

    def positions_at(self, t_days: float, mechanics: Optional[OrbitalMechanics] = None) -> Dict[str, np.ndarray]:
        mechanics = mechanics or OrbitalMechanics()
        return {body.name: mechanics.position_at(body, t_days) for body in self.bodies()}

    def __getitem__(self, name: str) -> OrbitalElements:
        if name in self._builtin:
            return self._builtin[name]
        return self._custom[name]

    def __contains__(self, name) -> bool:
        return name in self._builtin or name in self._custom

    def __iter__(self) -> Iterator[OrbitalElements]:
        return iter(self.bodies())

    def __len__(self) -> int:
        return len(self._builtin) + len(self._custom)
