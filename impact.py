# impact.py
"""Empirical impact effects: energy, crater, ejecta, fireball, blast, thermal, seismic and tsunami.

This is an order-of-magnitude model built from published scaling laws
(Collins et al. transient crater scaling, Glasstone & Dolan nuclear-effects
analogs). Each law's shape is fixed here; its coefficients come from an
`ImpactScaling` table so alternative calibrations can be swapped in without
touching the formulas.
"""
import math
import sys
import logging
from dataclasses import dataclass, replace, fields
from enum import Enum
from typing import Optional, Tuple

from config import config, ConfigurationError, JOULES_PER_MEGATON_TNT, EARTH_SURFACE_GRAVITY_M_S2
from physics_utils import InputValidationError, require_positive, clamp


class TargetMedium(Enum):
    LAND = 'land'
    OCEAN = 'ocean'

    @classmethod
    def parse(cls, value) -> 'TargetMedium':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InputValidationError(
                f"Unknown target medium {value!r}; expected one of {[m.value for m in cls]}."
            ) from None


@dataclass(frozen=True)
class AsteroidPhysicalParams:
    """Physical description of an impactor.

    Diameter, density and velocity must be positive and finite; anything else is
    rejected with InputValidationError. The impact angle (from horizontal) is
    clamped into the configured [5, 90] degree range.
    """
    diameter_m: float
    density_kg_m3: float
    velocity_km_s: float
    impact_angle_deg: float = 45.0
    target: TargetMedium = TargetMedium.LAND

    def __post_init__(self):
        object.__setattr__(self, 'diameter_m', require_positive("diameter_m", self.diameter_m))
        object.__setattr__(self, 'density_kg_m3', require_positive("density_kg_m3", self.density_kg_m3))
        object.__setattr__(self, 'velocity_km_s', require_positive("velocity_km_s", self.velocity_km_s))
        angle = float(self.impact_angle_deg)
        if not math.isfinite(angle):
            raise InputValidationError(f"impact_angle_deg must be finite, got {angle}.")
        object.__setattr__(self, 'impact_angle_deg', clamp(angle, config.Impact.MIN_IMPACT_ANGLE_DEG,
                                                           config.Impact.MAX_IMPACT_ANGLE_DEG))
        object.__setattr__(self, 'target', TargetMedium.parse(self.target))

    @classmethod
    def from_material(cls, material: str, diameter_m: float, velocity_km_s: float,
                      impact_angle_deg: float = 45.0, target=TargetMedium.LAND) -> 'AsteroidPhysicalParams':
        """Uses the bulk density of a named material (IRON, STONE or CARBON)."""
        try:
            density = config.Impact.MATERIAL_DENSITIES_KG_M3[material.upper()]
        except KeyError:
            raise InputValidationError(
                f"Unknown material {material!r}; expected one of {sorted(config.Impact.MATERIAL_DENSITIES_KG_M3)}."
            ) from None
        return cls(diameter_m, density, velocity_km_s, impact_angle_deg, target)

    @classmethod
    def from_preset(cls, key: str, target=TargetMedium.LAND) -> 'AsteroidPhysicalParams':
        try:
            preset = config.Impact.IMPACTOR_PRESETS[key.lower()]
        except KeyError:
            raise InputValidationError(
                f"Unknown impactor preset {key!r}; expected one of {sorted(config.Impact.IMPACTOR_PRESETS)}."
            ) from None
        return cls(preset['diameter_m'], preset['density_kg_m3'], preset['velocity_km_s'],
                   preset['impact_angle_deg'], target)

    def with_target(self, target) -> 'AsteroidPhysicalParams':
        return replace(self, target=target)


@dataclass(frozen=True)
class ImpactScaling:
    """Coefficient table for every scaling law used by `ImpactPhysicsEngine`.

    Radii are in km and scale with yield Y in megatons; the crater law works in
    SI units and yields metres before conversion.
    """
    target_density_land_kg_m3: float
    surface_gravity_m_s2: float
    crater_coefficient: float
    crater_density_exponent: float
    crater_diameter_exponent: float
    crater_velocity_exponent: float
    crater_gravity_exponent: float
    crater_angle_exponent: float
    crater_depth_ratio: float
    ejecta_coefficient_m_per_km: float
    ejecta_min_thickness_m: float
    fireball_coefficient_km: float
    fireball_exponent: float
    blast_20psi_km: float
    blast_5psi_km: float
    blast_1psi_km: float
    blast_exponent: float
    thermal_coefficient_km: float
    thermal_exponent: float
    seismic_log_slope: float
    seismic_log_offset: float
    tsunami_threshold_mt: float
    tsunami_coefficient_m: float
    tsunami_exponent: float
    tsunami_severity_thresholds_m: Tuple[Tuple[float, str], ...]

    @classmethod
    def from_config(cls) -> 'ImpactScaling':
        table = config.Impact
        return cls(
            target_density_land_kg_m3=table.TARGET_DENSITY_LAND_KG_M3,
            surface_gravity_m_s2=EARTH_SURFACE_GRAVITY_M_S2,
            crater_coefficient=table.CRATER_COEFFICIENT,
            crater_density_exponent=table.CRATER_DENSITY_EXPONENT,
            crater_diameter_exponent=table.CRATER_DIAMETER_EXPONENT,
            crater_velocity_exponent=table.CRATER_VELOCITY_EXPONENT,
            crater_gravity_exponent=table.CRATER_GRAVITY_EXPONENT,
            crater_angle_exponent=table.CRATER_ANGLE_EXPONENT,
            crater_depth_ratio=table.CRATER_DEPTH_RATIO,
            ejecta_coefficient_m_per_km=table.EJECTA_COEFFICIENT_M_PER_KM,
            ejecta_min_thickness_m=table.EJECTA_MIN_THICKNESS_M,
            fireball_coefficient_km=table.FIREBALL_COEFFICIENT_KM,
            fireball_exponent=table.FIREBALL_EXPONENT,
            blast_20psi_km=table.BLAST_20PSI_KM,
            blast_5psi_km=table.BLAST_5PSI_KM,
            blast_1psi_km=table.BLAST_1PSI_KM,
            blast_exponent=table.BLAST_EXPONENT,
            thermal_coefficient_km=table.THERMAL_COEFFICIENT_KM,
            thermal_exponent=table.THERMAL_EXPONENT,
            seismic_log_slope=table.SEISMIC_LOG_SLOPE,
            seismic_log_offset=table.SEISMIC_LOG_OFFSET,
            tsunami_threshold_mt=table.TSUNAMI_THRESHOLD_MT,
            tsunami_coefficient_m=table.TSUNAMI_COEFFICIENT_M,
            tsunami_exponent=table.TSUNAMI_EXPONENT,
            tsunami_severity_thresholds_m=tuple(
                sorted(((float(h), label) for h, label in table.TSUNAMI_SEVERITY_THRESHOLDS_M), reverse=True)
            ),
        )

    def with_overrides(self, **overrides) -> 'ImpactScaling':
        """Returns a validated copy with some coefficients replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown impact scaling coefficients: {sorted(unknown)}")
        scaling = replace(self, **overrides)
        scaling.validate()
        return scaling

    def validate(self) -> None:
        """Checks the monotonicity and ordering the scaling laws depend on.

        Raises:
            ConfigurationError: If a coefficient or exponent would break an ordering guarantee.
        """
        for name in ('target_density_land_kg_m3', 'surface_gravity_m_s2', 'crater_coefficient',
                     'crater_depth_ratio', 'ejecta_coefficient_m_per_km', 'ejecta_min_thickness_m',
                     'fireball_coefficient_km', 'fireball_exponent',
                     'blast_20psi_km', 'blast_5psi_km', 'blast_1psi_km', 'blast_exponent',
                     'thermal_coefficient_km', 'thermal_exponent', 'tsunami_coefficient_m', 'tsunami_exponent'):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ConfigurationError(f"Impact scaling '{name}' ({value}) must be a positive finite number.")
        if not (self.blast_1psi_km > self.blast_5psi_km > self.blast_20psi_km):
            raise ConfigurationError(
                f"Blast coefficients must satisfy 1psi > 5psi > 20psi, got "
                f"{self.blast_1psi_km} / {self.blast_5psi_km} / {self.blast_20psi_km}."
            )
        if self.tsunami_threshold_mt < 0:
            raise ConfigurationError("Tsunami threshold cannot be negative.")


@dataclass(frozen=True)
class BlastRadii:
    severe_20psi_km: float
    moderate_5psi_km: float
    light_1psi_km: float


@dataclass(frozen=True)
class TsunamiEstimate:
    is_tsunami: bool
    wave_height_m: float
    severity: str  # 'none', 'low', 'moderate', 'high' or 'extreme'


@dataclass(frozen=True)
class ImpactResult:
    mass_kg: float
    kinetic_energy_j: float
    energy_megatons: float
    crater_diameter_km: float
    crater_depth_km: float
    ejecta_thickness_m: float  # at the crater rim
    fireball_radius_km: float
    blast_radii_km: BlastRadii
    thermal_radius_km: float
    seismic_magnitude: float
    tsunami: TsunamiEstimate


class ImpactPhysicsEngine:
    """Maps `AsteroidPhysicalParams` to an `ImpactResult`.

    The engine holds only its (immutable) scaling table and the angle-coupling
    switch, so a single instance can evaluate any number of scenarios,
    concurrently if desired.
    """

    def __init__(self, scaling: Optional[ImpactScaling] = None, angle_energy_coupling: Optional[bool] = None):
        self.scaling = scaling if scaling is not None else ImpactScaling.from_config()
        self.scaling.validate()
        self.angle_energy_coupling = (config.Impact.ANGLE_ENERGY_COUPLING
                                      if angle_energy_coupling is None else bool(angle_energy_coupling))

    @staticmethod
    def mass_kg(params: AsteroidPhysicalParams) -> float:
        radius_m = params.diameter_m / 2.0
        return params.density_kg_m3 * (4.0 / 3.0) * math.pi * radius_m ** 3

    def kinetic_energy_j(self, params: AsteroidPhysicalParams) -> float:
        velocity_m_s = params.velocity_km_s * 1000.0
        energy = 0.5 * self.mass_kg(params) * velocity_m_s ** 2
        if self.angle_energy_coupling:
            energy *= math.sin(math.radians(params.impact_angle_deg))
        return energy

    def crater_diameter_km(self, params: AsteroidPhysicalParams) -> float:
        """Transient crater diameter; zero for ocean impacts (no rim forms in deep water)."""
        if params.target is TargetMedium.OCEAN:
            return 0.0
        s = self.scaling
        velocity_m_s = params.velocity_km_s * 1000.0
        sin_angle = math.sin(math.radians(params.impact_angle_deg))
        diameter_m = (s.crater_coefficient
                      * (params.density_kg_m3 / s.target_density_land_kg_m3) ** s.crater_density_exponent
                      * params.diameter_m ** s.crater_diameter_exponent
                      * velocity_m_s ** s.crater_velocity_exponent
                      * s.surface_gravity_m_s2 ** s.crater_gravity_exponent
                      * sin_angle ** s.crater_angle_exponent)
        return diameter_m / 1000.0

    def ejecta_thickness_m(self, target: TargetMedium, crater_diameter_km: float) -> float:
        """Ejecta blanket thickness at the rim; zero where no crater forms."""
        if target is TargetMedium.OCEAN:
            return 0.0
        return max(self.scaling.ejecta_min_thickness_m,
                   crater_diameter_km * self.scaling.ejecta_coefficient_m_per_km)

    def fireball_radius_km(self, energy_megatons: float) -> float:
        return self.scaling.fireball_coefficient_km * energy_megatons ** self.scaling.fireball_exponent

    def blast_radii_km(self, energy_megatons: float) -> BlastRadii:
        cube = energy_megatons ** self.scaling.blast_exponent
        return BlastRadii(
            severe_20psi_km=self.scaling.blast_20psi_km * cube,
            moderate_5psi_km=self.scaling.blast_5psi_km * cube,
            light_1psi_km=self.scaling.blast_1psi_km * cube,
        )

    def thermal_radius_km(self, energy_megatons: float) -> float:
        return self.scaling.thermal_coefficient_km * energy_megatons ** self.scaling.thermal_exponent

    def seismic_magnitude(self, kinetic_energy_j: float) -> float:
        # Energies that underflow to zero are floored at the smallest normal double.
        energy = max(kinetic_energy_j, sys.float_info.min)
        return self.scaling.seismic_log_slope * math.log10(energy) + self.scaling.seismic_log_offset

    def tsunami(self, target: TargetMedium, energy_megatons: float) -> TsunamiEstimate:
        if target is not TargetMedium.OCEAN or energy_megatons <= self.scaling.tsunami_threshold_mt:
            return TsunamiEstimate(is_tsunami=False, wave_height_m=0.0, severity='none')
        height = self.scaling.tsunami_coefficient_m * energy_megatons ** self.scaling.tsunami_exponent
        severity = 'low'
        for threshold, label in self.scaling.tsunami_severity_thresholds_m:
            if height >= threshold:
                severity = label
                break
        return TsunamiEstimate(is_tsunami=True, wave_height_m=height, severity=severity)

    def evaluate(self, params: AsteroidPhysicalParams) -> ImpactResult:
        """Computes every impact effect for one scenario. Deterministic, no I/O."""
        mass = self.mass_kg(params)
        kinetic_energy = self.kinetic_energy_j(params)
        energy_megatons = kinetic_energy / JOULES_PER_MEGATON_TNT
        crater_km = self.crater_diameter_km(params)

        result = ImpactResult(
            mass_kg=mass,
            kinetic_energy_j=kinetic_energy,
            energy_megatons=energy_megatons,
            crater_diameter_km=crater_km,
            crater_depth_km=crater_km * self.scaling.crater_depth_ratio,
            ejecta_thickness_m=self.ejecta_thickness_m(params.target, crater_km),
            fireball_radius_km=self.fireball_radius_km(energy_megatons),
            blast_radii_km=self.blast_radii_km(energy_megatons),
            thermal_radius_km=self.thermal_radius_km(energy_megatons),
            seismic_magnitude=self.seismic_magnitude(kinetic_energy),
            tsunami=self.tsunami(params.target, energy_megatons),
        )
        if config.Debug.IMPACT_ENGINE:
            logging.debug(f"Impact evaluated: d={params.diameter_m} m, rho={params.density_kg_m3} kg/m^3, "
                          f"v={params.velocity_km_s} km/s, angle={params.impact_angle_deg} deg, "
                          f"target={params.target.value} -> {energy_megatons:.3g} Mt")
        return result


def calculate_impact(params: AsteroidPhysicalParams) -> ImpactResult:
    """Evaluates `params` with the default engine configuration."""
    return ImpactPhysicsEngine().evaluate(params)
