import math
import unittest

from config import ConfigurationError, JOULES_PER_MEGATON_TNT
from impact import (AsteroidPhysicalParams, ImpactPhysicsEngine, ImpactScaling, TargetMedium,
                    calculate_impact)
from physics_utils import InputValidationError


def stony(diameter_m, velocity_km_s, angle=45.0, target=TargetMedium.LAND, density=3500.0):
    return AsteroidPhysicalParams(diameter_m, density, velocity_km_s, angle, target)


class TestReferenceScenarios(unittest.TestCase):

    def setUp(self):
        self.engine = ImpactPhysicsEngine(angle_energy_coupling=False)

    def test_hundred_metre_stony_land_impact(self):
        result = self.engine.evaluate(stony(100.0, 20.0))
        expected_mass = 3500.0 * (4.0 / 3.0) * math.pi * 50.0 ** 3
        expected_energy = 0.5 * expected_mass * 20000.0 ** 2
        self.assertAlmostEqual(result.mass_kg / 1e9, 1.8326, places=4)
        self.assertAlmostEqual(result.kinetic_energy_j / 1e17, 3.6652, places=4)
        self.assertAlmostEqual(result.kinetic_energy_j / expected_energy, 1.0, places=12)
        self.assertAlmostEqual(result.energy_megatons, expected_energy / JOULES_PER_MEGATON_TNT, places=9)
        self.assertAlmostEqual(result.energy_megatons, 87.60, places=2)

    def test_angle_coupling_scales_energy_by_sine(self):
        coupled = ImpactPhysicsEngine(angle_energy_coupling=True).evaluate(stony(100.0, 20.0))
        self.assertAlmostEqual(coupled.energy_megatons, 61.94, places=2)
        plain = self.engine.evaluate(stony(100.0, 20.0))
        self.assertAlmostEqual(coupled.energy_megatons, plain.energy_megatons * math.sin(math.radians(45.0)))

    def test_chelyabinsk_like_yield_is_sub_megaton(self):
        result = self.engine.evaluate(stony(17.0, 19.0, angle=20.0, density=3300.0))
        self.assertGreater(result.energy_megatons, 0.1)
        self.assertLess(result.energy_megatons, 1.0)

    def test_hundred_metre_crater_is_about_a_kilometre_or_two(self):
        for angle in (45.0, 90.0):
            crater = self.engine.evaluate(stony(100.0, 20.0, angle=angle)).crater_diameter_km
            self.assertGreater(crater, 1.0)
            self.assertLess(crater, 3.0)


class TestScalingLaws(unittest.TestCase):

    def setUp(self):
        self.engine = ImpactPhysicsEngine()

    def test_energy_monotonic_in_diameter(self):
        energies = [self.engine.evaluate(stony(d, 20.0)).energy_megatons for d in (10.0, 50.0, 100.0, 500.0)]
        self.assertEqual(energies, sorted(energies))
        self.assertEqual(len(set(energies)), len(energies))

    def test_energy_monotonic_in_velocity(self):
        energies = [self.engine.evaluate(stony(100.0, v)).energy_megatons for v in (5.0, 11.0, 20.0, 40.0)]
        self.assertEqual(energies, sorted(energies))
        self.assertEqual(len(set(energies)), len(energies))

    def test_blast_radii_strictly_ordered(self):
        for diameter in (1.0, 17.0, 100.0, 1000.0):
            blast = self.engine.evaluate(stony(diameter, 20.0)).blast_radii_km
            self.assertGreater(blast.light_1psi_km, blast.moderate_5psi_km)
            self.assertGreater(blast.moderate_5psi_km, blast.severe_20psi_km)
            self.assertGreater(blast.severe_20psi_km, 0.0)

    def test_crater_zero_for_ocean(self):
        result = self.engine.evaluate(stony(100.0, 20.0, target=TargetMedium.OCEAN))
        self.assertEqual(result.crater_diameter_km, 0.0)
        self.assertEqual(result.crater_depth_km, 0.0)

    def test_crater_shrinks_for_shallow_impacts(self):
        steep = self.engine.evaluate(stony(100.0, 20.0, angle=90.0)).crater_diameter_km
        shallow = self.engine.evaluate(stony(100.0, 20.0, angle=15.0)).crater_diameter_km
        self.assertLess(shallow, steep)

    def test_crater_depth_ratio(self):
        result = self.engine.evaluate(stony(100.0, 20.0))
        self.assertAlmostEqual(result.crater_depth_km, result.crater_diameter_km * self.engine.scaling.crater_depth_ratio)

    def test_ejecta_scales_with_crater_on_land(self):
        result = self.engine.evaluate(stony(100.0, 20.0))
        self.assertGreater(result.crater_diameter_km * 10.0, 1.0)
        self.assertAlmostEqual(result.ejecta_thickness_m, result.crater_diameter_km * 10.0)

    def test_ejecta_has_a_floor_on_land(self):
        result = self.engine.evaluate(stony(1.0, 20.0))
        self.assertLess(result.crater_diameter_km * 10.0, 1.0)
        self.assertEqual(result.ejecta_thickness_m, 1.0)

    def test_no_ejecta_for_ocean(self):
        result = self.engine.evaluate(stony(500.0, 20.0, target=TargetMedium.OCEAN))
        self.assertEqual(result.ejecta_thickness_m, 0.0)

    def test_vanishing_energy_keeps_seismic_finite(self):
        result = self.engine.evaluate(stony(1e-120, 1e-10))
        self.assertEqual(result.kinetic_energy_j, 0.0)
        self.assertTrue(math.isfinite(result.seismic_magnitude))
        self.assertLess(result.seismic_magnitude, 0.0)

    def test_fireball_independent_of_medium(self):
        land = self.engine.evaluate(stony(100.0, 20.0))
        ocean = self.engine.evaluate(stony(100.0, 20.0, target=TargetMedium.OCEAN))
        self.assertEqual(land.fireball_radius_km, ocean.fireball_radius_km)
        self.assertEqual(land.thermal_radius_km, ocean.thermal_radius_km)

    def test_seismic_magnitude(self):
        result = self.engine.evaluate(stony(100.0, 20.0))
        self.assertAlmostEqual(result.seismic_magnitude, 0.67 * math.log10(result.kinetic_energy_j) - 5.87)

    def test_results_are_reproducible(self):
        params = stony(240.0, 17.5, angle=30.0, target=TargetMedium.OCEAN)
        self.assertEqual(self.engine.evaluate(params), self.engine.evaluate(params))
        self.assertEqual(calculate_impact(params), ImpactPhysicsEngine().evaluate(params))


class TestTsunami(unittest.TestCase):

    def setUp(self):
        self.engine = ImpactPhysicsEngine()

    def test_no_tsunami_on_land(self):
        tsunami = self.engine.evaluate(stony(1000.0, 30.0)).tsunami
        self.assertFalse(tsunami.is_tsunami)
        self.assertEqual(tsunami.wave_height_m, 0.0)
        self.assertEqual(tsunami.severity, 'none')

    def test_no_tsunami_for_small_ocean_impact(self):
        result = self.engine.evaluate(stony(20.0, 15.0, target=TargetMedium.OCEAN))
        self.assertLessEqual(result.energy_megatons, 1.0)
        self.assertFalse(result.tsunami.is_tsunami)
        self.assertEqual(result.tsunami.wave_height_m, 0.0)

    def test_large_ocean_impact_raises_tsunami(self):
        result = self.engine.evaluate(stony(100.0, 20.0, target=TargetMedium.OCEAN))
        self.assertTrue(result.tsunami.is_tsunami)
        self.assertAlmostEqual(result.tsunami.wave_height_m, 10.0 * result.energy_megatons ** 0.25)
        self.assertEqual(result.tsunami.severity, 'extreme')

    def test_moderate_ocean_impact_severity(self):
        result = self.engine.evaluate(stony(40.0, 20.0, target=TargetMedium.OCEAN))
        self.assertGreater(result.energy_megatons, 1.0)
        self.assertEqual(result.tsunami.severity, 'high')

    def test_alternative_exponent(self):
        engine = ImpactPhysicsEngine(scaling=ImpactScaling.from_config().with_overrides(tsunami_exponent=0.5))
        result = engine.evaluate(stony(100.0, 20.0, target=TargetMedium.OCEAN))
        self.assertAlmostEqual(result.tsunami.wave_height_m, 10.0 * math.sqrt(result.energy_megatons))


class TestInputValidation(unittest.TestCase):

    def test_rejects_non_positive_inputs(self):
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(0.0, 3000.0, 20.0)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(-5.0, 3000.0, 20.0)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(100.0, 0.0, 20.0)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(100.0, 3000.0, -1.0)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(float('nan'), 3000.0, 20.0)

    def test_validation_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            AsteroidPhysicalParams(100.0, 3000.0, 0.0)

    def test_angle_is_clamped(self):
        self.assertEqual(AsteroidPhysicalParams(100.0, 3000.0, 20.0, impact_angle_deg=1.0).impact_angle_deg, 5.0)
        self.assertEqual(AsteroidPhysicalParams(100.0, 3000.0, 20.0, impact_angle_deg=120.0).impact_angle_deg, 90.0)

    def test_target_parsing(self):
        self.assertIs(AsteroidPhysicalParams(100.0, 3000.0, 20.0, target='Ocean').target, TargetMedium.OCEAN)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams(100.0, 3000.0, 20.0, target='lava')

    def test_material_and_preset_constructors(self):
        iron = AsteroidPhysicalParams.from_material('iron', 50.0, 15.0)
        self.assertEqual(iron.density_kg_m3, 8000.0)
        with self.assertRaises(InputValidationError):
            AsteroidPhysicalParams.from_material('cheese', 50.0, 15.0)
        preset = AsteroidPhysicalParams.from_preset('Chelyabinsk', target=TargetMedium.OCEAN)
        self.assertEqual(preset.diameter_m, 17.0)
        self.assertIs(preset.target, TargetMedium.OCEAN)
        self.assertIs(preset.with_target('land').target, TargetMedium.LAND)


class TestImpactScaling(unittest.TestCase):

    def test_default_table_is_valid(self):
        ImpactScaling.from_config().validate()

    def test_blast_ordering_is_enforced(self):
        with self.assertRaises(ConfigurationError):
            ImpactScaling.from_config().with_overrides(blast_5psi_km=50.0)

    def test_ejecta_coefficients_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            ImpactScaling.from_config().with_overrides(ejecta_min_thickness_m=0.0)

    def test_unknown_coefficient_rejected(self):
        with self.assertRaises(ConfigurationError):
            ImpactScaling.from_config().with_overrides(warp_factor=9.0)

    def test_engine_validates_injected_table(self):
        from dataclasses import replace
        broken = replace(ImpactScaling.from_config(), fireball_coefficient_km=-1.0)
        with self.assertRaises(ConfigurationError):
            ImpactPhysicsEngine(scaling=broken)


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
