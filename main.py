# main.py
import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone

from config import config, ConfigurationError
from impact import AsteroidPhysicalParams, ImpactPhysicsEngine, TargetMedium
from neo_feed import NeoFeedError, fetch_neo_feed
from physics_utils import InputValidationError
from projection import ViewState
from simulation import FrameSnapshot, SimulationClock, compute_frame
from solarsystem import AsteroidBelt, OrbitalCatalog, OrbitalElements

VIEWPORT_SIZE = (1000, 700)


def _parse_when(text):
    if text is None:
        return datetime.now(timezone.utc)
    when = datetime.fromisoformat(text)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def format_impact(result, label=None):
    lines = []
    if label:
        lines.append(label)
    lines.extend([
        f"  Mass:               {result.mass_kg:.4g} kg",
        f"  Kinetic energy:     {result.kinetic_energy_j:.4g} J",
        f"  Yield:              {result.energy_megatons:.4g} Mt TNT",
        f"  Crater diameter:    {result.crater_diameter_km:.3f} km (depth {result.crater_depth_km:.3f} km)",
        f"  Ejecta at rim:      {result.ejecta_thickness_m:.1f} m",
        f"  Fireball radius:    {result.fireball_radius_km:.3f} km",
        f"  20 psi (severe):    {result.blast_radii_km.severe_20psi_km:.3f} km",
        f"  5 psi (moderate):   {result.blast_radii_km.moderate_5psi_km:.3f} km",
        f"  1 psi (light):      {result.blast_radii_km.light_1psi_km:.3f} km",
        f"  Thermal (3rd deg.): {result.thermal_radius_km:.3f} km",
        f"  Seismic magnitude:  {result.seismic_magnitude:.2f}",
    ])
    if result.tsunami.is_tsunami:
        lines.append(f"  Tsunami:            {result.tsunami.wave_height_m:.1f} m ({result.tsunami.severity})")
    else:
        lines.append("  Tsunami:            none")
    return "\n".join(lines)


def parse_custom_body(entry):
    """Parses a NAME,A_AU,E,PERIOD_DAYS option value into orbital elements."""
    try:
        name, a_au, e, period = entry.split(',')
        a_au, e, period = float(a_au), float(e), float(period)
    except ValueError:
        raise InputValidationError(
            f"Custom body {entry!r} must be NAME,A_AU,E,PERIOD_DAYS with numeric orbital values."
        ) from None
    return OrbitalElements.from_custom_input(name, a_au, e, period)


def run_positions(args):
    catalog = OrbitalCatalog.from_config(include_asteroids=not args.planets_only)
    for entry in args.custom or []:
        catalog.add_custom(parse_custom_body(entry))

    clock = SimulationClock.from_datetime(_parse_when(args.date), playing=False)
    snapshot = FrameSnapshot.capture(clock, ViewState(tilt_deg=args.tilt), catalog)
    print(f"Positions at {clock.as_datetime().isoformat()} ({clock.days_since_epoch:.2f} d since J2000), "
          f"tilt {snapshot.view.tilt_deg:.1f} deg")
    for frame in compute_frame(snapshot, VIEWPORT_SIZE, with_trails=False):
        x, y, z = frame.position_au
        sx, sy = frame.screen_xy
        print(f"  {frame.name:<10} x={x:+.4f} y={y:+.4f} z={z:+.4f} AU   screen=({sx:.1f}, {sy:.1f})")
    if args.belt:
        screen = snapshot.view.many_to_screen(AsteroidBelt().points, VIEWPORT_SIZE)
        visible = ((screen[:, 0] >= 0) & (screen[:, 0] < VIEWPORT_SIZE[0])
                   & (screen[:, 1] >= 0) & (screen[:, 1] < VIEWPORT_SIZE[1]))
        print(f"  Asteroid belt: {len(screen)} points, {int(visible.sum())} inside the {VIEWPORT_SIZE[0]}x{VIEWPORT_SIZE[1]} view")
    return 0


def run_impact(args):
    if args.preset:
        params = AsteroidPhysicalParams.from_preset(args.preset, target=args.target)
        label = config.Impact.IMPACTOR_PRESETS[args.preset.lower()]['label']
    else:
        if args.diameter is None or args.velocity is None:
            raise InputValidationError("--diameter and --velocity are required without --preset.")
        density = args.density
        if density is None:
            density = config.Impact.MATERIAL_DENSITIES_KG_M3[args.material.upper()]
        params = AsteroidPhysicalParams(args.diameter, density, args.velocity, args.angle, args.target)
        label = "Custom impactor"
    engine = ImpactPhysicsEngine(angle_energy_coupling=args.angle_coupling or None)
    result = engine.evaluate(params)
    print(format_impact(result, f"{label} -> {params.target.value}"))
    return 0


def run_presets(args):
    for key, preset in config.Impact.IMPACTOR_PRESETS.items():
        print(f"  {key:<12} {preset['label']}: d={preset['diameter_m']} m, rho={preset['density_kg_m3']} kg/m^3, "
              f"v={preset['velocity_km_s']} km/s, angle={preset['impact_angle_deg']} deg")
    return 0


def run_neo(args):
    start = _parse_when(args.start).date()
    end = _parse_when(args.end).date() if args.end else start + timedelta(days=7)
    records = fetch_neo_feed(start, end, api_key=args.api_key, hazardous_only=args.hazardous)
    engine = ImpactPhysicsEngine()
    for record in records[:args.limit]:
        result = engine.evaluate(record.to_physical_params(target=args.target))
        flag = " [hazardous]" if record.is_potentially_hazardous else ""
        print(f"  {record.name:<24} d={record.diameter_m:8.1f} m  v={record.velocity_km_s:6.2f} km/s  "
              f"{result.energy_megatons:10.3g} Mt{flag}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Orbit propagation and asteroid impact estimates.")
    parser.add_argument('--verbose', action='store_true', help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest='command', required=True)

    positions = subparsers.add_parser('positions', help="Print body positions at a date.")
    positions.add_argument('--date', help="ISO date/time (UTC); defaults to now.")
    positions.add_argument('--tilt', type=float, default=config.View.DEFAULT_TILT_DEG)
    positions.add_argument('--planets-only', action='store_true')
    positions.add_argument('--belt', action='store_true', help="Summarise the background asteroid belt.")
    positions.add_argument('--custom', action='append', metavar='NAME,A_AU,E,PERIOD_DAYS',
                           help="Add a custom body (repeatable).")
    positions.set_defaults(func=run_positions)

    impact = subparsers.add_parser('impact', help="Estimate the effects of an impact.")
    impact.add_argument('--preset', choices=sorted(config.Impact.IMPACTOR_PRESETS))
    impact.add_argument('--diameter', type=float, help="Impactor diameter in metres.")
    impact.add_argument('--velocity', type=float, help="Impact velocity in km/s.")
    impact.add_argument('--density', type=float, help="Bulk density in kg/m^3 (overrides --material).")
    impact.add_argument('--material', default='STONE', choices=sorted(config.Impact.MATERIAL_DENSITIES_KG_M3))
    impact.add_argument('--angle', type=float, default=45.0, help="Impact angle from horizontal, degrees.")
    impact.add_argument('--target', type=TargetMedium.parse, default=TargetMedium.LAND)
    impact.add_argument('--angle-coupling', action='store_true', help="Scale energy by sin(angle).")
    impact.set_defaults(func=run_impact)

    presets = subparsers.add_parser('presets', help="List built-in impactor presets.")
    presets.set_defaults(func=run_presets)

    neo = subparsers.add_parser('neo', help="Fetch near-Earth objects and estimate their impact yield.")
    neo.add_argument('--start', help="Start date (ISO); defaults to today.")
    neo.add_argument('--end', help="End date (ISO); defaults to start + 7 days.")
    neo.add_argument('--api-key', default=None)
    neo.add_argument('--hazardous', action='store_true', help="Only potentially hazardous objects.")
    neo.add_argument('--limit', type=int, default=10)
    neo.add_argument('--target', type=TargetMedium.parse, default=TargetMedium.LAND)
    neo.set_defaults(func=run_neo)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        return args.func(args)
    except InputValidationError as e:
        logging.error(f"Invalid input: {e}")
        return 2
    except NeoFeedError as e:
        logging.error(f"NEO feed unavailable: {e}", exc_info=True)
        return 3
    except ConfigurationError as e:
        logging.critical(f"Configuration error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
