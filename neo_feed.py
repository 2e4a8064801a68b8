# neo_feed.py
"""Adapter for the near-Earth-object feed.

Fetches the date-keyed feed, turns each usable object into a `NeoRecord`, and
converts records into `AsteroidPhysicalParams` for the impact engine. Objects
without a diameter estimate or a close-approach velocity are skipped here so
they never reach the physics code. Any transport or decoding failure raises
`NeoFeedError`; a failed request is never reported as an empty result.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Union

import requests

from config import config
from impact import AsteroidPhysicalParams, TargetMedium


class NeoFeedError(Exception):
    """Raised when the feed cannot be fetched or decoded."""
    pass


@dataclass(frozen=True)
class NeoRecord:
    id: str
    name: str
    diameter_m: float  # mean of the min/max estimate
    velocity_km_s: float  # relative velocity at the first listed close approach
    is_potentially_hazardous: bool

    def to_physical_params(self, density_kg_m3: Optional[float] = None, impact_angle_deg: float = 45.0,
                           target=TargetMedium.LAND) -> AsteroidPhysicalParams:
        density = config.Impact.MATERIAL_DENSITIES_KG_M3['STONE'] if density_kg_m3 is None else density_kg_m3
        return AsteroidPhysicalParams(self.diameter_m, density, self.velocity_km_s, impact_angle_deg, target)


def _parse_record(neo: Dict) -> Optional[NeoRecord]:
    try:
        meters = neo['estimated_diameter']['meters']
        diameter = (float(meters['estimated_diameter_min']) + float(meters['estimated_diameter_max'])) / 2.0
        approaches = neo['close_approach_data']
        if not approaches:
            return None
        velocity = float(approaches[0]['relative_velocity']['kilometers_per_second'])
    except (KeyError, TypeError, ValueError, IndexError):
        return None
    if not (math.isfinite(diameter) and diameter > 0 and math.isfinite(velocity) and velocity > 0):
        return None
    return NeoRecord(
        id=str(neo.get('id', '')),
        name=str(neo.get('name', '')).replace('(', '').replace(')', '').strip(),
        diameter_m=diameter,
        velocity_km_s=velocity,
        is_potentially_hazardous=bool(neo.get('is_potentially_hazardous_asteroid', False)),
    )


def parse_neo_feed(payload: Dict, hazardous_only: bool = False) -> List[NeoRecord]:
    """Extracts usable records from a decoded feed body, largest diameter first.

    Raises:
        NeoFeedError: If the body has no `near_earth_objects` mapping.
    """
    by_date = payload.get('near_earth_objects') if isinstance(payload, dict) else None
    if not isinstance(by_date, dict):
        raise NeoFeedError("Feed response is missing the 'near_earth_objects' mapping.")

    records = []
    skipped = 0
    for day in sorted(by_date):
        for neo in by_date[day] or []:
            record = _parse_record(neo)
            if record is None:
                skipped += 1
                continue
            if hazardous_only and not record.is_potentially_hazardous:
                continue
            records.append(record)
    if skipped:
        logging.info(f"Skipped {skipped} feed objects with missing diameter or velocity data.")
    records.sort(key=lambda r: r.diameter_m, reverse=True)
    return records


def _as_date_string(value: Union[str, date]) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def fetch_neo_feed(start_date: Union[str, date], end_date: Union[str, date], api_key: Optional[str] = None,
                   hazardous_only: bool = False, session: Optional[requests.Session] = None) -> List[NeoRecord]:
    """Fetches and parses the feed for a date window.

    Raises:
        NeoFeedError: On network failure, a non-2xx status or an undecodable body.
    """
    params = {
        'start_date': _as_date_string(start_date),
        'end_date': _as_date_string(end_date),
        'api_key': api_key or config.NeoFeed.API_KEY,
    }
    http = session or requests
    logging.info(f"Fetching NEO feed {params['start_date']} .. {params['end_date']}")
    try:
        response = http.get(config.NeoFeed.URL, params=params, timeout=config.NeoFeed.TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NeoFeedError(f"Failed to fetch data from the NEO feed: {e}") from e
    try:
        payload = response.json()
    except ValueError as e:
        raise NeoFeedError(f"NEO feed returned malformed JSON: {e}") from e
    return parse_neo_feed(payload, hazardous_only=hazardous_only)
