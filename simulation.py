# simulation.py
"""Virtual clock and per-frame snapshots for the orrery host loop.

A host loop advances a `SimulationClock`, bundles it with the current
`ViewState` and catalog contents into a `FrameSnapshot`, and hands the snapshot
to `compute_frame`. Nothing here keeps state between frames.
"""
import logging
from dataclasses import dataclass, replace, field
from datetime import datetime, timezone
from typing import Tuple, Optional

import numpy as np

from config import config
from physics_utils import InputValidationError, clamp
from projection import ViewState
from solarsystem import OrbitalElements, OrbitalMechanics, OrbitalCatalog, days_since_epoch


@dataclass(frozen=True)
class SimulationClock:
    """Virtual time in Unix milliseconds plus a rate multiplier.

    Attributes:
        time_ms: Current simulated instant, milliseconds since 1970-01-01T00:00:00Z.
        rate: Simulated seconds that elapse per real second.
        playing: When False, `advanced()` leaves the time unchanged.
    """
    time_ms: float
    rate: float = config.Clock.DEFAULT_RATE
    playing: bool = True

    def __post_init__(self):
        if not np.isfinite(self.time_ms):
            raise InputValidationError(f"Clock time must be finite, got {self.time_ms}.")
        if self.rate <= 0:
            raise InputValidationError(f"Clock rate must be positive, got {self.rate}.")

    @classmethod
    def from_datetime(cls, when: datetime, rate: float = config.Clock.DEFAULT_RATE,
                      playing: bool = True) -> 'SimulationClock':
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return cls(time_ms=when.timestamp() * 1000.0, rate=rate, playing=playing)

    @property
    def days_since_epoch(self) -> float:
        return days_since_epoch(self.time_ms)

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.time_ms / 1000.0, tz=timezone.utc)

    def advanced(self, real_dt_seconds: float) -> 'SimulationClock':
        """Returns the clock after `real_dt_seconds` of wall-clock time."""
        if not self.playing:
            return self
        return replace(self, time_ms=self.time_ms + real_dt_seconds * 1000.0 * self.rate)

    def at(self, time_ms: float) -> 'SimulationClock':
        """Jumps (forwards or backwards) to an absolute instant."""
        return replace(self, time_ms=float(time_ms))

    def toggled(self) -> 'SimulationClock':
        return replace(self, playing=not self.playing)

    def faster(self) -> 'SimulationClock':
        return replace(self, rate=clamp(self.rate * config.Clock.RATE_STEP_FACTOR,
                                        config.Clock.MIN_RATE, config.Clock.MAX_RATE))

    def slower(self) -> 'SimulationClock':
        return replace(self, rate=clamp(self.rate / config.Clock.RATE_STEP_FACTOR,
                                        config.Clock.MIN_RATE, config.Clock.MAX_RATE))


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a frame needs, captured once at the start of the frame."""
    clock: SimulationClock
    view: ViewState
    bodies: Tuple[OrbitalElements, ...]
    highlighted: frozenset = field(default_factory=frozenset)

    @classmethod
    def capture(cls, clock: SimulationClock, view: ViewState, catalog: OrbitalCatalog,
                highlighted=()) -> 'FrameSnapshot':
        return cls(clock=clock, view=view, bodies=catalog.bodies(), highlighted=frozenset(highlighted))


@dataclass(frozen=True)
class BodyFrame:
    name: str
    color: Tuple[int, int, int]
    position_au: np.ndarray
    screen_xy: Tuple[float, float]
    trail_xy: Optional[np.ndarray]
    highlighted: bool


def compute_frame(snapshot: FrameSnapshot, viewport_size: Tuple[int, int],
                  mechanics: Optional[OrbitalMechanics] = None, with_trails: bool = True):
    """Evaluates every body at the snapshot's instant and maps it to the screen.

    Returns:
        List[BodyFrame] in draw order.
    """
    mechanics = mechanics or OrbitalMechanics()
    t_days = snapshot.clock.days_since_epoch
    frames = []
    for body in snapshot.bodies:
        position = mechanics.position_at(body, t_days)
        trail = None
        if with_trails:
            trail = snapshot.view.many_to_screen(mechanics.trail_positions(body, t_days), viewport_size)
        frames.append(BodyFrame(
            name=body.name,
            color=body.color,
            position_au=position,
            screen_xy=snapshot.view.world_to_screen(position, viewport_size),
            trail_xy=trail,
            highlighted=body.name in snapshot.highlighted,
        ))
    logging.debug(f"Computed frame for {len(frames)} bodies at t={t_days:.3f} d.")
    return frames
