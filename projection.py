# projection.py
"""Orthographic projection of heliocentric positions onto the viewing plane.

The view is tilted about the horizontal (x) axis. Depth is dropped after the
tilt and is not used for occlusion: bodies are drawn in catalog order, not
depth order.
"""
import math
import numpy as np
from dataclasses import dataclass, replace
from typing import Tuple

from config import config
from physics_utils import clamp, wrap_degrees


def _tilt_terms(tilt_deg: float) -> Tuple[float, float]:
    t = math.radians(tilt_deg)
    return math.cos(t), math.sin(t)


def project_orthographic(position, tilt_deg: float) -> np.ndarray:
    """Projects a 3D position to 2D view coordinates.

    Args:
        position: [x, y, z] in AU.
        tilt_deg: Viewing tilt about the horizontal axis, in degrees.

    Returns:
        np.ndarray of shape (2,): [x, y'] where y' = cos(t)*y - sin(t)*z.
    """
    x, y, z = (float(v) for v in position)
    ct, st = _tilt_terms(tilt_deg)
    return np.array([x, ct * y - st * z], dtype=np.float64)


def project_many(positions, tilt_deg: float) -> np.ndarray:
    """Vectorised `project_orthographic` for an (N, 3) array; returns (N, 2)."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    ct, st = _tilt_terms(tilt_deg)
    projected = np.empty((positions.shape[0], 2), dtype=np.float64)
    projected[:, 0] = positions[:, 0]
    projected[:, 1] = ct * positions[:, 1] - st * positions[:, 2]
    return projected


@dataclass(frozen=True)
class ViewState:
    """Immutable camera settings handed to each frame.

    Attributes:
        tilt_deg: Viewing tilt in [0, 360).
        zoom_px_per_au: Pixels per astronomical unit.
        offset_px: Pan offset in pixels, (dx, dy).
    """
    tilt_deg: float = config.View.DEFAULT_TILT_DEG
    zoom_px_per_au: float = config.View.DEFAULT_ZOOM_PX_PER_AU
    offset_px: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self):
        object.__setattr__(self, 'tilt_deg', wrap_degrees(float(self.tilt_deg)))
        object.__setattr__(self, 'zoom_px_per_au', clamp(float(self.zoom_px_per_au),
                                                         config.View.MIN_ZOOM_PX_PER_AU,
                                                         config.View.MAX_ZOOM_PX_PER_AU))
        object.__setattr__(self, 'offset_px', (float(self.offset_px[0]), float(self.offset_px[1])))

    def with_tilt(self, tilt_deg: float) -> 'ViewState':
        return replace(self, tilt_deg=tilt_deg)

    def zoomed(self, factor: float) -> 'ViewState':
        return replace(self, zoom_px_per_au=self.zoom_px_per_au * factor)

    def panned(self, dx_px: float, dy_px: float) -> 'ViewState':
        return replace(self, offset_px=(self.offset_px[0] + dx_px, self.offset_px[1] + dy_px))

    def world_to_screen(self, position, viewport_size: Tuple[int, int]) -> Tuple[float, float]:
        """Maps a 3D position (AU) to pixel coordinates inside a viewport of (width, height)."""
        x, y = project_orthographic(position, self.tilt_deg)
        cx = viewport_size[0] / 2 + self.offset_px[0]
        cy = viewport_size[1] / 2 + self.offset_px[1]
        return (cx + x * self.zoom_px_per_au, cy + y * self.zoom_px_per_au)

    def many_to_screen(self, positions, viewport_size: Tuple[int, int]) -> np.ndarray:
        projected = project_many(positions, self.tilt_deg)
        center = np.array([viewport_size[0] / 2 + self.offset_px[0],
                           viewport_size[1] / 2 + self.offset_px[1]])
        return center + projected * self.zoom_px_per_au
