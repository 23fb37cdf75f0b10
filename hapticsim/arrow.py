"""Geometry of the arrow that shows the force acting on the tool."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

_MIN_FORCE = 1e-6
_MIN_AXIS = 1e-6
_Z_AXIS = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class ForceArrow:
    """A line from ``start`` to ``end`` with a cone tip.

    The tip is drawn by rotating a cone that points along +z by ``angle``
    degrees about ``rotation_axis``; no rotation is needed when the axis is
    ``None``.
    """

    start: np.ndarray
    end: np.ndarray
    direction: np.ndarray
    angle: float
    rotation_axis: Optional[np.ndarray]

    TIP_BASE_RADIUS = 0.001
    TIP_HEIGHT = 0.003
    TIP_SLICES = 16


def force_arrow(force: Sequence[float], scale: float = 0.01) -> Optional[ForceArrow]:
    """Build the arrow for ``force`` scaled by ``scale``, or None if it is negligible."""
    vector = np.asarray(force, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected 3 components, got {vector.size}")
    if np.linalg.norm(vector) < _MIN_FORCE:
        return None

    start = np.zeros(3)
    end = vector * scale
    length = np.linalg.norm(end - start)
    if length == 0.0:
        return None
    direction = (end - start) / length

    angle = math.degrees(math.acos(float(np.clip(direction @ _Z_AXIS, -1.0, 1.0))))
    rotation = np.cross(_Z_AXIS, direction)
    rotation_norm = np.linalg.norm(rotation)
    rotation_axis = rotation / rotation_norm if rotation_norm > _MIN_AXIS else None

    return ForceArrow(
        start=start,
        end=end,
        direction=direction,
        angle=angle,
        rotation_axis=rotation_axis,
    )