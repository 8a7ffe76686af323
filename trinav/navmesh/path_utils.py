"""Helpers for consumers of computed paths: length, preview markers, height."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

import numpy as np

from trinav.navmesh.geometry import to_point2

HeightProbe = Callable[[float, float], Optional[float]]


def path_length(path: Sequence) -> float:
    """Total length of a polyline."""
    total = 0.0
    points = [to_point2(p) for p in path]
    for a, b in zip(points, points[1:]):
        total += math.hypot(b[0] - a[0], b[1] - a[1])
    return total


def sample_path(path: Sequence, spacing: float) -> List[np.ndarray]:
    """
    Evenly spaced marker points along a path.

    Spacing restarts at every waypoint: each segment gets its start point and
    then a marker every `spacing` units strictly before the segment end.
    The final waypoint is always included.
    """
    if spacing <= 0.0:
        raise ValueError(f"spacing must be positive, got {spacing}")

    points = [to_point2(p) for p in path]
    if not points:
        return []

    markers: List[np.ndarray] = []
    for a, b in zip(points, points[1:]):
        dx = b[0] - a[0]
        dy = b[1] - a[1]
        seg_len = math.hypot(dx, dy)
        if seg_len == 0.0:
            continue
        ux = dx / seg_len
        uy = dy / seg_len
        dist = 0.0
        while dist < seg_len:
            markers.append(np.array([a[0] + ux * dist, a[1] + uy * dist]))
            dist += spacing

    markers.append(np.array(points[-1], dtype=float))
    return markers


def lift_path(
    path: Sequence,
    height_probe: HeightProbe,
    default_height: float = 0.0,
) -> List[np.ndarray]:
    """
    Convert 2D waypoints to 3D (x, y, z) points.

    height_probe(x, z) is typically a downward raycast against the source
    mesh. A miss (None) keeps the previous height.
    """
    result: List[np.ndarray] = []
    height = default_height
    for p in path:
        x, z = to_point2(p)
        probed = height_probe(x, z)
        if probed is not None:
            height = float(probed)
        result.append(np.array([x, height, z]))
    return result
