"""
2D геометрия в плоскости навигации.

Все функции работают с кортежами (x, y) из обычных float: на каждый запрос
их вызывается очень много, а numpy на отдельных парах чисел только медленнее.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from trinav.navmesh.types import Point2


def to_point2(point) -> Point2:
    """
    Привести точку к 2D.

    3D точка (x, y, z) проецируется на XZ (высота Y отбрасывается),
    2D точка (x, y) остаётся как есть.
    """
    arr = np.asarray(point, dtype=float).reshape(-1)
    if arr.shape[0] == 3:
        return (float(arr[0]), float(arr[2]))
    if arr.shape[0] == 2:
        return (float(arr[0]), float(arr[1]))
    raise ValueError(f"Expected a 2D or 3D point, got {arr.shape[0]} components")


def project_points(points: np.ndarray) -> np.ndarray:
    """(N, 3) -> (N, 2): отбросить высоту."""
    points = np.asarray(points, dtype=float)
    return points[:, [0, 2]]


def sub(a: Point2, b: Point2) -> Point2:
    return (a[0] - b[0], a[1] - b[1])


def dot(a: Point2, b: Point2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Point2, b: Point2) -> float:
    """Z-компонента векторного произведения. > 0, если b левее a (против часовой)."""
    return a[0] * b[1] - a[1] * b[0]


def length(v: Point2) -> float:
    return math.hypot(v[0], v[1])


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def distance_sq(a: Point2, b: Point2) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def normalize(v: Point2) -> Point2:
    """Единичный вектор. Нулевой вектор остаётся нулевым."""
    n = length(v)
    if n == 0.0:
        return (0.0, 0.0)
    return (v[0] / n, v[1] / n)


def signed_angle(a: Point2, b: Point2) -> float:
    """
    Знаковый угол от a к b в радианах, (-pi, pi].

    Положительный — поворот против часовой стрелки. Для нулевого вектора 0.
    """
    return math.atan2(cross(a, b), dot(a, b))


def triarea2(a: Point2, b: Point2, c: Point2) -> float:
    """Удвоенная знаковая площадь треугольника abc. > 0, если c левее луча a->b."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def centroid(points: Sequence[Point2]) -> Point2:
    n = len(points)
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def points_equal(a: Point2, b: Point2, eps: float = 1e-9) -> bool:
    return distance_sq(a, b) <= eps * eps


def point_on_segment(p: Point2, a: Point2, b: Point2, eps: float = 1e-9) -> bool:
    """Лежит ли p на отрезке ab (с допуском eps)."""
    ab = sub(b, a)
    ab_len = length(ab)
    if ab_len == 0.0:
        return points_equal(p, a, eps)
    ap = sub(p, a)
    # Расстояние до прямой
    if abs(cross(ab, ap)) / ab_len > eps:
        return False
    t = dot(ap, ab) / (ab_len * ab_len)
    margin = eps / ab_len
    return -margin <= t <= 1.0 + margin


def weld(point: Sequence[float], decimals: int) -> Point2:
    """Округлить координаты, чтобы численно равные вершины совпали."""
    # + 0.0 превращает -0.0 в 0.0
    x = round(float(point[0]), decimals) + 0.0
    y = round(float(point[1]), decimals) + 0.0
    return (x, y)
