"""
Поиск ячейки, содержащей точку.

Точка на общей вершине или ребре принадлежит сразу нескольким ячейкам.
Из всех кандидатов выбирается ячейка, центр которой ближе к опорной точке
(другому концу запроса) — ячейка «по пути» к цели.
"""

from __future__ import annotations

from typing import List, Optional

from trinav.navmesh.geometry import (
    distance_sq,
    dot,
    point_on_segment,
    points_equal,
    sub,
)
from trinav.navmesh.graph import NavGraph
from trinav.navmesh.types import Cell, NavGraphConfig, Point2


def barycentric(point: Point2, a: Point2, b: Point2, c: Point2) -> Optional[tuple[float, float]]:
    """
    Координаты (u, v) точки: point = a + u*(c - a) + v*(b - a).

    Returns:
        (u, v) или None для вырожденного треугольника (нулевой определитель).
    """
    v0 = sub(c, a)
    v1 = sub(b, a)
    v2 = sub(point, a)

    dot00 = dot(v0, v0)
    dot01 = dot(v0, v1)
    dot02 = dot(v0, v2)
    dot11 = dot(v1, v1)
    dot12 = dot(v1, v2)

    denom = dot00 * dot11 - dot01 * dot01
    if denom == 0.0:
        return None

    u = (dot11 * dot02 - dot01 * dot12) / denom
    v = (dot00 * dot12 - dot01 * dot02) / denom
    return u, v


def point_in_cell(point: Point2, cell: Cell) -> bool:
    """Барицентрический тест: u >= 0, v >= 0, u + v < 1."""
    a, b, c = cell.points
    uv = barycentric(point, a, b, c)
    if uv is None:
        return False
    u, v = uv
    return u >= 0.0 and v >= 0.0 and (u + v) < 1.0


def point_on_cell_boundary(point: Point2, cell: Cell, eps: float = 1e-9) -> bool:
    """Точка совпадает с вершиной ячейки или лежит на одном из её рёбер."""
    a, b, c = cell.points
    for p in cell.points:
        if points_equal(point, p, eps):
            return True
    return (
        point_on_segment(point, a, b, eps)
        or point_on_segment(point, b, c, eps)
        or point_on_segment(point, c, a, eps)
    )


class CellLocator:
    """Поиск ячейки полным перебором графа."""

    def __init__(self, graph: NavGraph, config: Optional[NavGraphConfig] = None) -> None:
        self.graph = graph
        self.config = config or NavGraphConfig()

    def candidates(self, point: Point2) -> List[Cell]:
        """Все ячейки, содержащие точку (внутри или на границе)."""
        eps = self.config.point_epsilon
        return [
            cell for cell in self.graph.cells
            if point_in_cell(point, cell) or point_on_cell_boundary(point, cell, eps)
        ]

    def locate(self, point: Point2, reference: Point2) -> Optional[Cell]:
        """
        Найти ячейку, содержащую point.

        Args:
            point: Точка запроса (2D).
            reference: Опорная точка; при нескольких кандидатах берётся
                ячейка с ближайшим к ней центром.

        Returns:
            Ячейка или None, если точка вне графа (или граф не готов).
        """
        best: Optional[Cell] = None
        best_dist = float("inf")
        for cell in self.candidates(point):
            dist = distance_sq(reference, cell.centroid)
            # Кандидаты идут по возрастанию индекса: при равенстве остаётся меньший
            if dist < best_dist:
                best_dist = dist
                best = cell
        return best
