"""
Сглаживание пути: Funnel Algorithm (Simple Stupid Funnel Algorithm).

Грубый путь A* — цепочка ячеек и порталов между ними. Алгоритм «натягивает
верёвку» от старта до финиша через порталы и возвращает только точки
перегиба — концы порталов, за которые верёвка цепляется.

Соглашение об ориентации: плоскость (x, y), «левее» — против часовой стрелки
относительно направления движения. triarea2(a, b, c) > 0, если c левее a->b.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from trinav.navmesh.geometry import points_equal, to_point2, triarea2
from trinav.navmesh.search import SearchNode
from trinav.navmesh.types import Point2

PortalEdge = Tuple[Point2, Point2]


def classify_portal(node: SearchNode) -> PortalEdge:
    """
    Разметить концы портала узла на левый и правый по направлению движения.

    Направление задаётся ячейкой, из которой пришли: её вершина, не лежащая
    на портале, находится позади. Если эта вершина левее ребра a->b, то при
    переходе через ребро конец b оказывается слева.
    """
    if node.portal is None or node.parent is None:
        raise ValueError(f"search node for cell {node.cell.index} has no portal")

    a, b = node.portal.endpoints()
    behind = node.parent.cell.opposite_point(node.portal)
    if triarea2(a, b, behind) > 0.0:
        return b, a
    return a, b


def classify_portals(rough_path: Sequence[SearchNode]) -> List[PortalEdge]:
    """Порталы грубого пути в виде (left, right)."""
    return [classify_portal(node) for node in rough_path]


def funnel_path(
    start: Point2,
    end: Point2,
    portals: Sequence[PortalEdge],
    eps: float = 1e-9,
) -> List[Point2]:
    """
    Funnel Algorithm.

    Args:
        start: Начальная точка.
        end: Конечная точка.
        portals: Порталы (left, right) по порядку прохождения, без
            стартового и финального.
        eps: Допуск сравнения точек.

    Returns:
        Точки пути: start, точки перегиба, end.
    """
    start = to_point2(start)
    end = to_point2(end)
    edges: List[PortalEdge] = [(start, start)]
    edges.extend((to_point2(left), to_point2(right)) for left, right in portals)
    edges.append((end, end))

    path: List[Point2] = [start]

    # Вершина воронки и её границы; индексы: номера порталов
    apex = start
    apex_index = 0
    left = start
    left_index = 0
    right = start
    right_index = 0

    i = 1
    while i < len(edges):
        portal_left, portal_right = edges[i]

        # Правая граница. Площадь >= 0: новая правая точка не правее текущей
        # границы. Ровно 0 (та же прямая, в том числе против левой границы):
        # сужаем, вершину не двигаем.
        if triarea2(apex, right, portal_right) >= 0.0:
            if points_equal(apex, right, eps) or triarea2(apex, left, portal_right) <= 0.0:
                right = portal_right
                right_index = i
            else:
                # Правая граница перешла через левую: левая становится вершиной
                apex = left
                apex_index = left_index
                if not points_equal(path[-1], apex, eps):
                    path.append(apex)
                left = right = apex
                left_index = right_index = apex_index
                i = apex_index + 1
                continue

        # Левая граница, симметрично.
        if triarea2(apex, left, portal_left) <= 0.0:
            if points_equal(apex, left, eps) or triarea2(apex, right, portal_left) >= 0.0:
                left = portal_left
                left_index = i
            else:
                apex = right
                apex_index = right_index
                if not points_equal(path[-1], apex, eps):
                    path.append(apex)
                left = right = apex
                left_index = right_index = apex_index
                i = apex_index + 1
                continue

        i += 1

    if not points_equal(path[-1], end, eps):
        path.append(end)
    elif len(path) == 1:
        # start совпадает с end
        path.append(end)

    return path


def smooth_path(
    start: Point2,
    end: Point2,
    rough_path: Sequence[SearchNode],
    eps: float = 1e-9,
) -> List[Point2]:
    """Сгладить грубый путь A*: разметка порталов и funnel."""
    return funnel_path(start, end, classify_portals(rough_path), eps)
