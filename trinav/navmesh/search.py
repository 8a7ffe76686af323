"""
A* поиск по графу ячеек.

Стоимость считается между «представительными» точками ячеек: стартовая
точка для стартовой ячейки, конечная точка для конечной, центр — для всех
остальных. Эвристика — евклидово расстояние до конечной точки.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from typing import Dict, List, Optional

from trinav.navmesh.geometry import distance
from trinav.navmesh.graph import NavGraph
from trinav.navmesh.types import Cell, Point2, Portal


@dataclass(eq=False)
class SearchNode:
    """Служебный узел A*; живёт только в рамках одного запроса."""

    cell: Cell
    point: Point2
    g: float = float("inf")
    h: float = 0.0
    f: float = float("inf")
    parent: Optional["SearchNode"] = None
    portal: Optional[Portal] = None
    closed: bool = False
    version: int = field(default=0, repr=False)
    """Номер актуальной записи в очереди; устаревшие записи пропускаются."""


def astar_cells(
    graph: NavGraph,
    start_cell: Cell,
    end_cell: Cell,
    start_point: Point2,
    end_point: Point2,
) -> List[SearchNode]:
    """
    A* поиск цепочки ячеек.

    Args:
        graph: Готовый граф.
        start_cell: Ячейка со стартовой точкой.
        end_cell: Ячейка с конечной точкой.
        start_point: Стартовая точка (2D).
        end_point: Конечная точка (2D).

    Returns:
        Узлы пути от старта к финишу без стартового узла, или пустой
        список, если пути нет (или старт и финиш в одной ячейке).
    """
    if start_cell.index == end_cell.index:
        return []

    start = SearchNode(cell=start_cell, point=start_point, g=0.0)
    start.h = distance(start_point, end_point)
    start.f = start.h

    nodes: Dict[int, SearchNode] = {start_cell.index: start}

    # (f, counter, version, node): counter делает порядок строгим
    counter = 0
    open_set: list = [(start.f, counter, start.version, start)]

    while open_set:
        _, _, version, current = heapq.heappop(open_set)
        if current.closed or version != current.version:
            continue
        current.closed = True

        if current.cell.index == end_cell.index:
            return _unwind(current)

        for neighbor_index, portal in current.cell.neighbors.items():
            neighbor = nodes.get(neighbor_index)
            if neighbor is not None and neighbor.closed:
                continue

            if neighbor is None:
                cell = graph.cell(neighbor_index)
                point = end_point if neighbor_index == end_cell.index else cell.centroid
                neighbor = SearchNode(cell=cell, point=point)
                neighbor.h = distance(point, end_point)
                nodes[neighbor_index] = neighbor

            tentative_g = current.g + distance(current.point, neighbor.point)
            if tentative_g < neighbor.g:
                neighbor.g = tentative_g
                neighbor.f = tentative_g + neighbor.h
                neighbor.parent = current
                neighbor.portal = portal
                neighbor.version += 1
                counter += 1
                heapq.heappush(open_set, (neighbor.f, counter, neighbor.version, neighbor))

    return []


def _unwind(node: SearchNode) -> List[SearchNode]:
    """Восстановить путь по ссылкам parent, без стартового узла."""
    path: List[SearchNode] = []
    while node.parent is not None:
        path.append(node)
        node = node.parent
    path.reverse()
    return path


def path_cells(path: List[SearchNode]) -> List[int]:
    """Индексы ячеек грубого пути."""
    return [node.cell.index for node in path]
