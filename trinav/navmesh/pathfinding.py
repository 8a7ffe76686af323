"""
NavMeshPathfinder — поиск пути по навигационной поверхности.

Связывает построение графа, поиск ячеек, A* и сглаживание:

    pathfinder = NavMeshPathfinder(triangles, vertices, transform)
    pathfinder.start_background_build()   # или build() / build_step() по тику
    waypoints = pathfinder.compute_path(start, end)

Высота (Y) в путь не возвращается: 3D точки проецируются на XZ, а
восстановление высоты — забота вызывающей стороны (см. path_utils.lift_path).
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from trinav import log
from trinav.navmesh.funnel import smooth_path
from trinav.navmesh.geometry import to_point2
from trinav.navmesh.graph import GraphBuilder, NavGraph
from trinav.navmesh.locator import CellLocator
from trinav.navmesh.search import astar_cells
from trinav.navmesh.types import Cell, NavGraphConfig


class NavMeshPathfinder:
    """
    Поиск пути по одному навигационному мешу.

    Граф строится один раз и живёт столько же, сколько объект. Пока граф не
    готов, compute_path возвращает пустой список.
    """

    def __init__(
        self,
        triangles,
        vertices,
        transform=None,
        config: Optional[NavGraphConfig] = None,
    ) -> None:
        self.config = config or NavGraphConfig()
        self._builder = GraphBuilder(triangles, vertices, transform, self.config)
        self._locator = CellLocator(self._builder.graph, self.config)

    @property
    def graph(self) -> NavGraph:
        return self._builder.graph

    @property
    def builder(self) -> GraphBuilder:
        return self._builder

    @property
    def is_ready(self) -> bool:
        return self._builder.graph.ready

    def build(self) -> NavGraph:
        """Построить граф синхронно."""
        return self._builder.run()

    def build_step(self) -> bool:
        """Один шаг построения (один треугольник). True — граф готов."""
        return self._builder.step()

    def start_background_build(self) -> None:
        self._builder.start_background()

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        return self._builder.wait_ready(timeout)

    def find_cell(self, point, reference=None) -> Optional[Cell]:
        """Ячейка, содержащая точку. reference — опорная точка для выбора на границе."""
        point2d = to_point2(point)
        reference2d = to_point2(reference) if reference is not None else point2d
        return self._locator.locate(point2d, reference2d)

    def compute_path(self, start, end) -> List[np.ndarray]:
        """
        Найти путь между двумя точками.

        Args:
            start: Начальная точка (3D в мировых координатах или 2D).
            end: Конечная точка (3D в мировых координатах или 2D).

        Returns:
            Точки пути (2D, shape (2,)) от start до end включительно,
            или пустой список, если пути нет или граф не готов.
        """
        start2d = to_point2(start)
        end2d = to_point2(end)

        if not self.is_ready:
            log.debug("[NavMeshPathfinder] graph is not ready, returning empty path")
            return []

        start_cell = self._locator.locate(start2d, end2d)
        end_cell = self._locator.locate(end2d, start2d)
        if start_cell is None or end_cell is None:
            log.debug(
                f"[NavMeshPathfinder] point off mesh: start={start2d} "
                f"(cell {_cell_id(start_cell)}), end={end2d} (cell {_cell_id(end_cell)})"
            )
            return []

        if start_cell.index == end_cell.index:
            return [_as_array(start2d), _as_array(end2d)]

        rough_path = astar_cells(self.graph, start_cell, end_cell, start2d, end2d)
        if not rough_path:
            log.debug(
                f"[NavMeshPathfinder] no path from cell {start_cell.index} "
                f"to cell {end_cell.index}"
            )
            return []

        points = smooth_path(start2d, end2d, rough_path, self.config.point_epsilon)
        return [_as_array(p) for p in points]


def _as_array(point) -> np.ndarray:
    return np.array(point, dtype=float)


def _cell_id(cell: Optional[Cell]):
    return cell.index if cell is not None else None
