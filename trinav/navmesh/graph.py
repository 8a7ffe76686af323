"""
Граф треугольников навигационной поверхности.

NavGraph — арена ячеек (по одной на треугольник), связанных общими рёбрами.
GraphBuilder строит граф инкрементально: один треугольник за шаг, чтобы
построение можно было размазать по кадрам или унести в фоновый поток.
Пока построение не закончено, граф не готов и для запросов считается пустым.
"""

from __future__ import annotations

import threading
from typing import Iterator, List, Optional, Tuple

import numpy as np

from trinav import log
from trinav.geombase import as_pose
from trinav.navmesh.geometry import centroid, project_points, triarea2, weld
from trinav.navmesh.types import (
    Cell,
    DegenerateTriangleError,
    InvalidMeshError,
    NavGraphConfig,
    Point2,
    Portal,
)

MAX_NEIGHBORS = 3


class NavGraph:
    """
    Граф ячеек.

    Ячейки хранятся в списке, индекс ячейки — её идентификатор. Соседство
    хранится словарями индекс -> Portal, без прямых ссылок между ячейками.
    Наполняется только GraphBuilder; после готовности не изменяется.
    """

    def __init__(self) -> None:
        self._cells: List[Cell] = []
        self._ready = threading.Event()

    @property
    def ready(self) -> bool:
        """Граф полностью построен."""
        return self._ready.is_set()

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    @property
    def cells(self) -> Tuple[Cell, ...]:
        """Ячейки графа. Пустой кортеж, пока граф не готов."""
        if not self.ready:
            return ()
        return tuple(self._cells)

    def cell(self, index: int) -> Cell:
        return self._cells[index]

    def __len__(self) -> int:
        return len(self._cells) if self.ready else 0

    # --- Debug introspection (read-only) ---

    def portals(self) -> List[Portal]:
        """Все порталы графа, каждый один раз."""
        result = []
        for cell in self.cells:
            for other, portal in cell.neighbors.items():
                if cell.index < other:
                    result.append(portal)
        return result

    def debug_links(self) -> List[Tuple[Point2, Point2]]:
        """Отрезки центр-центр для каждой пары соседей."""
        return [
            (self._cells[a].centroid, self._cells[b].centroid)
            for a, b in (portal.cells for portal in self.portals())
        ]

    def cell_outlines(self) -> List[Tuple[Point2, Point2, Point2]]:
        return [cell.points for cell in self.cells]

    # --- Builder interface ---

    def _append(self, cell: Cell) -> None:
        self._cells.append(cell)

    def _mark_ready(self) -> None:
        self._ready.set()


class GraphBuilder:
    """
    Инкрементальное построение NavGraph из треугольного меша.

    Использование:
        builder = GraphBuilder(triangles, vertices, transform)
        while not builder.step():   # один треугольник за тик
            ...
        graph = builder.graph

    или builder.run() (синхронно), или builder.start_background() (поток).
    """

    def __init__(
        self,
        triangles,
        vertices,
        transform=None,
        config: Optional[NavGraphConfig] = None,
    ) -> None:
        self.config = config or NavGraphConfig()

        vertices = _validate_vertices(vertices)
        self._triangles = _validate_triangles(triangles, len(vertices))

        world = as_pose(transform).transform_points(vertices)
        self._points2d = project_points(world) if len(world) else np.zeros((0, 2))

        self._graph = NavGraph()
        self._next_triangle = 0
        self._skipped: List[int] = []
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def graph(self) -> NavGraph:
        return self._graph

    @property
    def triangle_count(self) -> int:
        return len(self._triangles) // 3

    @property
    def done(self) -> bool:
        return self._graph.ready

    @property
    def progress(self) -> float:
        """Доля обработанных треугольников, 0..1."""
        if self.triangle_count == 0:
            return 1.0 if self.done else 0.0
        return self._next_triangle / self.triangle_count

    @property
    def skipped_triangles(self) -> List[int]:
        """Треугольники, пропущенные как вырожденные (политика "skip")."""
        return list(self._skipped)

    def step(self) -> bool:
        """
        Обработать один треугольник.

        Returns:
            True, если граф построен (и флаг готовности выставлен).
        """
        with self._lock:
            if self.done:
                return True

            if self._next_triangle < self.triangle_count:
                tri = self._next_triangle
                self._add_triangle(tri)
                self._next_triangle = tri + 1

            if self._next_triangle >= self.triangle_count:
                self._graph._mark_ready()
                log.info(
                    f"[NavGraph] built {len(self._graph)} cells from "
                    f"{self.triangle_count} triangles ({len(self._skipped)} skipped)"
                )
                return True
            return False

    def steps(self) -> Iterator[int]:
        """Итератор по шагам построения; отдаёт номер обработанного треугольника."""
        while not self.done:
            tri = self._next_triangle
            self.step()
            yield tri

    def run(self) -> NavGraph:
        """Достроить граф синхронно."""
        while not self.step():
            pass
        return self._graph

    def start_background(self) -> threading.Thread:
        """Запустить построение в фоновом потоке."""
        if self._worker is not None:
            raise RuntimeError("Background build already started")
        self._worker = threading.Thread(
            target=self._run_worker, name="navgraph-builder", daemon=True
        )
        self._worker.start()
        return self._worker

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Дождаться окончания фонового построения.

        Ошибка, возникшая в фоновом потоке, пробрасывается отсюда.
        """
        if self._worker is not None:
            self._worker.join(timeout)
        if self._error is not None:
            raise self._error
        return self._graph.ready

    def result(self, timeout: Optional[float] = None) -> NavGraph:
        if not self.wait_ready(timeout):
            raise TimeoutError("Navigation graph is not built yet")
        return self._graph

    def _run_worker(self) -> None:
        try:
            self.run()
        except Exception as e:
            self._error = e
            log.error(e, "[NavGraph] background build failed")

    def _add_triangle(self, tri: int) -> None:
        ia, ib, ic = self._triangles[3 * tri: 3 * tri + 3]
        decimals = self.config.weld_decimals
        points = (
            weld(self._points2d[ia], decimals),
            weld(self._points2d[ib], decimals),
            weld(self._points2d[ic], decimals),
        )

        if len(set(points)) < 3 or abs(triarea2(*points)) <= self.config.degenerate_area_epsilon:
            if self.config.on_degenerate == "raise":
                raise DegenerateTriangleError(tri, points)
            log.warn(f"[NavGraph] skipping degenerate triangle {tri}: {list(points)}")
            self._skipped.append(tri)
            return

        cell = Cell(
            index=len(self._graph._cells),
            triangle=tri,
            points=points,
            centroid=centroid(points),
        )
        point_set = cell.point_set

        # Полный перебор уже построенных ячеек. У треугольника не больше
        # трёх соседей, после третьего можно остановиться.
        found = 0
        for other in reversed(self._graph._cells):
            common = point_set & other.point_set
            if len(common) != 2:
                continue
            if len(other.neighbors) >= MAX_NEIGHBORS:
                log.warn(
                    f"[NavGraph] non-manifold edge {sorted(common)}: cell {other.index} "
                    f"already has {MAX_NEIGHBORS} neighbors, triangle {tri} not linked"
                )
                continue
            portal = Portal(points=frozenset(common), cells=(other.index, cell.index))
            cell.neighbors[other.index] = portal
            other.neighbors[cell.index] = portal
            found += 1
            if found == MAX_NEIGHBORS:
                break

        self._graph._append(cell)


def build_graph(
    triangles,
    vertices,
    transform=None,
    config: Optional[NavGraphConfig] = None,
) -> NavGraph:
    """Построить граф синхронно."""
    return GraphBuilder(triangles, vertices, transform, config).run()


def _validate_vertices(vertices) -> np.ndarray:
    try:
        vertices = np.asarray(vertices, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidMeshError(f"vertices are not numeric: {e}") from e

    if vertices.size == 0:
        return np.zeros((0, 3))
    if vertices.ndim != 2 or vertices.shape[1] != 3:
        raise InvalidMeshError(f"vertices must be an (N, 3) array, got shape {vertices.shape}")
    if not np.all(np.isfinite(vertices)):
        raise InvalidMeshError("vertices contain NaN or infinite values")
    return vertices


def _validate_triangles(triangles, vertex_count: int) -> np.ndarray:
    triangles = np.asarray(triangles)
    if triangles.size == 0:
        return np.zeros(0, dtype=np.int64)

    if triangles.ndim == 2:
        if triangles.shape[1] != 3:
            raise InvalidMeshError(
                f"triangle array must have 3 columns, got shape {triangles.shape}"
            )
        triangles = triangles.reshape(-1)
    elif triangles.ndim != 1:
        raise InvalidMeshError(f"triangle indices must be flat or (M, 3), got shape {triangles.shape}")

    if not np.issubdtype(triangles.dtype, np.integer):
        raise InvalidMeshError(f"triangle indices must be integers, got dtype {triangles.dtype}")

    if len(triangles) % 3 != 0:
        raise InvalidMeshError(
            f"triangle index count {len(triangles)} is not divisible by 3"
        )

    low = int(triangles.min())
    high = int(triangles.max())
    if low < 0 or high >= vertex_count:
        raise InvalidMeshError(
            f"triangle indices out of range [0, {vertex_count}): min={low}, max={high}"
        )

    return triangles.astype(np.int64)
