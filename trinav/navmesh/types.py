"""
Базовые структуры данных для графа навигации.

Точки — кортежи (x, y) в плоскости навигации. Плоскость навигации —
это мировая XZ плоскость: высота (Y) отбрасывается.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, Tuple

Point2 = Tuple[float, float]

DEGENERATE_POLICIES = ("raise", "skip")


class NavMeshError(Exception):
    """Базовая ошибка навигационной подсистемы."""


class InvalidMeshError(NavMeshError, ValueError):
    """Некорректный буфер индексов/вершин меша."""


class DegenerateTriangleError(InvalidMeshError):
    """Треугольник вырождается после проекции на плоскость навигации."""

    def __init__(self, triangle: int, points: tuple) -> None:
        super().__init__(
            f"triangle {triangle} is degenerate after projection: {list(points)}"
        )
        self.triangle = triangle
        self.points = points


@dataclass
class NavGraphConfig:
    """Конфигурация построения графа и запросов к нему."""

    weld_decimals: int = 6
    """Округление спроецированных координат. Совпадающие после округления точки — одна вершина."""

    point_epsilon: float = 1e-9
    """Допуск сравнения точек и попадания точки на ребро."""

    degenerate_area_epsilon: float = 1e-12
    """Минимальная удвоенная площадь спроецированного треугольника."""

    on_degenerate: str = "raise"
    """Что делать с вырожденным треугольником: "raise" или "skip"."""

    def __post_init__(self) -> None:
        if self.on_degenerate not in DEGENERATE_POLICIES:
            raise ValueError(
                f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {self.on_degenerate!r}"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "NavGraphConfig":
        default = NavGraphConfig()
        return NavGraphConfig(
            weld_decimals=int(data.get("weld_decimals", default.weld_decimals)),
            point_epsilon=float(data.get("point_epsilon", default.point_epsilon)),
            degenerate_area_epsilon=float(
                data.get("degenerate_area_epsilon", default.degenerate_area_epsilon)
            ),
            on_degenerate=data.get("on_degenerate", default.on_degenerate),
        )


@dataclass(frozen=True)
class Portal:
    """Общее ребро двух соседних ячеек."""

    points: frozenset
    """Ровно две точки ребра."""

    cells: Tuple[int, int]
    """Индексы ячеек, которые соединяет портал."""

    def endpoints(self) -> Tuple[Point2, Point2]:
        """Концы ребра в детерминированном (лексикографическом) порядке."""
        a, b = sorted(self.points)
        return a, b

    def other(self, cell_index: int) -> int:
        """Индекс ячейки по другую сторону портала."""
        a, b = self.cells
        return b if cell_index == a else a


@dataclass
class Cell:
    """
    Ячейка графа — один треугольник меша, спроецированный в 2D.
    """

    index: int
    """Индекс ячейки в графе."""

    triangle: int
    """Номер исходного треугольника в буфере индексов."""

    points: Tuple[Point2, Point2, Point2]
    """Вершины треугольника (порядок из меша)."""

    centroid: Point2
    """Центр треугольника."""

    neighbors: Dict[int, Portal] = field(default_factory=dict)
    """Индекс соседней ячейки -> общий портал."""

    @property
    def point_set(self) -> frozenset:
        return frozenset(self.points)

    def opposite_point(self, portal: Portal) -> Point2:
        """Вершина ячейки, не лежащая на портале."""
        for p in self.points:
            if p not in portal.points:
                return p
        raise ValueError(f"portal {sorted(portal.points)} does not belong to cell {self.index}")
