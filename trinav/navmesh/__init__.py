"""
Поиск пути по навигационному мешу.

Алгоритм:
1. Каждый треугольник меша — ячейка графа, соседство по общему ребру
2. Поиск ячеек, содержащих начальную и конечную точки
3. A* по графу ячеек
4. Funnel Algorithm — сглаживание цепочки ячеек в ломаную
"""

from trinav.navmesh.types import (
    Cell,
    Portal,
    NavGraphConfig,
    NavMeshError,
    InvalidMeshError,
    DegenerateTriangleError,
)
from trinav.navmesh.graph import NavGraph, GraphBuilder, build_graph
from trinav.navmesh.locator import CellLocator
from trinav.navmesh.search import SearchNode, astar_cells
from trinav.navmesh.funnel import classify_portals, funnel_path, smooth_path
from trinav.navmesh.pathfinding import NavMeshPathfinder
from trinav.navmesh.path_utils import path_length, sample_path, lift_path
from trinav.navmesh.settings import NavigationSettings, NavigationSettingsManager

__all__ = [
    "Cell",
    "Portal",
    "NavGraphConfig",
    "NavMeshError",
    "InvalidMeshError",
    "DegenerateTriangleError",
    "NavGraph",
    "GraphBuilder",
    "build_graph",
    "CellLocator",
    "SearchNode",
    "astar_cells",
    "classify_portals",
    "funnel_path",
    "smooth_path",
    "NavMeshPathfinder",
    "path_length",
    "sample_path",
    "lift_path",
    "NavigationSettings",
    "NavigationSettingsManager",
]
