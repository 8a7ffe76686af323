"""
Trinav - поиск пути по треугольным навигационным мешам.

Основные модули:
- geombase - трансформация меша из локальных координат в мировые
- navmesh - граф ячеек, A*, funnel-сглаживание
- loaders - загрузка мешей (OBJ)
"""

from .geombase import GeneralPose3
from .navmesh import NavMeshPathfinder, NavGraphConfig

__version__ = '0.1.0'

__all__ = [
    'GeneralPose3',
    'NavMeshPathfinder',
    'NavGraphConfig',
]
