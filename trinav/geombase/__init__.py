"""
Базовые геометрические классы (Geometric Base).

- GeneralPose3 - позы с масштабированием (local -> world трансформация меша)
"""

from .general_pose3 import GeneralPose3, as_pose

__all__ = [
    'GeneralPose3',
    'as_pose',
]
