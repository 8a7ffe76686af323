"""GeneralPose3 - local-to-world transform of a navigation surface.

A pose is a rotation quaternion, a translation and a per-axis scale.
A point is mapped as:
    world = lin + qrot(ang, scale * local)
"""

import math
import numpy
from trinav.util import qrot, qnormalize


class GeneralPose3:
    """A 3D Pose with scale, represented by rotation quaternion, translation vector, and scale."""

    __slots__ = ('ang', 'lin', 'scale')

    def __init__(
        self,
        ang: numpy.ndarray = None,
        lin: numpy.ndarray = None,
        scale: numpy.ndarray = None
    ):
        if ang is None:
            ang = numpy.array([0.0, 0.0, 0.0, 1.0])
        if lin is None:
            lin = numpy.array([0.0, 0.0, 0.0])
        if scale is None:
            scale = numpy.array([1.0, 1.0, 1.0])
        self.ang = numpy.asarray(ang, dtype=float)
        self.lin = numpy.asarray(lin, dtype=float)
        self.scale = numpy.asarray(scale, dtype=float)

    @staticmethod
    def identity() -> 'GeneralPose3':
        return GeneralPose3()

    def __repr__(self):
        return f"GeneralPose3(ang={self.ang}, lin={self.lin}, scale={self.scale})"

    def transform_point(self, point: numpy.ndarray) -> numpy.ndarray:
        """Transform a 3D point from local to world space."""
        return qrot(self.ang, self.scale * numpy.asarray(point, dtype=float)) + self.lin

    def transform_points(self, points: numpy.ndarray) -> numpy.ndarray:
        """Transform an (N, 3) array of points from local to world space."""
        points = numpy.asarray(points, dtype=float)
        if len(points) == 0:
            return points.reshape(0, 3)
        return qrot(self.ang, points * self.scale) + self.lin

    # --- Factory methods ---

    @staticmethod
    def rotation(axis: numpy.ndarray, angle: float) -> 'GeneralPose3':
        """Rotation around an axis by an angle in radians."""
        axis = numpy.asarray(axis, dtype=float)
        axis = axis / numpy.linalg.norm(axis)
        s = math.sin(angle / 2)
        c = math.cos(angle / 2)
        q = numpy.array([axis[0] * s, axis[1] * s, axis[2] * s, c])
        return GeneralPose3(ang=q)

    @staticmethod
    def translation(x: float, y: float, z: float) -> 'GeneralPose3':
        return GeneralPose3(lin=numpy.array([x, y, z], dtype=float))

    @staticmethod
    def scaling(sx: float, sy: float = None, sz: float = None) -> 'GeneralPose3':
        """Scale-only pose. A single argument means uniform scale."""
        if sy is None:
            sy = sx
        if sz is None:
            sz = sx
        return GeneralPose3(scale=numpy.array([sx, sy, sz], dtype=float))

    @staticmethod
    def from_matrix(matrix: numpy.ndarray) -> 'GeneralPose3':
        """Create GeneralPose3 from a 4x4 or 3x4 TRS matrix."""
        matrix = numpy.asarray(matrix, dtype=float)
        if matrix.shape == (3, 4):
            mat = numpy.eye(4)
            mat[:3, :] = matrix
            matrix = mat
        if matrix.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 or 3x4 matrix, got shape {matrix.shape}")

        lin = matrix[:3, 3].copy()
        scale = numpy.linalg.norm(matrix[:3, :3], axis=0)

        rot = matrix[:3, :3].copy()
        for col in range(3):
            if scale[col] > 1e-8:
                rot[:, col] /= scale[col]

        return GeneralPose3(ang=_matrix_to_quat(rot), lin=lin, scale=scale)


def _matrix_to_quat(rot: numpy.ndarray) -> numpy.ndarray:
    trace = numpy.trace(rot)
    if trace > 0:
        s = 0.5 / math.sqrt(trace + 1.0)
        q = [
            (rot[2, 1] - rot[1, 2]) * s,
            (rot[0, 2] - rot[2, 0]) * s,
            (rot[1, 0] - rot[0, 1]) * s,
            0.25 / s,
        ]
    elif rot[0, 0] > rot[1, 1] and rot[0, 0] > rot[2, 2]:
        s = 2.0 * math.sqrt(1.0 + rot[0, 0] - rot[1, 1] - rot[2, 2])
        q = [
            0.25 * s,
            (rot[0, 1] + rot[1, 0]) / s,
            (rot[0, 2] + rot[2, 0]) / s,
            (rot[2, 1] - rot[1, 2]) / s,
        ]
    elif rot[1, 1] > rot[2, 2]:
        s = 2.0 * math.sqrt(1.0 + rot[1, 1] - rot[0, 0] - rot[2, 2])
        q = [
            (rot[0, 1] + rot[1, 0]) / s,
            0.25 * s,
            (rot[1, 2] + rot[2, 1]) / s,
            (rot[0, 2] - rot[2, 0]) / s,
        ]
    else:
        s = 2.0 * math.sqrt(1.0 + rot[2, 2] - rot[0, 0] - rot[1, 1])
        q = [
            (rot[0, 2] + rot[2, 0]) / s,
            (rot[1, 2] + rot[2, 1]) / s,
            0.25 * s,
            (rot[1, 0] - rot[0, 1]) / s,
        ]
    return qnormalize(numpy.array(q))


def as_pose(transform) -> GeneralPose3:
    """Coerce None, a GeneralPose3 or a 4x4/3x4 matrix into a GeneralPose3."""
    if transform is None:
        return GeneralPose3.identity()
    if isinstance(transform, GeneralPose3):
        return transform
    return GeneralPose3.from_matrix(numpy.asarray(transform, dtype=float))
