"""Quaternion helpers. Quaternions are stored as (x, y, z, w)."""

import numpy


def qrot(q: numpy.ndarray, v: numpy.ndarray) -> numpy.ndarray:
    """Rotate vector v by unit quaternion q.

    Works on a single vector (3,) and on a batch (N, 3).
    """
    q_vec = numpy.asarray(q[:3], dtype=float)
    w = float(q[3])
    v = numpy.asarray(v, dtype=float)
    # v' = v + 2w(q x v) + 2 q x (q x v)
    t = 2.0 * numpy.cross(q_vec, v)
    return v + w * t + numpy.cross(q_vec, t)


def qnormalize(q: numpy.ndarray) -> numpy.ndarray:
    norm = numpy.linalg.norm(q)
    if norm == 0.0:
        return numpy.array([0.0, 0.0, 0.0, 1.0])
    return numpy.asarray(q, dtype=float) / norm
