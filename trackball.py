# =============================
# Trackball math
# =============================
"""
Deformed virtual trackball.

A pointer position in normalized window coordinates is lifted onto a
sphere of radius ``size`` near the center and onto the hyperbolic sheet
``z = (size / sqrt(2))**2 / d`` further out, so the mapping stays smooth
and bounded over the whole plane.  Two lifted points give a rotation axis
(their cross product) and an angle (their chord length).

Inputs are expected in ``[-1, 1]`` but nothing here raises outside it.
"""

import math

import numpy as np

from config import TRACKBALL_SIZE
from transforms import normalize, quat_to_matrix3

_INV_SQRT2 = 0.70710678118654752440


def project_to_sphere(r: float, x: float, y: float) -> float:
    """Height of ``(x, y)`` on the sphere of radius ``r`` or on the
    hyperbolic sheet that continues it past ``d = r / sqrt(2)``."""
    d = math.sqrt(x * x + y * y)
    if d < r * _INV_SQRT2:
        return math.sqrt(r * r - d * d)
    t = r * _INV_SQRT2
    return t * t / d


def trackball(p1x: float, p1y: float, p2x: float, p2y: float,
              rotation, size: float = TRACKBALL_SIZE):
    """Rotation taking pointer position ``p1`` to ``p2``.

    The points are expressed in the camera basis given by ``rotation``
    (quaternion ``[x, y, z, w]``), so the returned axis is in the same
    space as ``rotation`` itself, not in screen space.

    Returns ``(axis, angle)``: unit axis (zeros when the points coincide)
    and angle in radians within ``[0, pi/2]``.
    """
    m = quat_to_matrix3(rotation)
    side = m @ np.array([1.0, 0.0, 0.0])
    up = m @ np.array([0.0, 1.0, 0.0])
    look = m @ np.array([0.0, 0.0, -1.0])

    p1 = side * p1x + up * p1y - look * project_to_sphere(size, p1x, p1y)
    p2 = side * p2x + up * p2y - look * project_to_sphere(size, p2x, p2y)

    # p2 x p1, not p1 x p2: right-handed quaternion rotations
    axis = normalize(np.cross(p2, p1))

    t = np.linalg.norm(p2 - p1) / (2.0 * size)
    t = max(-1.0, min(1.0, t))
    return axis, math.asin(t)
