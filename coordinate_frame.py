# =============================
# Coordinate frame providers
# =============================
"""
Strategies that give the local frame tangent to the terrain at a point.

A frame is a 4x4 rigid transform whose translation is the point itself
and whose third basis column is the local "up".  The manipulator only
ever talks to ``FrameProvider.frame_at``; swap the provider to move from
a flat map to a globe without touching the state machine.
"""

import math

import numpy as np

# WGS84
WGS84_RADIUS_EQUATOR = 6378137.0
WGS84_RADIUS_POLAR = 6356752.3142


def up_vector(frame) -> np.ndarray:
    """Local up (the frame's Z axis) in world space."""
    return np.array(frame[:3, 2], dtype=np.float64)


class FrameProvider:
    """Base class.  Override ``frame_at``."""

    def frame_at(self, x: float, y: float, z: float) -> np.ndarray:
        raise NotImplementedError


class FlatFrameProvider(FrameProvider):
    """World axes everywhere: X east, Y north, Z up."""

    def frame_at(self, x, y, z):
        m = np.eye(4)
        m[:3, 3] = (x, y, z)
        return m


class EllipsoidFrameProvider(FrameProvider):
    """East/north/up frame on an ellipsoid of revolution (geocentric XYZ).

    Defaults to WGS84; pass equal radii for a sphere.
    """

    def __init__(self, radius_equator: float = WGS84_RADIUS_EQUATOR,
                 radius_polar: float = WGS84_RADIUS_POLAR):
        self.radius_equator = radius_equator
        self.radius_polar = radius_polar
        a2 = radius_equator * radius_equator
        b2 = radius_polar * radius_polar
        self._ecc2 = (a2 - b2) / a2

    def lat_lon(self, x: float, y: float, z: float):
        """Geodetic latitude / longitude (radians), Bowring's closed form."""
        a = self.radius_equator
        b = self.radius_polar
        p = math.sqrt(x * x + y * y)
        if p < 1e-9 * a:
            # polar axis — longitude is arbitrary
            return math.copysign(math.pi / 2.0, z) if z != 0.0 else 0.0, 0.0

        e_dash2 = (a * a - b * b) / (b * b)
        theta = math.atan2(z * a, p * b)
        st = math.sin(theta)
        ct = math.cos(theta)
        lat = math.atan2(z + e_dash2 * b * st * st * st,
                         p - self._ecc2 * a * ct * ct * ct)
        lon = math.atan2(y, x)
        return lat, lon

    def frame_at(self, x, y, z):
        lat, lon = self.lat_lon(x, y, z)
        sl, cl = math.sin(lat), math.cos(lat)
        so, co = math.sin(lon), math.cos(lon)

        m = np.eye(4)
        m[:3, 0] = (-so, co, 0.0)                 # east
        m[:3, 1] = (-sl * co, -sl * so, cl)       # north
        m[:3, 2] = (cl * co, cl * so, sl)         # up
        m[:3, 3] = (x, y, z)
        return m
