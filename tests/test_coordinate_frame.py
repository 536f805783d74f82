import math

import numpy as np
import pytest

from coordinate_frame import (
    WGS84_RADIUS_EQUATOR, WGS84_RADIUS_POLAR,
    EllipsoidFrameProvider, FlatFrameProvider, up_vector,
)


def geodetic_to_xyz(lat, lon, a=WGS84_RADIUS_EQUATOR, b=WGS84_RADIUS_POLAR):
    e2 = (a * a - b * b) / (a * a)
    n = a / math.sqrt(1.0 - e2 * math.sin(lat) ** 2)
    return (n * math.cos(lat) * math.cos(lon),
            n * math.cos(lat) * math.sin(lon),
            n * (1.0 - e2) * math.sin(lat))


def test_flat_frame_is_a_translation():
    m = FlatFrameProvider().frame_at(1.0, -2.0, 3.5)
    np.testing.assert_array_equal(m[:3, :3], np.eye(3))
    np.testing.assert_array_equal(m[:3, 3], [1.0, -2.0, 3.5])
    np.testing.assert_array_equal(up_vector(m), [0.0, 0.0, 1.0])


def test_ellipsoid_frame_on_equator():
    m = EllipsoidFrameProvider().frame_at(WGS84_RADIUS_EQUATOR, 0.0, 0.0)
    np.testing.assert_allclose(m[:3, 0], [0.0, 1.0, 0.0], atol=1e-12)   # east
    np.testing.assert_allclose(m[:3, 1], [0.0, 0.0, 1.0], atol=1e-12)   # north
    np.testing.assert_allclose(m[:3, 2], [1.0, 0.0, 0.0], atol=1e-12)   # up
    np.testing.assert_allclose(m[:3, 3], [WGS84_RADIUS_EQUATOR, 0.0, 0.0])


def test_ellipsoid_frame_at_poles():
    provider = EllipsoidFrameProvider()
    north = provider.frame_at(0.0, 0.0, WGS84_RADIUS_POLAR)
    south = provider.frame_at(0.0, 0.0, -WGS84_RADIUS_POLAR)
    np.testing.assert_allclose(up_vector(north), [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(up_vector(south), [0.0, 0.0, -1.0], atol=1e-12)
    assert provider.lat_lon(0.0, 0.0, WGS84_RADIUS_POLAR) == (math.pi / 2.0, 0.0)


def test_sphere_up_points_away_from_center():
    provider = EllipsoidFrameProvider(100.0, 100.0)
    point = np.array([30.0, -40.0, 50.0])
    m = provider.frame_at(*point)
    np.testing.assert_allclose(up_vector(m), point / np.linalg.norm(point),
                               atol=1e-12)


def test_wgs84_latitude_round_trip():
    provider = EllipsoidFrameProvider()
    lat, lon = math.radians(45.0), math.radians(30.0)
    got_lat, got_lon = provider.lat_lon(*geodetic_to_xyz(lat, lon))
    assert got_lat == pytest.approx(lat, abs=1e-8)
    assert got_lon == pytest.approx(lon, abs=1e-12)


def test_wgs84_up_is_geodetic_normal():
    provider = EllipsoidFrameProvider()
    lat, lon = math.radians(-33.0), math.radians(151.0)
    m = provider.frame_at(*geodetic_to_xyz(lat, lon))
    expected = [math.cos(lat) * math.cos(lon), math.cos(lat) * math.sin(lon),
                math.sin(lat)]
    np.testing.assert_allclose(up_vector(m), expected, atol=1e-8)


@pytest.mark.parametrize("point", [
    (6378137.0, 0.0, 0.0),
    (1.0e6, -4.0e6, 4.5e6),
    (-3.0e6, 2.0e6, -5.0e6),
    (10.0, 20.0, 6356752.0),
])
def test_ellipsoid_frames_are_right_handed_rotations(point):
    m = EllipsoidFrameProvider().frame_at(*point)
    r = m[:3, :3]
    np.testing.assert_allclose(r.T @ r, np.eye(3), atol=1e-12)
    assert np.linalg.det(r) == pytest.approx(1.0)
    np.testing.assert_array_equal(m[3], [0.0, 0.0, 0.0, 1.0])
