import math

import cv2
import numpy as np
import pytest
import trimesh

from config import default_settings
from event_history import PointerSample
from events import MouseButton
from heightmap import load_heightmap, procedural_heights
from manipulator import TerrainManipulator
from terrain import MeshTerrain, heightfield_mesh
from transforms import translation_matrix


@pytest.fixture
def flat():
    # 11x11 samples, spacing 2 → covers [-10, 10] in X and Y at z = 0
    return MeshTerrain.from_heights(np.zeros((11, 11)), spacing=2.0)


# =============================
# Heightfields
# =============================

def test_heightfield_counts():
    mesh = heightfield_mesh(np.zeros((3, 4)))
    assert mesh.vertices.shape == (12, 3)
    assert mesh.faces.shape == (12, 3)


def test_heightfield_is_centered_and_scaled():
    heights = np.array([[0.0, 0.5], [1.0, 0.25]])
    mesh = heightfield_mesh(heights, spacing=4.0, height_scale=10.0)
    np.testing.assert_allclose(mesh.vertices[:, 0], [-2.0, 2.0, -2.0, 2.0])
    np.testing.assert_allclose(mesh.vertices[:, 1], [-2.0, -2.0, 2.0, 2.0])
    np.testing.assert_allclose(mesh.vertices[:, 2], [0.0, 5.0, 10.0, 2.5])


def test_heightfield_faces_point_up():
    mesh = heightfield_mesh(np.zeros((4, 4)))
    assert np.all(mesh.face_normals[:, 2] > 0.99)


@pytest.mark.parametrize("heights", [np.zeros((1, 5)), np.zeros((5, 1)),
                                     np.zeros(9)])
def test_heightfield_rejects_degenerate_grids(heights):
    with pytest.raises(ValueError):
        heightfield_mesh(heights)


# =============================
# MeshTerrain
# =============================

def test_bounding_sphere_of_flat_grid(flat):
    bs = flat.bounding_sphere()
    np.testing.assert_allclose(bs.center, [0.0, 0.0, 0.0], atol=1e-12)
    assert bs.radius == pytest.approx(math.sqrt(200.0))


def test_vertical_segment_hits_surface(flat):
    hit = flat.intersect([1.3, 2.7, 5.0], [1.3, 2.7, -5.0])
    assert hit is not None
    np.testing.assert_allclose(hit.point, [1.3, 2.7, 0.0], atol=1e-9)
    np.testing.assert_allclose(hit.normal, [0.0, 0.0, 1.0], atol=1e-9)


def test_segment_that_stops_short_misses(flat):
    assert flat.intersect([1.3, 2.7, 5.0], [1.3, 2.7, 1.0]) is None


def test_segment_outside_terrain_misses(flat):
    assert flat.intersect([50.0, 50.0, 5.0], [50.0, 50.0, -5.0]) is None


def test_degenerate_segment_misses(flat):
    assert flat.intersect([1.3, 2.7, 0.0], [1.3, 2.7, 0.0]) is None


def test_closest_hit_to_start_wins():
    lower = heightfield_mesh(np.zeros((5, 5)))
    upper = heightfield_mesh(np.full((5, 5), 3.0))
    mesh = trimesh.Trimesh(
        vertices=np.vstack([lower.vertices, upper.vertices]),
        faces=np.vstack([lower.faces, upper.faces + len(lower.vertices)]),
        process=False)
    terrain = MeshTerrain(mesh)

    down = terrain.intersect([0.3, 0.6, 10.0], [0.3, 0.6, -10.0])
    up = terrain.intersect([0.3, 0.6, -10.0], [0.3, 0.6, 10.0])
    assert down.point[2] == pytest.approx(3.0)
    assert up.point[2] == pytest.approx(0.0, abs=1e-9)


def test_oblique_segment(flat):
    hit = flat.intersect([-5.0, 0.3, 4.0], [3.0, 0.3, -4.0])
    assert hit is not None
    np.testing.assert_allclose(hit.point, [-1.0, 0.3, 0.0], atol=1e-9)


def test_manipulator_pans_over_slope():
    # z = 0.1 * (x + 10) along X
    cols = np.arange(21)
    heights = np.tile(cols * 0.1, (20, 1))
    terrain = MeshTerrain.from_heights(heights)

    manip = TerrainManipulator(settings=default_settings())
    manip.bind(terrain)
    manip.distance = 10.0
    manip.coordinate_frame = translation_matrix(0.0, 0.2, 0.0)
    manip.history.add(PointerSample(0.0, 0.0, int(MouseButton.MIDDLE), 0.0))
    manip.history.add(PointerSample(0.1, 0.0, int(MouseButton.MIDDLE), 0.01))
    assert manip.calc_movement()
    np.testing.assert_allclose(manip.center, [-0.5, 0.2, 0.95], atol=1e-9)


def test_home_over_mesh_terrain():
    terrain = MeshTerrain.from_heights(procedural_heights(17, seed=1),
                                       spacing=1.0, height_scale=2.0)
    manip = TerrainManipulator(settings=default_settings())
    manip.bind(terrain)
    manip.home()
    bs = terrain.bounding_sphere()
    expected = bs.center + [0.0, -3.5 * bs.radius, 0.0]
    np.testing.assert_allclose(manip.eye_position(), expected, atol=1e-9)


# =============================
# Heightmaps
# =============================

def test_load_8bit_heightmap(tmp_path):
    path = tmp_path / "h.png"
    cv2.imwrite(str(path), np.array([[0, 255], [51, 102]], dtype=np.uint8))
    heights = load_heightmap(path)
    assert heights.dtype == np.float32
    np.testing.assert_allclose(heights, [[0.0, 1.0], [0.2, 0.4]], atol=1e-6)


def test_load_16bit_heightmap(tmp_path):
    path = tmp_path / "h16.png"
    cv2.imwrite(str(path), np.array([[0, 65535, 13107]], dtype=np.uint16))
    heights = load_heightmap(path)
    np.testing.assert_allclose(heights, [[0.0, 1.0, 0.2]], atol=1e-6)


def test_missing_heightmap_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_heightmap(tmp_path / "nope.png")


def test_procedural_heights_are_deterministic_and_normalized():
    a = procedural_heights(33, seed=4)
    b = procedural_heights(33, seed=4)
    c = procedural_heights(33, seed=5)
    assert a.shape == (33, 33)
    np.testing.assert_array_equal(a, b)
    assert not np.array_equal(a, c)
    assert a.min() == pytest.approx(0.0)
    assert a.max() == pytest.approx(1.0)
