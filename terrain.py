# =============================
# Terrain — bounding sphere & ray intersection
# =============================
"""
The manipulator only needs two things from a scene:

  * ``bounding_sphere()`` — center + radius, used for model scale, the
    home position and to size every probe ray;
  * ``intersect(start, end)`` — the hit closest to ``start`` on the
    segment, or ``None``.

``MeshTerrain`` answers both for any ``trimesh.Trimesh``;
``heightfield_mesh`` builds such a mesh from a height grid.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import trimesh

log = logging.getLogger(__name__)

_SEGMENT_TOL = 1e-6


@dataclass(frozen=True)
class BoundingSphere:
    center: np.ndarray
    radius: float


@dataclass(frozen=True)
class Hit:
    point: np.ndarray
    normal: np.ndarray


class Terrain:
    """Scene contract consumed by ``TerrainManipulator``."""

    def bounding_sphere(self) -> BoundingSphere:
        raise NotImplementedError

    def intersect(self, start, end) -> Optional[Hit]:
        raise NotImplementedError


class MeshTerrain(Terrain):
    """Triangle-mesh terrain backed by trimesh's ray queries."""

    def __init__(self, mesh: trimesh.Trimesh):
        self.mesh = mesh
        vertices = np.asarray(mesh.vertices, dtype=np.float64)
        center = np.asarray(mesh.bounds, dtype=np.float64).mean(axis=0)
        radius = float(np.linalg.norm(vertices - center, axis=1).max()) \
            if len(vertices) else 0.0
        self._bound = BoundingSphere(center=center, radius=radius)
        log.info("Terrain: %d vertices, %d faces, radius %.3f",
                 len(mesh.vertices), len(mesh.faces), radius)

    @classmethod
    def from_heights(cls, heights, spacing: float = 1.0,
                     height_scale: float = 1.0) -> "MeshTerrain":
        return cls(heightfield_mesh(heights, spacing, height_scale))

    def bounding_sphere(self) -> BoundingSphere:
        return self._bound

    def intersect(self, start, end) -> Optional[Hit]:
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        seg = end - start
        length = float(np.linalg.norm(seg))
        if length < _SEGMENT_TOL:
            return None
        direction = seg / length

        locations, _index_ray, index_tri = self.mesh.ray.intersects_location(
            ray_origins=start[np.newaxis, :],
            ray_directions=direction[np.newaxis, :],
            multiple_hits=True)
        if len(locations) == 0:
            return None

        # rays are infinite — keep hits on the segment only
        t = (np.asarray(locations) - start) @ direction
        on_segment = (t >= -_SEGMENT_TOL) & (t <= length + _SEGMENT_TOL)
        if not on_segment.any():
            return None
        k = int(np.argmin(np.where(on_segment, t, np.inf)))
        return Hit(point=np.array(locations[k], dtype=np.float64),
                   normal=np.array(self.mesh.face_normals[index_tri[k]],
                                   dtype=np.float64))


# =============================
# Heightfields
# =============================

def heightfield_mesh(heights, spacing: float = 1.0,
                     height_scale: float = 1.0) -> trimesh.Trimesh:
    """Regular grid → triangle mesh in the XY plane, Z up, centered on 0.

    ``heights[i, j]`` is the sample at row ``i`` (Y) and column ``j`` (X).
    """
    heights = np.asarray(heights, dtype=np.float64)
    if heights.ndim != 2 or heights.shape[0] < 2 or heights.shape[1] < 2:
        raise ValueError(
            f"heightfield needs a 2D grid of at least 2x2, got {heights.shape}")
    rows, cols = heights.shape

    xs = (np.arange(cols) - (cols - 1) * 0.5) * spacing
    ys = (np.arange(rows) - (rows - 1) * 0.5) * spacing
    gx, gy = np.meshgrid(xs, ys)
    vertices = np.column_stack(
        [gx.ravel(), gy.ravel(), heights.ravel() * height_scale])

    idx = np.arange(rows * cols).reshape(rows, cols)
    v00 = idx[:-1, :-1].ravel()
    v01 = idx[:-1, 1:].ravel()
    v10 = idx[1:, :-1].ravel()
    v11 = idx[1:, 1:].ravel()
    # counter-clockwise seen from +Z
    faces = np.concatenate([
        np.column_stack([v00, v01, v11]),
        np.column_stack([v00, v11, v10]),
    ])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
