# =============================
# Renderer — terrain mesh & pivot marker
# =============================
"""
Owns the shader programs, VBOs and VAOs for the viewport.

The ``Renderer`` never touches input or camera state; it draws the
terrain with whatever view matrix the manipulator produced.
"""

import logging

import numpy as np
import moderngl

from config import FOV_DEG, NEAR_FACTOR, FAR_FACTOR
from shaders import (
    TERRAIN_VERTEX_SHADER, TERRAIN_FRAGMENT_SHADER,
    PIVOT_VERTEX_SHADER, PIVOT_FRAGMENT_SHADER,
)
from transforms import perspective

log = logging.getLogger(__name__)


class Renderer:
    """OpenGL rendering of a ``MeshTerrain`` and the camera pivot."""

    def __init__(self, ctx: moderngl.Context, terrain):
        """
        Parameters
        ----------
        ctx : moderngl.Context
        terrain : MeshTerrain
            Mesh is uploaded once; the terrain is static.
        """
        self.ctx = ctx

        # ── Programs ──
        self.prog = ctx.program(
            vertex_shader=TERRAIN_VERTEX_SHADER,
            fragment_shader=TERRAIN_FRAGMENT_SHADER)
        self.pivot_prog = ctx.program(
            vertex_shader=PIVOT_VERTEX_SHADER,
            fragment_shader=PIVOT_FRAGMENT_SHADER)

        # ── Terrain VBO / IBO ──
        mesh = terrain.mesh
        data = np.hstack([
            np.asarray(mesh.vertices, dtype='f4'),
            np.asarray(mesh.vertex_normals, dtype='f4'),
        ])
        self._vbo = ctx.buffer(np.ascontiguousarray(data).tobytes())
        self._ibo = ctx.buffer(
            np.asarray(mesh.faces, dtype='i4').tobytes())
        self._vao = ctx.vertex_array(
            self.prog,
            [(self._vbo, '3f 3f', 'in_position', 'in_normal')],
            index_buffer=self._ibo)

        z = np.asarray(mesh.vertices)[:, 2]
        self.prog['height_min'].value = float(z.min())
        self.prog['height_max'].value = float(z.max())
        self.prog['light_dir'].value = (0.4, -0.5, 0.8)
        self.prog['ambient'].value = 0.25

        # ── Pivot cross (3 lines, rescaled per frame) ──
        self._pivot_vbo = ctx.buffer(reserve=6 * 3 * 4)
        self._pivot_vao = ctx.vertex_array(
            self.pivot_prog, [(self._pivot_vbo, '3f', 'in_position')])

        self.model_scale = max(terrain.bounding_sphere().radius, 1e-3)
        log.info("Renderer: %d triangles uploaded", len(mesh.faces))

    def projection(self, width, height):
        aspect = max(width, 1) / max(height, 1)
        return perspective(np.radians(FOV_DEG), aspect,
                           NEAR_FACTOR * self.model_scale,
                           FAR_FACTOR * self.model_scale)

    def render(self, width, height, manipulator, bg_color=(0.05, 0.06, 0.08)):
        self.ctx.viewport = (0, 0, width, height)
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.clear(*bg_color, 1.0, depth=1.0)

        mvp = self.projection(width, height) @ manipulator.get_inverse_matrix()
        # numpy row-major → OpenGL column-major
        mvp_gl = mvp.T.astype('f4')

        self.prog['mvp'].write(mvp_gl.tobytes())
        self._vao.render(moderngl.TRIANGLES)

        self._draw_pivot(manipulator, mvp_gl)

    def _draw_pivot(self, manipulator, mvp_gl):
        frame = manipulator.coordinate_frame
        c = frame[:3, 3]
        size = 0.02 * manipulator.distance
        pts = []
        for axis in range(3):
            d = frame[:3, axis] * size
            pts.extend([c - d, c + d])
        self._pivot_vbo.write(np.asarray(pts, dtype='f4').tobytes())
        self.pivot_prog['mvp'].write(mvp_gl.tobytes())
        self.pivot_prog['color'].value = (1.0, 0.35, 0.2)
        self.ctx.disable(moderngl.DEPTH_TEST)
        self._pivot_vao.render(moderngl.LINES)
        self.ctx.enable(moderngl.DEPTH_TEST)

    def release(self):
        for obj in (self._vao, self._pivot_vao, self._vbo, self._ibo,
                    self._pivot_vbo, self.prog, self.pivot_prog):
            obj.release()
