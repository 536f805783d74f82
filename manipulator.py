# =============================
# Terrain manipulator
# =============================
"""
Orbit / pan / zoom camera that keeps its pivot on a terrain surface.

Camera state is ``(distance, rotation, coordinate_frame)``:

  * ``coordinate_frame`` — rigid transform tangent to the terrain at the
    pivot point (translation on the surface, Z = local up);
  * ``rotation`` — camera orientation *relative to that frame*;
  * ``distance`` — eye to pivot along the camera's +Z.

so that ``camera_to_world = frame @ R(rotation) @ T(0, 0, distance)``.

Pointer input goes through a two-sample history.  Left drag orbits with
the virtual trackball, middle (or left+right) drag slides the frame over
the terrain and re-anchors it with a vertical ray, right drag zooms.
Releasing while the pointer still moves keeps replaying the last
movement every frame ("thrown") until the next press.
"""

import enum
import logging

import numpy as np

import config
from config import DEFAULT_DISTANCE, DEFAULT_MODEL_SCALE
from coordinate_frame import FlatFrameProvider, up_vector
from event_history import EventHistory
from events import EventType, MouseButton
from trackball import trackball
from transforms import (
    look_at, quat_conjugate, quat_from_axis_angle, quat_from_matrix,
    quat_identity, quat_multiply, quat_normalize, rigid_inverse,
    rotation_matrix, translation_matrix,
)

log = logging.getLogger(__name__)

_PAN_MASKS = (MouseButton.MIDDLE, MouseButton.LEFT | MouseButton.RIGHT)


class TerrainNotBoundError(RuntimeError):
    """Placement or pan requested before a terrain was bound."""


class ManipulatorState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    THROWN = "thrown"


class TerrainManipulator:
    """Camera manipulator for arbitrary terrain.

    Parameters
    ----------
    frame_provider : FrameProvider, optional
        Local frame strategy; flat world axes by default.
    settings : ManipulatorSettings, optional
        Tunables dict, read on every event.  Defaults to the shared
        ``config.settings`` edited from the UI.
    """

    # event type → handler; handlers return "consumed"
    _TRANSITIONS = {
        EventType.PUSH: "_on_push",
        EventType.DRAG: "_on_drag",
        EventType.RELEASE: "_on_release",
        EventType.KEYDOWN: "_on_keydown",
        EventType.FRAME: "_on_frame",
    }

    def __init__(self, frame_provider=None, settings=None):
        self.frame_provider = frame_provider or FlatFrameProvider()
        self.settings = settings if settings is not None else config.settings

        self.terrain = None
        self.model_scale = DEFAULT_MODEL_SCALE
        self.distance = DEFAULT_DISTANCE
        self.rotation = quat_identity()
        self.coordinate_frame = np.eye(4)

        self.history = EventHistory()
        self.state = ManipulatorState.IDLE

    # ────────────── Terrain binding ──────────────

    def bind(self, terrain):
        """Attach the terrain to navigate over (``None`` detaches)."""
        self.terrain = terrain
        if terrain is not None:
            bs = terrain.bounding_sphere()
            self.model_scale = float(bs.radius)
            log.info("Manipulator bound: center=%s radius=%.3f",
                     np.round(bs.center, 3), bs.radius)

    def _require_terrain(self):
        if self.terrain is None:
            raise TerrainNotBoundError(
                "bind() a terrain before placing or panning the camera")
        return self.terrain

    @property
    def thrown(self) -> bool:
        return self.state is ManipulatorState.THROWN

    @property
    def center(self) -> np.ndarray:
        """Pivot point (frame origin) in world space."""
        return self.coordinate_frame[:3, 3].copy()

    # ────────────── Host entry points ──────────────

    def home(self, actions=None):
        """Look at the terrain from the side, ``home_distance`` radii away."""
        if self.terrain is None:
            return
        bs = self.terrain.bounding_sphere()
        center = np.asarray(bs.center, dtype=np.float64)
        eye = center + np.array(
            [0.0, -self.settings["home_distance"] * bs.radius, 0.0])
        self.compute_position(eye, center, np.array([0.0, 0.0, 1.0]))
        if actions is not None:
            actions.request_redraw()

    def init(self, actions=None):
        """Forget pointer history and inertia (e.g. when made active)."""
        self.history.flush()
        self._enter(ManipulatorState.IDLE)

    def handle(self, ea, actions) -> bool:
        """Process one ``GUIEvent``; returns True when consumed."""
        name = self._TRANSITIONS.get(ea.event_type)
        if name is None:
            return False
        return getattr(self, name)(ea, actions)

    # ────────────── Transitions ──────────────

    def _enter(self, state):
        if state is not self.state:
            log.debug("Manipulator: %s -> %s", self.state.value, state.value)
            self.state = state

    def _restart(self, ea, actions, state):
        """Flush, record ``ea``, recompute, stop continuous updates."""
        self.history.flush()
        self.history.add(ea)
        if self.calc_movement():
            actions.request_redraw()
        actions.request_continuous_update(False)
        self._enter(state)

    def _on_push(self, ea, actions):
        self._restart(ea, actions, ManipulatorState.DRAGGING)
        return True

    def _on_drag(self, ea, actions):
        self.history.add(ea)
        if self.calc_movement():
            actions.request_redraw()
        actions.request_continuous_update(False)
        self._enter(ManipulatorState.DRAGGING)
        return True

    def _on_release(self, ea, actions):
        if ea.button_mask != 0:
            # chorded release — another button still held
            self._restart(ea, actions, ManipulatorState.DRAGGING)
        elif (self.history.is_moving(self.settings["throw_velocity"])
                and self.calc_movement()):
            actions.request_redraw()
            actions.request_continuous_update(True)
            self._enter(ManipulatorState.THROWN)
        else:
            self._restart(ea, actions, ManipulatorState.IDLE)
        return True

    def _on_keydown(self, ea, actions):
        if ea.key != self.settings["reset_key"]:
            return False
        self.history.flush()
        self._enter(ManipulatorState.IDLE)
        self.home(actions)
        actions.request_redraw()
        actions.request_continuous_update(False)
        return True

    def _on_frame(self, ea, actions):
        if self.thrown and self.calc_movement():
            actions.request_redraw()
        return False

    # ────────────── Movement ──────────────

    def calc_movement(self) -> bool:
        """Apply the movement between the two newest samples.

        Returns True when the camera changed.
        """
        deltas = self.history.deltas()
        if deltas is None:
            return False
        dx, dy, _dt = deltas
        if dx == 0 and dy == 0:
            return False

        t0 = self.history.newest
        t1 = self.history.oldest
        mask = t1.button_mask
        if mask == MouseButton.LEFT:
            return self._orbit(t1, t0)
        if mask in _PAN_MASKS:
            return self._pan(dx, dy)
        if mask == MouseButton.RIGHT:
            return self._zoom(dy)
        return False

    def _orbit(self, t1, t0):
        axis, angle = trackball(t1.x, t1.y, t0.x, t0.y, self.rotation,
                                self.settings["trackball_size"])
        delta = quat_from_axis_angle(axis, angle)
        # delta acts inside the local frame, after the current rotation
        self.rotation = quat_normalize(quat_multiply(delta, self.rotation))
        return True

    def _pan(self, dx, dy):
        terrain = self._require_terrain()
        scale = -self.settings["pan_speed"] * self.distance

        r = rotation_matrix(self.rotation)
        moved = (self.coordinate_frame @ r
                 @ translation_matrix(dx * scale, dy * scale, 0.0) @ r.T)
        origin = moved[:3, 3]

        # re-orient at the new origin, then drop it onto the surface
        self.coordinate_frame = self.frame_provider.frame_at(*origin)
        radius = terrain.bounding_sphere().radius
        up = up_vector(self.coordinate_frame)
        start = origin + up * radius
        end = start - up * (2.0 * radius)
        hit = terrain.intersect(start, end)
        if hit is not None:
            self.coordinate_frame = self.frame_provider.frame_at(*hit.point)
            log.debug("Pan: anchored at %s", np.round(hit.point, 3))
        else:
            # TODO: decide whether an unanchored pivot should snap back
            # to the last surface point instead of drifting
            log.info("Pan: unable to intersect with terrain at %s",
                     np.round(origin, 3))
        return True

    def _zoom(self, dy):
        new_distance = self.distance * (1.0 + dy)
        floor = self.model_scale * self.settings["minimum_zoom_scale"]
        if new_distance > floor and new_distance != self.distance:
            self.distance = new_distance
            return True
        return False

    # ────────────── Placement ──────────────

    def compute_position(self, eye, center, up):
        """Place the camera at ``eye`` looking at ``center``, pivoting on
        the terrain where the eye→center segment meets it."""
        terrain = self._require_terrain()
        eye = np.asarray(eye, dtype=np.float64)
        center = np.asarray(center, dtype=np.float64)
        self.distance = float(np.linalg.norm(center - eye))

        hit = terrain.intersect(eye, center)
        if hit is not None:
            log.debug("Placement: hit terrain at %s", np.round(hit.point, 3))
            self.coordinate_frame = self.frame_provider.frame_at(*hit.point)
            self.distance = float(np.linalg.norm(hit.point - eye))
        else:
            log.info("Placement: look vector misses terrain, pivoting on %s",
                     np.round(center, 3))
            self.coordinate_frame = self.frame_provider.frame_at(*center)

        # view = inv(frame) @ inv(R) @ inv(T)  →  inv(R) = rot(view @ frame)
        relative = look_at(eye, center, up) @ self.coordinate_frame
        self.rotation = quat_conjugate(quat_from_matrix(relative))

    def set_by_matrix(self, matrix):
        """Adopt an external camera-to-world pose and re-anchor to terrain."""
        terrain = self._require_terrain()
        matrix = np.asarray(matrix, dtype=np.float64)
        look = -matrix[:3, 2]
        eye = matrix[:3, 3].copy()

        bs = terrain.bounding_sphere()
        length = float(np.linalg.norm(eye - bs.center)) + bs.radius

        hit = terrain.intersect(eye, eye + look * length)
        if hit is not None:
            self.coordinate_frame = self.frame_provider.frame_at(*hit.point)
            self.distance = float(np.linalg.norm(eye - hit.point))
            relative = (rigid_inverse(self.coordinate_frame) @ matrix
                        @ translation_matrix(0.0, 0.0, -self.distance))
            self.rotation = quat_from_matrix(relative)
            return

        # grazing look vector: probe straight down through the eye
        up = up_vector(self.frame_provider.frame_at(*eye))
        hit = terrain.intersect(eye + up * length, eye - up * length)
        if hit is not None:
            log.debug("Placement: vertical probe hit at %s",
                      np.round(hit.point, 3))
            self.coordinate_frame = self.frame_provider.frame_at(*hit.point)
            self.distance = float(np.linalg.norm(eye - hit.point))
            self.rotation = quat_identity()
            return

        log.info("Placement: no terrain under %s, keeping pose unanchored",
                 np.round(eye, 3))
        self.coordinate_frame = self.frame_provider.frame_at(
            *(eye + look * self.distance))
        self.rotation = quat_from_matrix(
            rigid_inverse(self.coordinate_frame) @ matrix)

    def set_by_inverse_matrix(self, view):
        self.set_by_matrix(np.linalg.inv(np.asarray(view, dtype=np.float64)))

    # ────────────── Matrices ──────────────

    def get_matrix(self) -> np.ndarray:
        """Camera-to-world transform."""
        return (self.coordinate_frame @ rotation_matrix(self.rotation)
                @ translation_matrix(0.0, 0.0, self.distance))

    def get_inverse_matrix(self) -> np.ndarray:
        """View matrix (world-to-camera)."""
        return (translation_matrix(0.0, 0.0, -self.distance)
                @ rotation_matrix(quat_conjugate(self.rotation))
                @ rigid_inverse(self.coordinate_frame))

    def eye_position(self) -> np.ndarray:
        return self.get_matrix()[:3, 3]
