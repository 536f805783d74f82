# =============================
# TerrainForge Viewer — Application
# =============================
"""
Interactive host for ``TerrainManipulator``.

  ``terrain.py``        — ``MeshTerrain`` (bounding sphere, ray queries)
  ``heightmap.py``      — heightmap image loading, procedural hills
  ``manipulator.py``    — ``TerrainManipulator`` (camera state machine)
  ``input_adapter.py``  — ``GlfwEventQueue`` (glfw callbacks → GUIEvent)
  ``renderer.py``       — ``Renderer`` (programs, VAOs, draw)
  ``ui_manager.py``     — ``UIManager`` (ImGui camera panel)

This file contains the thin ``Application`` class: window creation,
event loop, and delegation to the subsystems above.

Usage::

    python main.py [heightmap.png]
"""

import logging
import sys
import time

import glfw
import moderngl
import imgui
from imgui.integrations.glfw import GlfwRenderer

from config import (
    WINDOW_W, WINDOW_H,
    TERRAIN_GRID, TERRAIN_SPACING, TERRAIN_HEIGHT_SCALE, TERRAIN_SEED,
)
from app_state import AppState, ViewerActions
from events import EventType
from input_adapter import GlfwEventQueue
from manipulator import TerrainManipulator
from renderer import Renderer
from heightmap import load_heightmap, procedural_heights
from terrain import MeshTerrain
from ui_manager import UIManager

log = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s [%(levelname)s] %(message)s")

_POINTER_EVENTS = (EventType.PUSH, EventType.RELEASE,
                   EventType.DRAG, EventType.MOVE)
_KEY_EVENTS = (EventType.KEYDOWN, EventType.KEYUP)


def build_terrain(heightmap_path=None) -> MeshTerrain:
    if heightmap_path:
        heights = load_heightmap(heightmap_path)
    else:
        heights = procedural_heights(TERRAIN_GRID, TERRAIN_SEED)
    return MeshTerrain.from_heights(
        heights, TERRAIN_SPACING, TERRAIN_HEIGHT_SCALE)


class Application:
    """Top-level application object.  Owns all subsystems."""

    def __init__(self, heightmap_path=None):
        self.state = AppState()
        self.actions = ViewerActions(self.state)

        # ── Terrain + manipulator (no GL needed) ──
        self.terrain = build_terrain(heightmap_path)
        if heightmap_path:
            self.state.terrain_source = str(heightmap_path)
        self.manipulator = TerrainManipulator()
        self.manipulator.bind(self.terrain)
        self.manipulator.home(self.actions)

        # ── GLFW + OpenGL ──
        if not glfw.init():
            log.critical("GLFW init failed")
            raise SystemExit(1)

        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, True)

        self.window = glfw.create_window(
            WINDOW_W, WINDOW_H, "TerrainForge", None, None)
        if not self.window:
            glfw.terminate()
            raise SystemExit(1)

        glfw.make_context_current(self.window)
        glfw.swap_interval(1)

        self.ctx = moderngl.create_context()

        # ── ImGui ──
        imgui.create_context()
        self.impl = GlfwRenderer(self.window)

        # From this point, failures must clean up GL resources.
        try:
            self.renderer = Renderer(self.ctx, self.terrain)
            self.ui = UIManager()
            # our key callback replaces imgui's — chain to it
            self.events = GlfwEventQueue(
                self.window,
                key_chain=getattr(self.impl, "keyboard_callback", None))
            # resize / expose: redraw even while idle
            glfw.set_window_refresh_callback(
                self.window, lambda _w: self.actions.request_redraw())
            self.manipulator.init(self.actions)
        except Exception:
            log.exception("Error during Application init — cleaning up")
            self._cleanup()
            raise

    # ────────────────────── Main loop ──────────────────────

    def run(self):
        s = self.state
        try:
            while not glfw.window_should_close(self.window):
                # sleep until input unless the camera asked for frames
                if s.should_block():
                    glfw.wait_events()
                else:
                    glfw.poll_events()

                self.impl.process_inputs()
                if glfw.get_key(self.window, glfw.KEY_ESCAPE) == glfw.PRESS:
                    break

                had_input = len(self.events) > 0 \
                    or imgui.get_io().mouse_wheel != 0.0
                self._dispatch_events()
                self.manipulator.handle(
                    self.events.frame_event(glfw.get_time()), self.actions)

                w, h = glfw.get_framebuffer_size(self.window)
                if w < 1 or h < 1:
                    continue
                if not s.frame_needed(had_input):
                    continue

                # FPS (drawn frames only)
                now = time.perf_counter()
                s.fps_counter += 1
                if now - s.fps_timer >= 1.0:
                    s.current_fps = s.fps_counter
                    s.fps_counter = 0
                    s.fps_timer = now

                # ── 3D render ──
                self.renderer.render(w, h, self.manipulator)

                # ── ImGui ──
                imgui.new_frame()
                self.ui.draw(s, self.manipulator, self.actions)
                imgui.render()
                self.impl.render(imgui.get_draw_data())

                glfw.swap_buffers(self.window)
        finally:
            self._cleanup()

    # ────────────────────── Events ──────────────────────

    def _dispatch_events(self):
        s = self.state
        io = imgui.get_io()
        for ea in self.events.drain():
            if ea.event_type in _POINTER_EVENTS:
                # a drag that starts over a widget belongs to imgui
                if ea.event_type is EventType.PUSH and io.want_capture_mouse:
                    s.ui_owns_pointer = True
                if s.ui_owns_pointer:
                    if ea.button_mask == 0:
                        s.ui_owns_pointer = False
                    continue
            elif ea.event_type in _KEY_EVENTS and io.want_capture_keyboard:
                continue
            self.manipulator.handle(ea, self.actions)

    # ────────────────────── Cleanup ──────────────────────

    def _cleanup(self):
        # Release in reverse init order; guard each in case init failed partway.
        if hasattr(self, 'impl'):
            self.impl.shutdown()
        if hasattr(self, 'renderer'):
            self.renderer.release()
        if hasattr(self, 'ctx'):
            self.ctx.release()
        glfw.terminate()


# ── Entry point ──
if __name__ == "__main__":
    app = Application(sys.argv[1] if len(sys.argv) > 1 else None)
    app.run()
