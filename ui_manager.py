# =============================
# UIManager — ImGui camera panel
# =============================
"""
All ImGui drawing code lives here: manipulator readout, Home button and
sliders bound to ``config.settings``.

Keeps ``main.py`` free of draw-call clutter.
"""

import logging

import imgui
import numpy as np

from config import settings

log = logging.getLogger(__name__)


class UIManager:
    """Draws the camera panel."""

    # ────────────────── Settings helpers ──────────────────

    @staticmethod
    def _slider_float(label, key, v_min, v_max, fmt="%.3f"):
        """imgui slider_float bound to settings[key]."""
        changed, val = imgui.slider_float(
            label, settings[key], v_min, v_max, fmt)
        if changed:
            log.debug("Setting %s: %s -> %s", key, settings[key], val)
            settings[key] = val
        return changed

    # ────────────────── Panel ──────────────────

    def draw(self, state, manipulator, actions):
        imgui.set_next_window_position(10, 10, imgui.FIRST_USE_EVER)
        imgui.set_next_window_size(320, 0, imgui.FIRST_USE_EVER)
        imgui.begin("Camera")

        imgui.text(f"FPS: {state.current_fps}  ({state.terrain_source})")
        imgui.text(f"State: {manipulator.state.value}")
        imgui.text(f"Distance: {manipulator.distance:.3f}")
        cx, cy, cz = np.round(manipulator.center, 2)
        imgui.text(f"Pivot: ({cx}, {cy}, {cz})")
        ex, ey, ez = np.round(manipulator.eye_position(), 2)
        imgui.text(f"Eye: ({ex}, {ey}, {ez})")

        if imgui.button("Home (Space)"):
            manipulator.init(actions)
            manipulator.home(actions)
            actions.request_continuous_update(False)

        if imgui.collapsing_header("Tuning")[0]:
            self._slider_float("Trackball size", "trackball_size", 0.2, 2.0)
            self._slider_float("Throw velocity", "throw_velocity", 0.0, 2.0)
            self._slider_float("Pan speed", "pan_speed", 0.05, 2.0)
            self._slider_float("Min zoom scale", "minimum_zoom_scale",
                               0.0001, 0.05, "%.4f")

        imgui.separator()
        imgui.text_disabled("LMB orbit | MMB / LMB+RMB pan | RMB zoom")
        imgui.end()
