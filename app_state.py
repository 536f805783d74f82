# =============================
# Centralized Application State
# =============================
"""
Mutable runtime state of the viewer, shared by ``Application``,
``ViewerActions`` and the UI.  One instance is created in
``Application.__init__`` and passed by reference.
"""

import time
from dataclasses import dataclass, field

from events import ActionAdapter


@dataclass
class AppState:
    """All mutable runtime state, grouped logically."""

    # ── Redraw scheduling (driven by the manipulator) ──
    redraw_requested: bool = True
    continuous_update: bool = False

    # ── Pointer ownership: True while imgui holds a drag ──
    ui_owns_pointer: bool = False

    # ── FPS tracking ──
    fps_counter: int = 0
    fps_timer: float = field(default_factory=time.perf_counter)
    current_fps: int = 0

    # ── Terrain info (for the UI) ──
    terrain_source: str = "procedural"

    def consume_redraw(self) -> bool:
        """True when this frame must be drawn; clears a one-shot request."""
        needed = self.redraw_requested or self.continuous_update
        self.redraw_requested = False
        return needed

    def should_block(self) -> bool:
        """Nothing pending: the loop may sleep until the next input."""
        return not (self.redraw_requested or self.continuous_update)

    def frame_needed(self, had_input: bool = False) -> bool:
        """Decide whether this loop pass draws.

        Input always draws (imgui widgets react to it) and schedules one
        more frame, since imgui hover/release states lag one frame behind.
        """
        needed = self.consume_redraw() or had_input
        if had_input:
            self.redraw_requested = True
        return needed


class ViewerActions(ActionAdapter):
    """Manipulator requests → ``AppState`` flags."""

    def __init__(self, state: AppState):
        self.state = state

    def request_redraw(self):
        self.state.redraw_requested = True

    def request_continuous_update(self, needed: bool = True):
        self.state.continuous_update = needed
