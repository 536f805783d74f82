# =============================
# glfw → GUIEvent adapter
# =============================
"""
Turns glfw callbacks into ``GUIEvent`` objects for the manipulator.

Pixels are converted to normalized coordinates (``[-1, 1]``, y up) and
the held-button mask is tracked here, since glfw reports buttons one at
a time.  Events are queued and handed to the main loop by ``drain()``,
so all camera work happens on the loop's schedule, not inside glfw.
"""

import logging
from collections import deque

import glfw

from events import EventType, GUIEvent, MouseButton

log = logging.getLogger(__name__)

_BUTTONS = {
    glfw.MOUSE_BUTTON_LEFT: MouseButton.LEFT,
    glfw.MOUSE_BUTTON_MIDDLE: MouseButton.MIDDLE,
    glfw.MOUSE_BUTTON_RIGHT: MouseButton.RIGHT,
}


def normalize_cursor(px, py, width, height):
    """Window pixels (origin top-left) → ``[-1, 1]`` with y up."""
    w = max(width, 1)
    h = max(height, 1)
    return 2.0 * px / w - 1.0, 1.0 - 2.0 * py / h


class GlfwEventQueue:
    """Collects pointer/keyboard events from a glfw window.

    ``key_chain`` is called with the raw key callback arguments after
    ours (pass imgui's ``keyboard_callback`` so its widgets still work).
    """

    def __init__(self, window=None, key_chain=None):
        self.window = window
        self.button_mask = 0
        self._events = deque()
        self._key_chain = key_chain
        self._last_x = 0.0
        self._last_y = 0.0
        if window is not None:
            glfw.set_mouse_button_callback(window, self._glfw_mouse_button)
            glfw.set_cursor_pos_callback(window, self._glfw_cursor_pos)
            glfw.set_key_callback(window, self._glfw_key)

    # ────────────── glfw callbacks ──────────────

    def _normalized(self, px, py):
        w, h = glfw.get_window_size(self.window)
        return normalize_cursor(px, py, w, h)

    def _glfw_mouse_button(self, window, button, action, mods):
        px, py = glfw.get_cursor_pos(window)
        x, y = self._normalized(px, py)
        self.mouse_button(button, action, x, y, glfw.get_time())

    def _glfw_cursor_pos(self, window, px, py):
        x, y = self._normalized(px, py)
        self.cursor_moved(x, y, glfw.get_time())

    def _glfw_key(self, window, key, scancode, action, mods):
        self.key(key, action, glfw.get_time())
        if self._key_chain is not None:
            self._key_chain(window, key, scancode, action, mods)

    # ────────────── Translation ──────────────

    def mouse_button(self, button, action, x, y, t):
        bit = _BUTTONS.get(button)
        if bit is None:
            return
        if action == glfw.PRESS:
            self.button_mask |= int(bit)
            event_type = EventType.PUSH
        elif action == glfw.RELEASE:
            self.button_mask &= ~int(bit)
            event_type = EventType.RELEASE
        else:
            return
        self._last_x, self._last_y = x, y
        self._events.append(GUIEvent(event_type, x, y, self.button_mask, t))

    def cursor_moved(self, x, y, t):
        self._last_x, self._last_y = x, y
        event_type = EventType.DRAG if self.button_mask else EventType.MOVE
        self._events.append(GUIEvent(event_type, x, y, self.button_mask, t))

    def key(self, key, action, t):
        if action == glfw.PRESS:
            event_type = EventType.KEYDOWN
        elif action == glfw.RELEASE:
            event_type = EventType.KEYUP
        else:
            return  # auto-repeat
        self._events.append(GUIEvent(
            event_type, self._last_x, self._last_y, self.button_mask, t, key))

    def frame_event(self, t):
        return GUIEvent(EventType.FRAME, self._last_x, self._last_y,
                        self.button_mask, t)

    def drain(self):
        while self._events:
            yield self._events.popleft()

    def __len__(self):
        return len(self._events)
