# =============================
# GUI events & action adapter
# =============================
"""
Host-facing event model.

The windowing layer (see ``input_adapter.py``) turns raw callbacks into
``GUIEvent`` objects with pointer coordinates already normalized to
``[-1, 1]`` (x to the right, y up).  The manipulator answers through an
``ActionAdapter``: it never redraws or schedules frames itself, it only
asks the host to.
"""

import enum
from dataclasses import dataclass
from typing import Optional

KEY_SPACE = ord(" ")


class EventType(enum.Enum):
    PUSH = "push"
    RELEASE = "release"
    DRAG = "drag"
    MOVE = "move"
    KEYDOWN = "keydown"
    KEYUP = "keyup"
    FRAME = "frame"


class MouseButton(enum.IntFlag):
    NONE = 0
    LEFT = 1
    MIDDLE = 2
    RIGHT = 4


@dataclass
class GUIEvent:
    """One input event.  ``button_mask`` is the set of buttons held
    *after* the event (0 on the last release)."""
    event_type: EventType
    x: float = 0.0
    y: float = 0.0
    button_mask: int = 0
    time: float = 0.0
    key: Optional[int] = None


class ActionAdapter:
    """Requests the manipulator may send back to its host.  Override both."""

    def request_redraw(self):
        pass

    def request_continuous_update(self, needed: bool = True):
        pass
