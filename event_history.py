# =============================
# Pointer history (two-slot)
# =============================
import math
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True)
class PointerSample:
    """Copy of the fields of a pointer event the manipulator needs."""
    x: float
    y: float
    button_mask: int
    time: float

    @classmethod
    def from_event(cls, ea) -> "PointerSample":
        return cls(float(ea.x), float(ea.y), int(ea.button_mask), float(ea.time))


class EventHistory:
    """The two most recent pointer samples, newest first."""

    def __init__(self):
        self._samples = deque(maxlen=2)

    def __len__(self):
        return len(self._samples)

    def add(self, ea):
        sample = ea if isinstance(ea, PointerSample) else PointerSample.from_event(ea)
        self._samples.appendleft(sample)

    def flush(self):
        self._samples.clear()

    @property
    def newest(self):
        return self._samples[0] if self._samples else None

    @property
    def oldest(self):
        return self._samples[1] if len(self._samples) == 2 else None

    def deltas(self):
        """``(dx, dy, dt)`` from the older sample to the newer one,
        or ``None`` with fewer than two samples."""
        if len(self._samples) < 2:
            return None
        t0, t1 = self._samples
        return t0.x - t1.x, t0.y - t1.y, t0.time - t1.time

    def is_moving(self, velocity: float) -> bool:
        """True when the pointer travelled faster than ``velocity``
        (normalized units per time unit) between the two samples."""
        d = self.deltas()
        if d is None:
            return False
        dx, dy, dt = d
        return math.sqrt(dx * dx + dy * dy) > dt * velocity
