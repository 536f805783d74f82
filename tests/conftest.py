import numpy as np
import pytest

from config import default_settings
from events import ActionAdapter, EventType, GUIEvent
from manipulator import TerrainManipulator
from terrain import BoundingSphere, Hit, Terrain


class RecordingActions(ActionAdapter):
    """Counts redraw requests and keeps every continuous-update call."""

    def __init__(self):
        self.redraws = 0
        self.continuous = []

    def request_redraw(self):
        self.redraws += 1

    def request_continuous_update(self, needed=True):
        self.continuous.append(needed)


class PlaneTerrain(Terrain):
    """Infinite horizontal plane ``z = ground_z`` with a fixed bound."""

    def __init__(self, ground_z=0.0, center=(0.0, 0.0, 0.0), radius=10.0,
                 hits=True):
        self.ground_z = ground_z
        self.center = np.array(center, dtype=np.float64)
        self.radius = radius
        self.hits = hits
        self.rays = []

    def bounding_sphere(self):
        return BoundingSphere(center=self.center, radius=self.radius)

    def intersect(self, start, end):
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        self.rays.append((start.copy(), end.copy()))
        if not self.hits:
            return None
        sz = start[2] - self.ground_z
        ez = end[2] - self.ground_z
        if sz == ez:
            return None
        t = sz / (sz - ez)
        if t < 0.0 or t > 1.0:
            return None
        return Hit(point=start + t * (end - start),
                   normal=np.array([0.0, 0.0, 1.0]))


class SphereTerrain(Terrain):
    """Solid sphere; ray hits are solved analytically."""

    def __init__(self, radius=100.0, center=(0.0, 0.0, 0.0)):
        self.center = np.array(center, dtype=np.float64)
        self.radius = radius

    def bounding_sphere(self):
        return BoundingSphere(center=self.center, radius=self.radius)

    def intersect(self, start, end):
        start = np.asarray(start, dtype=np.float64)
        d = np.asarray(end, dtype=np.float64) - start
        oc = start - self.center
        a = d @ d
        if a == 0.0:
            return None
        b = 2.0 * (oc @ d)
        c = oc @ oc - self.radius * self.radius
        disc = b * b - 4.0 * a * c
        if disc < 0.0:
            return None
        root = np.sqrt(disc)
        for t in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
            if 0.0 <= t <= 1.0:
                point = start + t * d
                normal = (point - self.center) / self.radius
                return Hit(point=point, normal=normal)
        return None


def make_event(event_type, x=0.0, y=0.0, mask=0, t=0.0, key=None):
    return GUIEvent(event_type, x, y, int(mask), t, key)


@pytest.fixture
def actions():
    return RecordingActions()


@pytest.fixture
def plane():
    return PlaneTerrain()


@pytest.fixture
def manip(plane):
    m = TerrainManipulator(settings=default_settings())
    m.bind(plane)
    return m


@pytest.fixture
def ev():
    return make_event

