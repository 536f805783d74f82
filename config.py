# =============================
# Configuration — terrain manipulator & viewer
# =============================
from typing import TypedDict

from events import KEY_SPACE

# Trackball
TRACKBALL_SIZE = 0.8          # радиус виртуального шара (нормализованные координаты)

# Inertia ("thrown") — normalized units per second
THROW_VELOCITY = 0.1

# Zoom / pan
MINIMUM_ZOOM_SCALE = 0.0005   # доля от model_scale
PAN_SPEED = 0.5               # pan = -PAN_SPEED * distance

# Home position: eye = center - HOME_DISTANCE * radius along Y
HOME_DISTANCE = 3.5

# Before a terrain is bound
DEFAULT_MODEL_SCALE = 0.01
DEFAULT_DISTANCE = 1.0

# Клавиша сброса камеры
RESET_KEY = KEY_SPACE

# Окно / проекция
WINDOW_W, WINDOW_H = 1280, 720
FOV_DEG = 45.0
NEAR_FACTOR = 0.001           # near = NEAR_FACTOR * model_scale
FAR_FACTOR = 20.0             # far = FAR_FACTOR * model_scale

# Demo terrain (used when no heightmap is given)
TERRAIN_GRID = 129
TERRAIN_SPACING = 1.0
TERRAIN_HEIGHT_SCALE = 24.0
TERRAIN_SEED = 7


class ManipulatorSettings(TypedDict):
    """Runtime tunables read by ``TerrainManipulator`` on every event."""
    trackball_size: float
    throw_velocity: float
    minimum_zoom_scale: float
    pan_speed: float
    home_distance: float
    reset_key: int


def default_settings() -> ManipulatorSettings:
    return {
        "trackball_size": TRACKBALL_SIZE,
        "throw_velocity": THROW_VELOCITY,
        "minimum_zoom_scale": MINIMUM_ZOOM_SCALE,
        "pan_speed": PAN_SPEED,
        "home_distance": HOME_DISTANCE,
        "reset_key": RESET_KEY,
    }


# =============================
# Глобальные настройки (runtime)
# =============================

settings: ManipulatorSettings = default_settings()
