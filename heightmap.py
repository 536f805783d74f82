# =============================
# Heightmaps — image files & procedural hills
# =============================
import logging
from pathlib import Path

import cv2
import numpy as np

log = logging.getLogger(__name__)


def load_heightmap(path) -> np.ndarray:
    """Grayscale image (8 or 16 bit) → float32 heights in [0, 1]."""
    path = Path(path)
    img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE | cv2.IMREAD_ANYDEPTH)
    if img is None:
        raise FileNotFoundError(f"cannot read heightmap: {path}")
    if np.issubdtype(img.dtype, np.integer):
        heights = img.astype(np.float32) / float(np.iinfo(img.dtype).max)
    else:
        heights = img.astype(np.float32)
        lo, hi = float(heights.min()), float(heights.max())
        heights = (heights - lo) / max(hi - lo, 1e-6)
    log.info("Heightmap loaded: %s (%dx%d)", path, img.shape[1], img.shape[0])
    return heights


def procedural_heights(size: int, seed: int = 0,
                       octaves: int = 5) -> np.ndarray:
    """Smooth random hills: upsampled noise octaves, normalized to [0, 1]."""
    rng = np.random.default_rng(seed)
    heights = np.zeros((size, size), dtype=np.float32)
    amplitude = 1.0
    cells = 4
    for _ in range(octaves):
        coarse = rng.random((cells, cells)).astype(np.float32)
        heights += amplitude * cv2.resize(
            coarse, (size, size), interpolation=cv2.INTER_CUBIC)
        amplitude *= 0.5
        cells *= 2
    lo, hi = float(heights.min()), float(heights.max())
    return (heights - lo) / max(hi - lo, 1e-6)
