from __future__ import annotations

import logging
import math
from pathlib import Path

import cv2
import numpy as np

from ..errors import InvalidImage
from ..models import CropRegion

logger = logging.getLogger(__name__)

# ~90% of the widget renderer's ceiling
DEFAULT_PIXEL_BUDGET = 1_900_000
# ~2000x2000: enough detail for detection without slowing it down
DEFAULT_DETECTION_AREA = 4_000_000

IMAGE_EXTS = (".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp")


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTS


def budget_scale(width: int, height: int, budget: int = DEFAULT_PIXEL_BUDGET) -> float:
    """Uniform scale that brings width * height down to `budget` (1.0 if already within)."""
    area = width * height
    if area <= 0:
        raise InvalidImage(f"Image has no pixels: {width}x{height}")
    if area <= budget:
        return 1.0
    return math.sqrt(budget / area)


def budget_size(width: int, height: int, budget: int = DEFAULT_PIXEL_BUDGET) -> tuple[int, int]:
    scale = budget_scale(width, height, budget)
    if scale == 1.0:
        return width, height
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))


def _downscale(pixels: np.ndarray, max_area: int) -> tuple[np.ndarray, float]:
    h, w = pixels.shape[:2]
    scale = budget_scale(w, h, max_area)
    if scale == 1.0:
        return pixels, 1.0
    new_w, new_h = budget_size(w, h, max_area)
    # Exact output size, no device-scale multiplication
    return cv2.resize(pixels, (new_w, new_h), interpolation=cv2.INTER_AREA), scale


def resize_to_budget(pixels: np.ndarray, budget: int = DEFAULT_PIXEL_BUDGET) -> np.ndarray:
    """Uniformly downsample `pixels` so width * height fits the pixel budget."""
    out, scale = _downscale(pixels, budget)
    if scale != 1.0:
        logger.info(
            "Resized %dx%d -> %dx%d to fit pixel budget %d (scale=%.4f)",
            pixels.shape[1],
            pixels.shape[0],
            out.shape[1],
            out.shape[0],
            budget,
            scale,
        )
    return out


def prepare_for_detection(
    pixels: np.ndarray, max_area: int = DEFAULT_DETECTION_AREA
) -> tuple[np.ndarray, tuple[float, float]]:
    """
    Downscale a copy for detection. Returns the detection image and the
    (sx, sy) factors mapping its coordinates back onto `pixels`.
    """
    out, scale = _downscale(pixels, max_area)
    if scale == 1.0:
        return pixels, (1.0, 1.0)
    h, w = pixels.shape[:2]
    dh, dw = out.shape[:2]
    logger.debug("Detection image %dx%d (original %dx%d)", dw, dh, w, h)
    return out, (w / dw, h / dh)


def cut(pixels: np.ndarray, crop: CropRegion) -> np.ndarray:
    """
    Cut the crop rectangle out of `pixels` on whole-pixel boundaries. The size
    is rounded first and the origin placed after, so the pixel ratio stays as
    close to the crop's ratio as whole pixels allow.
    """
    h, w = pixels.shape[:2]
    r = crop.rect
    cw = min(w, max(1, int(round(r.width))))
    ch = min(h, max(1, int(round(r.height))))
    x1 = min(max(0, int(round(r.min_x))), w - cw)
    y1 = min(max(0, int(round(r.min_y))), h - ch)
    return pixels[y1 : y1 + ch, x1 : x1 + cw].copy()


def load_image(path: Path) -> np.ndarray:
    pixels = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if pixels is None:
        raise RuntimeError(f"Cannot read image: {path}")
    return pixels


def save_image(path: Path, pixels: np.ndarray, jpeg_quality: int = 80) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    params: list[int] = []
    if path.suffix.lower() in {".jpg", ".jpeg"}:
        params = [int(cv2.IMWRITE_JPEG_QUALITY), int(jpeg_quality)]
    if not cv2.imwrite(str(path), pixels, params):
        raise RuntimeError(f"Cannot write image: {path}")
    return path
