from __future__ import annotations

from ..geometry import ImageDimensions, Rect


def _clamp(val: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, val))


def correct_aspect_ratio(rect: Rect, target_ratio: float, image: ImageDimensions) -> Rect:
    """
    Shrink the longer side of `rect` until width / height == target_ratio,
    keeping its center, then translate it back inside the image.
    """
    x, y, w, h = rect.x, rect.y, rect.width, rect.height
    current = rect.ratio

    if current > target_ratio:
        # too wide
        w = h * target_ratio
        x = rect.mid_x - w / 2
    elif current < target_ratio:
        # too tall
        h = w / target_ratio
        y = rect.mid_y - h / 2

    x = _clamp(x, 0.0, max(0.0, image.width - w))
    y = _clamp(y, 0.0, max(0.0, image.height - h))
    return Rect(x, y, w, h)


def largest_fit(image: ImageDimensions, target_ratio: float) -> tuple[float, float]:
    """Largest (width, height) with the target ratio that fits in the image."""
    if image.ratio > target_ratio:
        return image.height * target_ratio, image.height
    return image.width, image.width / target_ratio


def crop_around_point(
    point: tuple[float, float], image: ImageDimensions, target_ratio: float
) -> Rect:
    w, h = largest_fit(image, target_ratio)
    px, py = point
    x = _clamp(px - w / 2, 0.0, max(0.0, image.width - w))
    y = _clamp(py - h / 2, 0.0, max(0.0, image.height - h))
    return Rect(x, y, w, h)


def center_crop_rect(image: ImageDimensions, target_ratio: float) -> Rect:
    return crop_around_point(image.center, image, target_ratio)
