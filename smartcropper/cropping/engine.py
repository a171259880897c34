from __future__ import annotations

import logging
import math

from ..errors import CropOutOfBounds
from ..geometry import ImageDimensions, Rect
from ..models import CropRegion, SalientRegion
from .aspect import correct_aspect_ratio, crop_around_point
from .bounds import apply_and_clamp
from .expansion import expansion_for

logger = logging.getLogger(__name__)

BOUNDS_EPS = 1e-6
RATIO_REL_EPS = 1e-9


def _validate_ratio(target_ratio: float) -> float:
    if not math.isfinite(target_ratio) or target_ratio <= 0:
        raise ValueError(f"target_ratio must be a positive number, got {target_ratio}")
    return float(target_ratio)


def _check(rect: Rect, image: ImageDimensions, target_ratio: float) -> None:
    if not image.bounds.contains(rect, BOUNDS_EPS) or rect.is_empty:
        raise CropOutOfBounds(f"Crop {rect} escapes image {image.width}x{image.height}")
    if not math.isclose(rect.ratio, target_ratio, rel_tol=RATIO_REL_EPS):
        raise CropOutOfBounds(f"Crop {rect} has ratio {rect.ratio}, expected {target_ratio}")


def compute_crop_region(
    image: ImageDimensions,
    region: SalientRegion,
    target_ratio: float,
) -> CropRegion:
    """
    Turn one salient region into the final crop rectangle.

    Pure and deterministic: identical inputs give identical output. A
    zero-size region (a point, e.g. the geometric fallback) yields the largest
    target-ratio crop centered on that point.
    """
    image.validate()
    target_ratio = _validate_ratio(target_ratio)

    subject = region.rect.clamped_to(image)
    if subject.is_empty:
        rect = crop_around_point(subject.center, image, target_ratio)
        logger.debug("Point region at %s -> %s", subject.center, rect)
    else:
        zone, vector = expansion_for(subject, image, region.method, target_ratio)
        expanded = apply_and_clamp(subject, vector, image)
        rect = correct_aspect_ratio(expanded, target_ratio, image)
        logger.debug(
            "Region %s (%s) zone=%s vector=%s expanded=%s final=%s",
            subject,
            region.method.value,
            zone.value,
            vector,
            expanded,
            rect,
        )

    _check(rect, image, target_ratio)
    return CropRegion(rect=rect, method=region.method, target_ratio=target_ratio)
