from __future__ import annotations

from ..geometry import ImageDimensions, Rect
from ..models import DetectionMethod, ExpansionVector
from .position import PositionZone, classify, classify_face

# (lower bound of area ratio, base factor), checked top to bottom
_BASE_FACTOR_BANDS: tuple[tuple[float, float], ...] = (
    (0.7, 1.05),
    (0.4, 1.15),
    (0.2, 1.30),
    (0.0, 1.50),
)
_FACE_BASE_FACTOR_BANDS: tuple[tuple[float, float], ...] = (
    (0.3, 1.1),
    (0.1, 1.3),
    (0.05, 1.6),
    (0.0, 2.0),
)

EDGE_AMPLIFY = 1.5
CORNER_AMPLIFY = 1.8


def area_ratio(rect: Rect, image: ImageDimensions) -> float:
    return min(1.0, max(0.0, rect.area / image.area))


def _banded(ratio: float, bands: tuple[tuple[float, float], ...]) -> float:
    for lower, factor in bands:
        if ratio >= lower:
            return factor
    return bands[-1][1]


def base_factor(ratio: float) -> float:
    """Larger detected regions need less surrounding context."""
    return _banded(ratio, _BASE_FACTOR_BANDS)


def face_base_factor(ratio: float) -> float:
    return _banded(ratio, _FACE_BASE_FACTOR_BANDS)


def directional_bias(target_ratio: float, rect_ratio: float) -> tuple[float, float]:
    """Return (horizontal, vertical) bias pushing the rect toward the target shape."""
    if target_ratio > rect_ratio:
        return 1.2, 0.9
    if target_ratio < rect_ratio:
        return 0.9, 1.2
    return 1.0, 1.0


def face_directional_bias(target_ratio: float, rect_ratio: float) -> tuple[float, float]:
    if target_ratio > rect_ratio:
        # wider: take in shoulders
        return 1.4, 1.0
    # taller: head down to chest
    return 1.0, 1.3


def expansion_vector(
    rect: Rect,
    image: ImageDimensions,
    zone: PositionZone,
    target_ratio: float,
) -> ExpansionVector:
    """
    Per-side growth for a generic salient region.

    Sides touching the edge (or corner) the region sits against stay put and
    the opposite sides grow harder, so the crop expands away from the edge
    instead of into it.
    """
    b = base_factor(area_ratio(rect, image))
    hb, vb = directional_bias(target_ratio, rect.ratio)
    h = b * hb
    v = b * vb
    he = b * EDGE_AMPLIFY * hb
    ve = b * EDGE_AMPLIFY * vb
    hc = b * CORNER_AMPLIFY * hb
    vc = b * CORNER_AMPLIFY * vb

    if zone is PositionZone.LEFT_EDGE:
        return ExpansionVector(left=1.0, right=he, top=v, bottom=v)
    if zone is PositionZone.RIGHT_EDGE:
        return ExpansionVector(left=he, right=1.0, top=v, bottom=v)
    if zone is PositionZone.TOP_EDGE:
        return ExpansionVector(left=h, right=h, top=1.0, bottom=ve)
    if zone is PositionZone.BOTTOM_EDGE:
        return ExpansionVector(left=h, right=h, top=ve, bottom=1.0)
    if zone is PositionZone.TOP_LEFT:
        return ExpansionVector(left=1.0, right=hc, top=1.0, bottom=vc)
    if zone is PositionZone.TOP_RIGHT:
        return ExpansionVector(left=hc, right=1.0, top=1.0, bottom=vc)
    if zone is PositionZone.BOTTOM_LEFT:
        return ExpansionVector(left=1.0, right=hc, top=vc, bottom=1.0)
    if zone is PositionZone.BOTTOM_RIGHT:
        return ExpansionVector(left=hc, right=1.0, top=vc, bottom=1.0)
    return ExpansionVector(left=h, right=h, top=v, bottom=v)


def face_expansion_vector(
    rect: Rect,
    image: ImageDimensions,
    zone: PositionZone,
    target_ratio: float,
) -> ExpansionVector:
    """Face variant: grows downward more than upward to keep the torso."""
    b = face_base_factor(area_ratio(rect, image))
    hb, vb = face_directional_bias(target_ratio, rect.ratio)
    side = b * hb

    if zone is PositionZone.TOP_EDGE:
        return ExpansionVector(left=side, right=side, top=1.1, bottom=b * 1.8 * vb)
    if zone is PositionZone.BOTTOM_EDGE:
        return ExpansionVector(left=side, right=side, top=b * 1.5 * vb, bottom=1.1)
    return ExpansionVector(left=side, right=side, top=b * 0.8 * vb, bottom=b * 1.2 * vb)


def expansion_for(
    rect: Rect,
    image: ImageDimensions,
    method: DetectionMethod,
    target_ratio: float,
) -> tuple[PositionZone, ExpansionVector]:
    if method is DetectionMethod.FACE:
        zone = classify_face(rect, image)
        return zone, face_expansion_vector(rect, image, zone, target_ratio)
    zone = classify(rect, image)
    return zone, expansion_vector(rect, image, zone, target_ratio)
