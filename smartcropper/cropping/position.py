from __future__ import annotations

from enum import Enum

from ..geometry import ImageDimensions, Rect

EDGE_THRESHOLD = 0.15
FACE_TOP_THRESHOLD = 0.25
FACE_BOTTOM_THRESHOLD = 0.75


class PositionZone(str, Enum):
    CENTER = "center"
    LEFT_EDGE = "leftEdge"
    RIGHT_EDGE = "rightEdge"
    TOP_EDGE = "topEdge"
    BOTTOM_EDGE = "bottomEdge"
    TOP_LEFT = "topLeft"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    BOTTOM_RIGHT = "bottomRight"


def classify(rect: Rect, image: ImageDimensions, threshold: float = EDGE_THRESHOLD) -> PositionZone:
    """
    Classify where the center of `rect` sits relative to the image edges.

    Corners are checked before single edges, so a center that is both left of
    the left band and above the top band is `TOP_LEFT`, never `LEFT_EDGE`.
    """
    cx, cy = rect.center
    left = image.width * threshold
    right = image.width * (1 - threshold)
    top = image.height * threshold
    bottom = image.height * (1 - threshold)

    if cx < left and cy < top:
        return PositionZone.TOP_LEFT
    if cx > right and cy < top:
        return PositionZone.TOP_RIGHT
    if cx < left and cy > bottom:
        return PositionZone.BOTTOM_LEFT
    if cx > right and cy > bottom:
        return PositionZone.BOTTOM_RIGHT
    if cx < left:
        return PositionZone.LEFT_EDGE
    if cx > right:
        return PositionZone.RIGHT_EDGE
    if cy < top:
        return PositionZone.TOP_EDGE
    if cy > bottom:
        return PositionZone.BOTTOM_EDGE
    return PositionZone.CENTER


def classify_face(rect: Rect, image: ImageDimensions) -> PositionZone:
    # Faces only care about vertical placement
    if rect.mid_y < image.height * FACE_TOP_THRESHOLD:
        return PositionZone.TOP_EDGE
    if rect.mid_y > image.height * FACE_BOTTOM_THRESHOLD:
        return PositionZone.BOTTOM_EDGE
    return PositionZone.CENTER
