from __future__ import annotations

from ..geometry import ImageDimensions, Rect
from ..models import ExpansionVector


def apply_expansion(rect: Rect, vector: ExpansionVector) -> Rect:
    """Grow each side by `dimension * (factor - 1) / 2`, independently."""
    left = rect.width * (vector.left - 1) / 2
    right = rect.width * (vector.right - 1) / 2
    top = rect.height * (vector.top - 1) / 2
    bottom = rect.height * (vector.bottom - 1) / 2
    return Rect(
        rect.x - left,
        rect.y - top,
        max(0.0, rect.width + left + right),
        max(0.0, rect.height + top + bottom),
    )


def clamp_with_overflow(rect: Rect, image: ImageDimensions) -> Rect:
    """
    Pull `rect` inside the image. Overflow past the left/top edge is pushed
    onto the right/bottom side instead of being cut off; overflow past the
    right/bottom edge shifts the rect back. Order: left, top, right, bottom.
    """
    x, y, w, h = rect.x, rect.y, rect.width, rect.height

    if x < 0:
        overflow = -x
        x = 0.0
        w = min(w + overflow, image.width)

    if y < 0:
        overflow = -y
        y = 0.0
        h = min(h + overflow, image.height)

    if x + w > image.width:
        overflow = x + w - image.width
        x = max(0.0, x - overflow)
        w = image.width - x

    if y + h > image.height:
        overflow = y + h - image.height
        y = max(0.0, y - overflow)
        h = image.height - y

    return Rect(x, y, max(0.0, w), max(0.0, h))


def apply_and_clamp(rect: Rect, vector: ExpansionVector, image: ImageDimensions) -> Rect:
    return clamp_with_overflow(apply_expansion(rect, vector), image)
