from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .errors import InvalidImage


@dataclass(frozen=True)
class ImageDimensions:
    width: float
    height: float

    @classmethod
    def of(cls, pixels: np.ndarray) -> ImageDimensions:
        """Dimensions of an H x W (x C) pixel array."""
        if pixels is None or pixels.ndim < 2:
            raise InvalidImage("Expected an H x W (x C) pixel array")
        h, w = pixels.shape[:2]
        return cls(float(w), float(h))

    def validate(self) -> ImageDimensions:
        for value in (self.width, self.height):
            if not math.isfinite(value) or value <= 0:
                raise InvalidImage(f"Image dimensions must be positive: {self.width}x{self.height}")
        return self

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def ratio(self) -> float:
        return self.width / self.height

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    @property
    def bounds(self) -> Rect:
        return Rect(0.0, 0.0, self.width, self.height)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with a top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> Rect:
        return cls(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    @classmethod
    def around(cls, center: tuple[float, float], width: float, height: float) -> Rect:
        cx, cy = center
        return cls(cx - width / 2.0, cy - height / 2.0, width, height)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def center(self) -> tuple[float, float]:
        return self.mid_x, self.mid_y

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def ratio(self) -> float:
        return self.width / self.height if self.height > 0 else 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def union(self, other: Rect) -> Rect:
        x1 = min(self.min_x, other.min_x)
        y1 = min(self.min_y, other.min_y)
        x2 = max(self.max_x, other.max_x)
        y2 = max(self.max_y, other.max_y)
        return Rect(x1, y1, x2 - x1, y2 - y1)

    def intersection(self, other: Rect) -> Rect:
        x1 = max(self.min_x, other.min_x)
        y1 = max(self.min_y, other.min_y)
        x2 = min(self.max_x, other.max_x)
        y2 = min(self.max_y, other.max_y)
        # Disjoint rects collapse to an empty rect at the clamped origin
        x1 = min(x1, other.max_x)
        y1 = min(y1, other.max_y)
        return Rect(x1, y1, max(0.0, x2 - x1), max(0.0, y2 - y1))

    def clamped_to(self, image: ImageDimensions) -> Rect:
        return self.intersection(image.bounds)

    def scaled(self, sx: float, sy: float) -> Rect:
        return Rect(self.x * sx, self.y * sy, self.width * sx, self.height * sy)

    def contains(self, other: Rect, eps: float = 1e-6) -> bool:
        return (
            other.min_x >= self.min_x - eps
            and other.min_y >= self.min_y - eps
            and other.max_x <= self.max_x + eps
            and other.max_y <= self.max_y + eps
        )


def union_all(rects: Iterable[Rect]) -> Rect:
    it = iter(rects)
    try:
        out = next(it)
    except StopIteration:
        raise ValueError("union_all() needs at least one rect") from None
    for r in it:
        out = out.union(r)
    return out
