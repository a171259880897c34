from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

import numpy as np

from ..geometry import ImageDimensions, Rect
from ..models import DetectionMethod, SalientRegion
from .base import SalientDetector

# (x, y, width, height, confidence), all in [0, 1], origin bottom-left
NormalizedBox = tuple[float, float, float, float, float]


def normalized_to_pixels(
    x: float, y: float, width: float, height: float, image: ImageDimensions
) -> Rect:
    """Map a normalized bottom-left-origin box onto top-left-origin pixels."""
    return Rect(
        x * image.width,
        (1 - y - height) * image.height,
        width * image.width,
        height * image.height,
    )


class NormalizedBoxDetector(SalientDetector):
    """
    Adapter for external vision services that report normalized boxes with a
    bottom-left origin. The coordinate flip happens here so the cropping code
    only ever sees top-left pixel rectangles.
    """

    def __init__(
        self,
        method: DetectionMethod,
        service: Callable[[np.ndarray], Iterable[NormalizedBox]],
    ) -> None:
        self.method = method  # type: ignore[misc]
        self.service = service

    def detect(self, image_bgr: np.ndarray) -> Sequence[SalientRegion]:
        dims = ImageDimensions.of(image_bgr)
        out: list[SalientRegion] = []
        for x, y, w, h, conf in self.service(image_bgr):
            rect = normalized_to_pixels(x, y, w, h, dims)
            out.append(SalientRegion(rect, self.method, min(1.0, max(0.0, float(conf)))))
        return out
