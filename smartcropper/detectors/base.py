from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable, Sequence

import numpy as np

from ..models import DetectionMethod, SalientRegion


class SalientDetector(ABC):
    """
    Base interface for salient-region detectors. Each implementation reports a
    single detection method; instances may be called from a worker thread.
    """

    method: ClassVar[DetectionMethod]

    def warmup(self) -> None:
        """Optional warmup phase (e.g., for GPU)."""

    @abstractmethod
    def detect(self, image_bgr: np.ndarray) -> Sequence[SalientRegion]:
        """
        Return candidate regions for a BGR image (OpenCV convention).
        Rects are top-left-origin pixels relative to `image_bgr`; empty if nothing found.
        """

    def detect_many(self, images_bgr: Iterable[np.ndarray]) -> Iterable[Sequence[SalientRegion]]:
        """
        Default: call `detect` iteratively. Implementations can override for batch inference.
        """
        for img in images_bgr:
            yield self.detect(img)

    def close(self) -> None:
        """Release resources (model/session)."""
