from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from ..geometry import Rect
from ..models import DetectionMethod, SalientRegion
from .base import SalientDetector

logger = logging.getLogger(__name__)

DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


def _default_cascade_path() -> str:
    return str(Path(getattr(cv2.data, "haarcascades", "")) / DEFAULT_CASCADE)


class HaarFaceDetector(SalientDetector):
    """
    Frontal faces via OpenCV's Haar cascade. The cascade reports no score, so
    every face is returned with confidence 1.0.
    """

    method = DetectionMethod.FACE

    def __init__(
        self,
        cascade_path: str | Path | None = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: tuple[int, int] = (30, 30),
    ) -> None:
        path = str(cascade_path) if cascade_path else _default_cascade_path()
        self.cascade = cv2.CascadeClassifier(path)
        if self.cascade.empty():
            raise RuntimeError(f"Cannot load face cascade: {path}")
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size
        logger.info("HaarFaceDetector cascade: %s", path)

    def detect(self, image_bgr: np.ndarray) -> Sequence[SalientRegion]:
        gray = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY) if image_bgr.ndim == 3 else image_bgr
        faces = self.cascade.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )
        out: list[SalientRegion] = []
        for x, y, w, h in faces:
            out.append(SalientRegion(Rect(float(x), float(y), float(w), float(h)), self.method, 1.0))
        logger.debug("Face detections: %d", len(out))
        return out
