from __future__ import annotations

import logging
import math
from typing import Sequence

import cv2
import numpy as np

from ..geometry import ImageDimensions, Rect
from ..models import DetectionMethod, SalientRegion
from .base import SalientDetector

logger = logging.getLogger(__name__)

# Used when nothing stands out: a central square over 80% of the short side
EMPTY_REGION_FRACTION = 0.8
EMPTY_REGION_CONFIDENCE = 0.5


def _normalize_map(src: np.ndarray) -> np.ndarray:
    arr = np.nan_to_num(src.astype(np.float32), nan=0.0, posinf=0.0, neginf=0.0)
    mn = float(np.min(arr))
    mx = float(np.max(arr))
    if mx <= mn + 1e-8:
        return np.zeros_like(arr, dtype=np.float32)
    return (arr - mn) / (mx - mn)


def _gradient_saliency(gray: np.ndarray) -> np.ndarray:
    gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3)
    return cv2.magnitude(gx, gy)


def saliency_map(image_bgr: np.ndarray) -> np.ndarray:
    """Normalized [0, 1] attention map, same height/width as the image."""
    sal: np.ndarray | None = None
    # Spectral residual lives in the contrib build only
    if hasattr(cv2, "saliency") and hasattr(cv2.saliency, "StaticSaliencySpectralResidual_create"):
        ok, computed = cv2.saliency.StaticSaliencySpectralResidual_create().computeSaliency(image_bgr)
        if ok:
            sal = computed
    if sal is None:
        gray = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY) if image_bgr.ndim == 3 else image_bgr
        sal = _gradient_saliency(gray)
    h, w = image_bgr.shape[:2]
    if sal.shape[:2] != (h, w):
        sal = cv2.resize(sal, (w, h), interpolation=cv2.INTER_LINEAR)
    return _normalize_map(sal)


def _prominence(peak: float, background: float) -> float:
    """How far a blob's peak rises above the map's typical level, in [0, 1]."""
    if background >= 1.0:
        return 0.0
    return min(1.0, max(0.0, (peak - background) / (1.0 - background)))


class SpectralSaliencyDetector(SalientDetector):
    """
    Attention-based saliency: the strongest blobs of a saliency map, ranked by
    prominence times sqrt(area).

    Confidence is the blob's peak prominence over the median of the map, so a
    subject that clearly dominates a textured background scores near 1.0 and
    background texture stays low.
    """

    method = DetectionMethod.ATTENTION

    def __init__(
        self,
        quantile: float = 0.75,
        max_regions: int = 3,
        min_area_fraction: float = 0.01,
        blur_fraction: float = 0.01,
    ) -> None:
        self.quantile = quantile
        self.max_regions = max_regions
        self.min_area_fraction = min_area_fraction
        self.blur_fraction = blur_fraction

    def _empty_region(self, image_bgr: np.ndarray) -> SalientRegion:
        dims = ImageDimensions.of(image_bgr)
        side = min(dims.width, dims.height) * EMPTY_REGION_FRACTION
        return SalientRegion(
            Rect.around(dims.center, side, side), self.method, EMPTY_REGION_CONFIDENCE
        )

    def detect(self, image_bgr: np.ndarray) -> Sequence[SalientRegion]:
        h, w = image_bgr.shape[:2]
        sal = saliency_map(image_bgr)
        sigma = max(1.0, self.blur_fraction * max(h, w))
        sal = _normalize_map(cv2.GaussianBlur(sal, (0, 0), sigma))

        threshold = float(np.quantile(sal, self.quantile))
        mask = sal > threshold
        if not np.any(mask):
            mask = sal > 0
        if not np.any(mask):
            logger.debug("Attention map is flat; using central region")
            return [self._empty_region(image_bgr)]

        count, labels, stats, _ = cv2.connectedComponentsWithStats(
            mask.astype(np.uint8), connectivity=8
        )
        background = float(np.median(sal))
        min_area = self.min_area_fraction * h * w
        scored: list[tuple[float, SalientRegion]] = []
        for i in range(1, count):
            x = int(stats[i, cv2.CC_STAT_LEFT])
            y = int(stats[i, cv2.CC_STAT_TOP])
            bw = int(stats[i, cv2.CC_STAT_WIDTH])
            bh = int(stats[i, cv2.CC_STAT_HEIGHT])
            area = int(stats[i, cv2.CC_STAT_AREA])
            if area < min_area or bw <= 0 or bh <= 0:
                continue
            component = labels[y : y + bh, x : x + bw] == i
            values = sal[y : y + bh, x : x + bw][component]
            prominence = _prominence(float(np.max(values)), background)
            region = SalientRegion(
                Rect(float(x), float(y), float(bw), float(bh)),
                self.method,
                prominence,
            )
            scored.append((prominence * math.sqrt(area), region))

        if not scored:
            logger.debug("No salient component above %.0f px; using central region", min_area)
            return [self._empty_region(image_bgr)]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [region for _, region in scored[: self.max_regions]]
