from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .cropping.engine import compute_crop_region
from .geometry import ImageDimensions
from .models import CropRegion, CropStrategy
from .orchestrator import DetectionOrchestrator, DetectionOutcome
from .processing.image import DEFAULT_PIXEL_BUDGET, cut, resize_to_budget

if TYPE_CHECKING:
    from .config import AppConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropResult:
    pixels: np.ndarray
    region: CropRegion
    outcome: DetectionOutcome


class SmartCropper:
    """
    Content-aware cropping service. Build one per process and hand it to
    whatever needs crops; it owns the detectors.
    """

    def __init__(
        self,
        orchestrator: DetectionOrchestrator,
        target_ratio: float = 1.0,
        pixel_budget: int = DEFAULT_PIXEL_BUDGET,
    ) -> None:
        self.orchestrator = orchestrator
        self.target_ratio = target_ratio
        self.pixel_budget = pixel_budget

    @classmethod
    def from_config(cls, cfg: AppConfig) -> SmartCropper:
        from .detectors.factory import create_detection_chain

        strategy = CropStrategy(cfg.strategy.upper())
        detectors = create_detection_chain(strategy, cfg)
        for detector in detectors:
            # Weights load on first predict; do it before any timed step
            detector.warmup()
        orchestrator = DetectionOrchestrator(
            detectors,
            step_timeout=cfg.step_timeout,
            global_timeout=cfg.global_timeout,
            min_confidence=cfg.min_confidence,
            detection_max_area=cfg.detection_max_area,
        )
        logger.info(
            "SmartCropper strategy=%s chain=%s ratio=%.4f budget=%d",
            strategy.value,
            [m.value for m in orchestrator.chain] or ["geometric"],
            cfg.target_ratio,
            cfg.pixel_budget,
        )
        return cls(orchestrator, target_ratio=cfg.target_ratio, pixel_budget=cfg.pixel_budget)

    def locate(self, image_bgr: np.ndarray) -> DetectionOutcome:
        return self.orchestrator.resolve(image_bgr)

    def _region_for(
        self, image_bgr: np.ndarray, target_ratio: float | None
    ) -> tuple[CropRegion, DetectionOutcome]:
        dims = ImageDimensions.of(image_bgr).validate()
        outcome = self.locate(image_bgr)
        ratio = self.target_ratio if target_ratio is None else target_ratio
        return compute_crop_region(dims, outcome.region, ratio), outcome

    def crop_region(self, image_bgr: np.ndarray, target_ratio: float | None = None) -> CropRegion:
        region, _ = self._region_for(image_bgr, target_ratio)
        return region

    def crop(self, image_bgr: np.ndarray, target_ratio: float | None = None) -> CropResult:
        region, outcome = self._region_for(image_bgr, target_ratio)
        pixels = resize_to_budget(cut(image_bgr, region), self.pixel_budget)
        logger.info(
            "Cropped %dx%d -> %dx%d via %s",
            image_bgr.shape[1],
            image_bgr.shape[0],
            pixels.shape[1],
            pixels.shape[0],
            region.method.value,
        )
        return CropResult(pixels=pixels, region=region, outcome=outcome)

    def close(self) -> None:
        self.orchestrator.close()
