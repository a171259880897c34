from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import torch
from ultralytics import YOLO

from ..geometry import ImageDimensions, Rect
from ..models import DetectionMethod, SalientRegion
from .base import SalientDetector

logger = logging.getLogger(__name__)


def _select_device() -> str:
    """Prefer MPS (Apple), then CUDA, then CPU."""
    try:
        if torch.backends.mps.is_available():
            return "mps"
        if torch.cuda.is_available():
            return "cuda"
    except Exception:
        pass
    return "cpu"


def _class_names(model: Any) -> dict[int, str]:
    inner = getattr(model, "model", None)
    names = getattr(inner, "names", None) if inner is not None else None
    if names is None:
        names = getattr(model, "names", {})
    if isinstance(names, (list, tuple)):
        return dict(enumerate(names))
    return {int(k): str(v) for k, v in names.items()}


def _as_numpy(tensor: Any) -> np.ndarray | None:
    if tensor is None:
        return None
    return tensor.cpu().numpy()


def _box_arrays(result: Any) -> tuple[np.ndarray, np.ndarray, np.ndarray] | None:
    """(xyxy, conf, cls) of one Ultralytics result, None when any is missing."""
    boxes = getattr(result, "boxes", None)
    if boxes is None:
        return None
    arrays = tuple(_as_numpy(getattr(boxes, key, None)) for key in ("xyxy", "conf", "cls"))
    if any(a is None for a in arrays):
        return None
    return arrays  # type: ignore[return-value]


class YOLOObjectDetector(SalientDetector):
    """
    Foreground objects from an Ultralytics YOLO model, highest score first.

    Boxes smaller than `min_area_fraction` of the image are dropped; they are
    rarely the subject a crop should be built around.
    """

    method = DetectionMethod.OBJECT

    def __init__(
        self,
        model_path: str | Path = "yolov8n.pt",
        confidence: float = 0.25,
        iou: float = 0.45,
        allowed_classes: tuple[str, ...] | None = None,
        max_regions: int = 5,
        min_area_fraction: float = 0.001,
    ) -> None:
        self.model = YOLO(str(model_path))
        self.confidence = confidence
        self.iou = iou
        self.max_regions = max_regions
        self.min_area_fraction = min_area_fraction
        self.device = _select_device()
        self.class_names = _class_names(self.model)
        self.allowed = {c.lower() for c in allowed_classes} if allowed_classes else None
        logger.info(
            "YOLOObjectDetector %s on %s (classes: %s)",
            model_path,
            self.device,
            ", ".join(sorted(self.allowed)) if self.allowed else "all",
        )

    def warmup(self) -> None:
        self.model.predict(
            np.zeros((320, 320, 3), dtype=np.uint8),
            imgsz=320,
            conf=self.confidence,
            verbose=False,
            device=self.device,
        )

    def _keep(self, class_id: int) -> bool:
        if self.allowed is None:
            return True
        name = str(self.class_names.get(class_id, class_id)).lower()
        return name in self.allowed

    def detect(self, image_bgr: np.ndarray) -> Sequence[SalientRegion]:
        dims = ImageDimensions.of(image_bgr)
        results = self.model.predict(
            np.ascontiguousarray(image_bgr[:, :, ::-1]),
            conf=self.confidence,
            iou=self.iou,
            verbose=False,
            device=self.device,
        )
        arrays = _box_arrays(results[0]) if results else None
        if arrays is None:
            return []
        xyxy, conf, cls = arrays

        min_area = self.min_area_fraction * dims.area
        regions: list[SalientRegion] = []
        for box, score, class_id in zip(xyxy, conf, cls):
            if not self._keep(int(class_id)):
                continue
            rect = Rect.from_corners(*(float(v) for v in box)).clamped_to(dims)
            if rect.area < min_area:
                continue
            regions.append(SalientRegion(rect, self.method, min(1.0, max(0.0, float(score)))))
        regions.sort(key=lambda r: r.confidence, reverse=True)
        logger.debug("Object detections: raw=%d kept=%d", len(cls), len(regions))
        return regions[: self.max_regions]
