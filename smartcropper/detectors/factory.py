from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import CropStrategy, DetectionMethod
from .base import SalientDetector

if TYPE_CHECKING:
    from ..config import AppConfig


def create_detector(
    method: DetectionMethod | str,
    *,
    yolo_model: str = "yolov8n.pt",
    yolo_confidence: float = 0.25,
    iou: float = 0.45,
    object_classes: tuple[str, ...] | None = None,
    face_cascade: str | None = None,
) -> SalientDetector:
    name = method.value if isinstance(method, DetectionMethod) else str(method).lower()
    if name == DetectionMethod.FACE.value:
        from .face import HaarFaceDetector

        return HaarFaceDetector(cascade_path=face_cascade or None)
    elif name == DetectionMethod.OBJECT.value:
        # Lazy import so tests that don't use YOLO won't require ultralytics
        from .yolo import YOLOObjectDetector

        return YOLOObjectDetector(
            model_path=yolo_model,
            confidence=yolo_confidence,
            iou=iou,
            allowed_classes=object_classes or None,
        )
    elif name == DetectionMethod.ATTENTION.value:
        from .attention import SpectralSaliencyDetector

        return SpectralSaliencyDetector()
    else:
        raise ValueError(f"Unknown detector: {method}")


def create_detection_chain(strategy: CropStrategy | str, cfg: AppConfig) -> list[SalientDetector]:
    """Detectors for `strategy`, in fallback order. CENTER needs none."""
    strat = strategy if isinstance(strategy, CropStrategy) else CropStrategy(str(strategy).upper())
    return [
        create_detector(
            method,
            yolo_model=cfg.yolo_model,
            yolo_confidence=cfg.yolo_confidence,
            iou=cfg.nms_iou,
            object_classes=cfg.object_classes,
            face_cascade=cfg.face_cascade,
        )
        for method in strat.chain
    ]
