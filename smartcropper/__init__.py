"""Content-aware cropping of photos to a fixed aspect ratio."""

__version__ = "0.1.0"

from .cropper import CropResult, SmartCropper
from .cropping.engine import compute_crop_region
from .geometry import ImageDimensions, Rect
from .models import CropRegion, CropStrategy, DetectionMethod, SalientRegion
from .orchestrator import DetectionOrchestrator, DetectionOutcome

__all__ = [
    "CropRegion",
    "CropResult",
    "CropStrategy",
    "DetectionMethod",
    "DetectionOrchestrator",
    "DetectionOutcome",
    "ImageDimensions",
    "Rect",
    "SalientRegion",
    "SmartCropper",
    "compute_crop_region",
]
