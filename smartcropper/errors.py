from __future__ import annotations


class SmartCropError(Exception):
    """Base class for smartcropper errors."""


class InvalidImage(SmartCropError, ValueError):
    """Image has no usable area; the crop cannot be computed."""


class DetectionFailure(SmartCropError, RuntimeError):
    """A detector errored or returned nothing usable. Absorbed by the fallback chain."""


class DetectionTimeout(DetectionFailure, TimeoutError):
    """A detector step (or the whole chain) ran out of time."""


class CropOutOfBounds(SmartCropError, AssertionError):
    """A computed crop left the image or missed the target ratio. Always a bug."""


class DetectorBusy(DetectionFailure):
    """A detector is still running an earlier, abandoned call."""
