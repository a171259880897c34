from .base import SalientDetector
from .normalized import NormalizedBoxDetector

__all__ = [
    "NormalizedBoxDetector",
    "SalientDetector",
]
