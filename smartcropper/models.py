from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .geometry import Rect


class DetectionMethod(str, Enum):
    FACE = "face"
    OBJECT = "object"
    ATTENTION = "attention"
    GEOMETRIC = "geometric"


class CropStrategy(str, Enum):
    CENTER = "CENTER"
    FACE = "FACE"
    OBJECT = "OBJECT"
    ATTENTION = "ATTENTION"
    HYBRID = "HYBRID"

    @property
    def chain(self) -> tuple[DetectionMethod, ...]:
        """Detection methods tried, in priority order."""
        return _STRATEGY_CHAINS[self]


_STRATEGY_CHAINS: dict[CropStrategy, tuple[DetectionMethod, ...]] = {
    CropStrategy.CENTER: (),
    CropStrategy.FACE: (DetectionMethod.FACE,),
    CropStrategy.OBJECT: (DetectionMethod.OBJECT,),
    CropStrategy.ATTENTION: (DetectionMethod.ATTENTION,),
    CropStrategy.HYBRID: (
        DetectionMethod.FACE,
        DetectionMethod.OBJECT,
        DetectionMethod.ATTENTION,
    ),
}


@dataclass(frozen=True)
class SalientRegion:
    rect: Rect  # top-left origin, same space as the image dimensions
    method: DetectionMethod
    confidence: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class ExpansionVector:
    """Per-side growth multipliers; 1.0 leaves that side where it is."""

    left: float
    right: float
    top: float
    bottom: float


@dataclass(frozen=True)
class CropRegion:
    rect: Rect
    method: DetectionMethod
    target_ratio: float


SalientRegions = Sequence[SalientRegion]
