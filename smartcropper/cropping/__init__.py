from .aspect import center_crop_rect, correct_aspect_ratio
from .bounds import apply_and_clamp
from .engine import compute_crop_region
from .expansion import expansion_vector, face_expansion_vector
from .position import PositionZone, classify, classify_face

__all__ = [
    "PositionZone",
    "apply_and_clamp",
    "center_crop_rect",
    "classify",
    "classify_face",
    "compute_crop_region",
    "correct_aspect_ratio",
    "expansion_vector",
    "face_expansion_vector",
]
