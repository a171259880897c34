from .image import cut, prepare_for_detection, resize_to_budget

__all__ = [
    "cut",
    "prepare_for_detection",
    "resize_to_budget",
]
