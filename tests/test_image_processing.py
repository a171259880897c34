from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest

from smartcropper.errors import InvalidImage
from smartcropper.geometry import Rect
from smartcropper.models import CropRegion, DetectionMethod
from smartcropper.processing.image import (
    budget_scale,
    budget_size,
    cut,
    is_image_file,
    load_image,
    prepare_for_detection,
    resize_to_budget,
    save_image,
)


def test_budget_scale_over_budget_is_square_root_of_ratio():
    scale = budget_scale(2150, 2000, 1_900_000)
    assert scale == pytest.approx(math.sqrt(1_900_000 / 4_300_000))
    assert scale == pytest.approx(0.6647, abs=1e-4)


def test_budget_scale_within_budget_is_identity():
    assert budget_scale(1000, 1000, 1_900_000) == 1.0
    assert budget_size(1000, 1000, 1_900_000) == (1000, 1000)


def test_budget_scale_rejects_empty_image():
    with pytest.raises(InvalidImage):
        budget_scale(0, 100)


def test_resize_to_budget_keeps_aspect_and_fits():
    pixels = np.zeros((2000, 2150, 3), dtype=np.uint8)
    out = resize_to_budget(pixels, 1_900_000)
    h, w = out.shape[:2]
    assert w * h <= 1_900_000 * 1.002
    assert w / h == pytest.approx(2150 / 2000, rel=1e-3)
    assert out.dtype == np.uint8


def test_resize_to_budget_returns_small_images_untouched():
    pixels = np.ones((100, 80, 3), dtype=np.uint8)
    assert resize_to_budget(pixels, 1_900_000) is pixels


def test_prepare_for_detection_reports_back_factors():
    pixels = np.zeros((3000, 2000, 3), dtype=np.uint8)
    small, (sx, sy) = prepare_for_detection(pixels, 4_000_000)
    dh, dw = small.shape[:2]
    assert dw * dh <= 4_000_000 * 1.002
    assert sx == pytest.approx(2000 / dw)
    assert sy == pytest.approx(3000 / dh)
    assert sx == pytest.approx(math.sqrt(6_000_000 / 4_000_000), rel=1e-3)


def test_prepare_for_detection_small_image_is_unchanged():
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    small, factors = prepare_for_detection(pixels, 4_000_000)
    assert small is pixels
    assert factors == (1.0, 1.0)


def test_cut_keeps_the_rounded_crop_size():
    pixels = np.arange(100 * 200, dtype=np.uint32).reshape(100, 200)
    crop = CropRegion(Rect(10.4, 20.6, 50, 30), DetectionMethod.OBJECT, 50 / 30)
    out = cut(pixels, crop)
    assert out.shape == (30, 50)
    assert out[0, 0] == pixels[21, 10]
    out[0, 0] = 0
    assert pixels[21, 10] != 0


def test_cut_at_far_edge_shifts_origin_instead_of_shrinking():
    pixels = np.zeros((100, 200), dtype=np.uint8)
    crop = CropRegion(Rect(170.6, 80.7, 30, 20), DetectionMethod.OBJECT, 1.5)
    assert cut(pixels, crop).shape == (20, 30)


def test_save_and_load_png_roundtrip(tmp_path: Path):
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 255, size=(16, 24, 3), dtype=np.uint8)
    path = save_image(tmp_path / "sub" / "img.png", pixels)
    assert path.exists()
    assert np.array_equal(load_image(path), pixels)


def test_save_jpeg_and_load(tmp_path: Path):
    pixels = np.full((32, 32, 3), 128, dtype=np.uint8)
    path = save_image(tmp_path / "img.jpg", pixels, jpeg_quality=80)
    assert load_image(path).shape == (32, 32, 3)


def test_load_missing_image_raises(tmp_path: Path):
    with pytest.raises(RuntimeError):
        load_image(tmp_path / "missing.jpg")


@pytest.mark.parametrize(
    "name,expected",
    [("a.jpg", True), ("b.JPEG", True), ("c.png", True), ("d.webp", True), ("e.mp4", False), ("f", False)],
)
def test_is_image_file(name, expected):
    assert is_image_file(Path(name)) is expected
