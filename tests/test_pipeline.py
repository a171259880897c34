from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from smartcropper.config import AppConfig
from smartcropper.cropper import SmartCropper
from smartcropper.orchestrator import DetectionOrchestrator
from smartcropper.pipeline import crop_all, crop_image_file, list_images, output_path_for


def _cfg(tmp_path: Path, **kw) -> AppConfig:
    return AppConfig(input_path=tmp_path / "in", output_dir=tmp_path / "out", **kw)


def _write(path: Path, w: int, h: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(path), np.full((h, w, 3), 90, dtype=np.uint8))
    return path


def test_output_path_for(tmp_path: Path):
    cfg = _cfg(tmp_path, output_suffix="_sq")
    assert output_path_for(Path("/x/holiday.png"), cfg) == tmp_path / "out" / "holiday_png_sq.jpg"


def test_list_images_file_and_directory(tmp_path: Path):
    inp = tmp_path / "in"
    b = _write(inp / "b.png", 4, 4)
    a = _write(inp / "a.jpg", 4, 4)
    (inp / "notes.txt").write_text("x")
    (inp / "nested.jpg").mkdir()

    assert list_images(inp) == [a, b]
    assert list_images(a) == [a]
    assert list_images(inp / "notes.txt") == []


def test_crop_image_file_writes_jpeg(tmp_path: Path):
    cfg = _cfg(tmp_path, target_ratio=0.5)
    src = _write(tmp_path / "in" / "wide.png", 300, 100)
    cropper = SmartCropper(DetectionOrchestrator([]), target_ratio=cfg.target_ratio)

    out = crop_image_file(src, cfg, cropper, logging.getLogger("test"))
    assert out == tmp_path / "out" / "wide_png_crop.jpg"
    assert cv2.imread(str(out)).shape[:2] == (100, 50)


def test_crop_all_keeps_going_after_a_bad_file(tmp_path: Path, caplog):
    cfg = _cfg(tmp_path)
    bad = tmp_path / "in" / "broken.jpg"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b"not an image")
    good = _write(tmp_path / "in" / "good.png", 64, 64)
    cropper = SmartCropper(DetectionOrchestrator([]))

    with caplog.at_level(logging.ERROR, logger="test"):
        outs = crop_all([bad, good], cfg, cropper, logging.getLogger("test"))

    assert outs == [tmp_path / "out" / "good_png_crop.jpg"]
    assert any("broken.jpg" in r.getMessage() for r in caplog.records)


def test_same_stem_different_extension_do_not_collide(tmp_path: Path):
    cfg = _cfg(tmp_path)
    jpg = _write(tmp_path / "in" / "a.jpg", 40, 20)
    png = _write(tmp_path / "in" / "a.png", 40, 20)
    cropper = SmartCropper(DetectionOrchestrator([]))

    outs = crop_all([jpg, png], cfg, cropper, logging.getLogger("test"))
    assert outs == [tmp_path / "out" / "a_jpg_crop.jpg", tmp_path / "out" / "a_png_crop.jpg"]
    assert all(p.exists() for p in outs)
