from __future__ import annotations

import logging
from pathlib import Path

from .config import AppConfig
from .cropper import SmartCropper
from .processing.image import is_image_file, load_image, save_image


def output_path_for(image_path: Path, cfg: AppConfig) -> Path:
    # Keep the source extension: a.jpg and a.png map to different crops
    ext = image_path.suffix.lstrip(".")
    stem = f"{image_path.stem}_{ext}" if ext else image_path.stem
    return cfg.output_dir / f"{stem}{cfg.output_suffix}.jpg"


def list_images(path: Path) -> list[Path]:
    if path.is_file():
        return [path] if is_image_file(path) else []
    return sorted(p for p in path.iterdir() if p.is_file() and is_image_file(p))


def crop_image_file(
    image_path: Path,
    cfg: AppConfig,
    cropper: SmartCropper,
    logger: logging.Logger,
) -> Path:
    pixels = load_image(image_path)
    logger.info(
        "Cropping: %s | %dx%d ratio=%.4f",
        image_path.name,
        pixels.shape[1],
        pixels.shape[0],
        cfg.target_ratio,
    )
    result = cropper.crop(pixels, cfg.target_ratio)
    out = save_image(output_path_for(image_path, cfg), result.pixels, cfg.jpeg_quality)
    attempts = ", ".join(f"{m.value}={r}" for m, r in result.outcome.attempts) or "none"
    r = result.region.rect
    logger.info(
        "Wrote %s | method=%s rect=(%.1f, %.1f, %.1f, %.1f) attempts: %s",
        out.name,
        result.region.method.value,
        r.x,
        r.y,
        r.width,
        r.height,
        attempts,
    )
    return out


def crop_all(
    paths: list[Path],
    cfg: AppConfig,
    cropper: SmartCropper,
    logger: logging.Logger,
) -> list[Path]:
    outputs: list[Path] = []
    for p in paths:
        try:
            outputs.append(crop_image_file(p, cfg, cropper, logger))
        except Exception as e:
            logger.exception(f"Error while cropping {p}: {e}")
    return outputs
