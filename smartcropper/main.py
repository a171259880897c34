from __future__ import annotations

from pathlib import Path

from .cli import parse_args
from .config import load_config
from .cropper import SmartCropper
from .logging_setup import setup_logging
from .pipeline import crop_all, crop_image_file, list_images
from .watcher import watch_directory


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = load_config(args.input, args.output, args.strategy, args.ratio)
    if getattr(args, "watch", False):
        cfg.watch = True
    if getattr(args, "log_level", None):
        cfg.log_level = args.log_level

    logger = setup_logging(cfg.output_dir, level=cfg.log_level)
    logger.info("SmartCropper started")
    logger.info(f"Input: {cfg.input_path}")
    logger.info(f"Output: {cfg.output_dir}")
    logger.info(f"Strategy: {cfg.strategy} | ratio: {cfg.target_ratio:.4f}")

    if not cfg.input_path.exists():
        logger.error(f"Input does not exist: {cfg.input_path}")
        return

    cropper = SmartCropper.from_config(cfg)
    try:
        images = list_images(cfg.input_path)
        if images:
            outputs = crop_all(images, cfg, cropper, logger)
            logger.info(f"Cropped {len(outputs)}/{len(images)} image(s)")
        else:
            logger.info("No images found")

        if cfg.watch and cfg.input_path.is_dir():

            def on_image_ready(p: Path) -> None:
                try:
                    crop_image_file(p, cfg, cropper, logger)
                except Exception as e:
                    logger.exception(f"Error while cropping {p}: {e}")

            watch_directory(
                cfg.input_path,
                on_image_ready,
                cfg.file_stability_seconds,
                logger,
                ignore_dir=cfg.output_dir,
            )
    finally:
        cropper.close()
