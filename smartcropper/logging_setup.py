from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path

LOG_FILE_NAME = "smartcropper.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(output_dir: Path, level: str = "INFO", console: bool = True) -> Logger:
    """
    Configure the package logger once: console (optional) plus a log file in
    `output_dir`. Module loggers (`smartcropper.*`) propagate to it.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("smartcropper")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Prevent duplicate handlers on repeated setup calls
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if console:
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    fh = logging.FileHandler(output_dir / LOG_FILE_NAME, encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    return logger
