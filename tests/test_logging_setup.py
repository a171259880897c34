from __future__ import annotations

import logging
from pathlib import Path

from smartcropper.logging_setup import LOG_FILE_NAME, setup_logging


def _reset(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def test_setup_logging_creates_file_and_handlers(tmp_path: Path):
    logdir = tmp_path / "logs"
    logger = setup_logging(logdir, level="DEBUG")
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        # module loggers end up in the same file
        logging.getLogger("smartcropper.cropping.engine").debug("engine message")
        for h in logger.handlers:
            h.flush()
        text = (logdir / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert "engine message" in text
    finally:
        _reset(logger)


def test_setup_logging_is_idempotent_and_file_only(tmp_path: Path):
    logger = setup_logging(tmp_path, level="warning", console=False)
    try:
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.FileHandler)
        again = setup_logging(tmp_path, level="INFO", console=False)
        assert again is logger
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
    finally:
        _reset(logger)
