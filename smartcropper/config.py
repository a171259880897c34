from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

STRATEGIES = ("CENTER", "FACE", "OBJECT", "ATTENTION", "HYBRID")


@dataclass
class AppConfig:
    input_path: Path  # image file or directory
    output_dir: Path

    strategy: str = "HYBRID"  # CENTER | FACE | OBJECT | ATTENTION | HYBRID
    target_ratio: float = 1.0
    pixel_budget: int = 1_900_000
    detection_max_area: int = 4_000_000

    step_timeout: float = 2.5
    global_timeout: float = 8.0
    min_confidence: float = 0.5

    yolo_model: str = "yolov8n.pt"
    yolo_confidence: float = 0.25
    nms_iou: float = 0.45
    # Empty: any YOLO class counts as a salient object
    object_classes: tuple[str, ...] = ()
    # Empty: OpenCV's bundled frontal-face cascade
    face_cascade: str = ""

    jpeg_quality: int = 80
    output_suffix: str = "_crop"

    watch: bool = False
    file_stability_seconds: float = 2.0

    log_level: str = "INFO"

    @property
    def input_dir(self) -> Path:
        return self.input_path.parent if self.input_path.is_file() else self.input_path


def _get_env_from_file(env_path: Path) -> dict[str, str]:
    if env_path.exists():
        return {k: v for k, v in dotenv_values(env_path).items() if k and v}
    return {}


def _coerce_float(value: str | None, default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _coerce_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_ratio(value: str | None, default: float) -> float:
    """Accept "1.5" as well as "W:H" such as "2:1"; non-positive values fall back."""
    if value is None:
        return default
    v = value.strip()
    try:
        if ":" in v:
            w, h = v.split(":", 1)
            ratio = float(w) / float(h)
        else:
            ratio = float(v)
    except (ValueError, ZeroDivisionError):
        return default
    return ratio if ratio > 0 else default


def load_config(
    cli_input: Path | None,
    cli_output: Path | None,
    cli_strategy: str | None,
    cli_ratio: str | None = None,
) -> AppConfig:
    """
    Load configuration with the following priority order:
    1) CLI arguments (input/output/strategy/ratio)
    2) .env in the input directory
    3) Defaults
    """

    # 1) Base: input from CLI or environment; a single image file reads the .env next to it
    input_path = cli_input or Path(os.getenv("INPUT_DIR", ".")).resolve()
    input_dir = input_path.parent if input_path.is_file() else input_path
    env_from_input = _get_env_from_file(input_dir / ".env")

    # 2) Output: CLI > .env > default: ./output next to input
    output_dir: Path
    if cli_output is not None:
        output_dir = cli_output
    else:
        env_out = env_from_input.get("OUTPUT_DIR")
        if env_out is not None:
            output_dir = Path(env_out)
        else:
            default_output = input_dir.parent / "output"
            output_dir = Path(os.getenv("OUTPUT_DIR", str(default_output))).resolve()

    # 3) Strategy and ratio: CLI > .env > default
    strategy = (cli_strategy or env_from_input.get("STRATEGY", "HYBRID")).upper()
    if strategy not in STRATEGIES:
        strategy = "HYBRID"
    target_ratio = _coerce_ratio(cli_ratio, 0.0) or _coerce_ratio(
        env_from_input.get("TARGET_RATIO"), 1.0
    )

    # 4) Additional parameters
    pixel_budget = _coerce_int(env_from_input.get("PIXEL_BUDGET"), 1_900_000)
    detection_max_area = _coerce_int(env_from_input.get("DETECTION_MAX_AREA"), 4_000_000)
    step_timeout = _coerce_float(env_from_input.get("STEP_TIMEOUT"), 2.5)
    global_timeout = _coerce_float(env_from_input.get("GLOBAL_TIMEOUT"), 8.0)
    min_confidence = _coerce_float(env_from_input.get("MIN_CONFIDENCE"), 0.5)

    yolo_model = env_from_input.get("YOLO_MODEL", "yolov8n.pt")
    yolo_confidence = _coerce_float(env_from_input.get("YOLO_CONFIDENCE"), 0.25)
    nms_iou = _coerce_float(env_from_input.get("NMS_IOU"), 0.45)
    object_classes = tuple(
        s.strip() for s in env_from_input.get("OBJECT_CLASSES", "").split(",") if s.strip()
    )
    face_cascade = env_from_input.get("FACE_CASCADE", "")

    jpeg_quality = _coerce_int(env_from_input.get("JPEG_QUALITY"), 80)
    output_suffix = env_from_input.get("OUTPUT_SUFFIX", "_crop")

    watch = _coerce_bool(env_from_input.get("WATCH"), False)
    file_stability_seconds = _coerce_float(env_from_input.get("FILE_STABILITY_SECONDS"), 2.0)

    log_level = env_from_input.get("LOG_LEVEL", "INFO").upper()

    # Ensure the output directory exists
    with contextlib.suppress(Exception):
        output_dir.mkdir(parents=True, exist_ok=True)

    return AppConfig(
        input_path=input_path,
        output_dir=output_dir,
        strategy=strategy,
        target_ratio=target_ratio,
        pixel_budget=pixel_budget,
        detection_max_area=detection_max_area,
        step_timeout=step_timeout,
        global_timeout=global_timeout,
        min_confidence=min_confidence,
        yolo_model=yolo_model,
        yolo_confidence=yolo_confidence,
        nms_iou=nms_iou,
        object_classes=object_classes,
        face_cascade=face_cascade,
        jpeg_quality=jpeg_quality,
        output_suffix=output_suffix,
        watch=watch,
        file_stability_seconds=file_stability_seconds,
        log_level=log_level,
    )
