from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .processing.image import is_image_file


def _signature(path: Path) -> tuple[int, float] | None:
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return st.st_size, st.st_mtime


def wait_until_stable(
    path: Path,
    stable_seconds: float,
    poll_interval: float = 0.25,
    timeout: float = 120.0,
) -> bool:
    """
    True once the file exists, is non-empty and its size and mtime have not
    changed for `stable_seconds`. False when `timeout` runs out first.
    """
    deadline = time.monotonic() + timeout
    last: tuple[int, float] | None = None
    since = time.monotonic()
    while time.monotonic() < deadline:
        sig = _signature(path)
        now = time.monotonic()
        if sig is None or sig != last:
            last = sig
            since = now
        elif sig[0] > 0 and now - since >= stable_seconds:
            return True
        time.sleep(poll_interval)
    return False


class ImageDropHandler(FileSystemEventHandler):
    """
    Hands new images in a watched folder to `on_ready`, one at a time.

    Crops run on a single worker thread because the detectors behind
    `on_ready` are shared. A path already queued is not queued twice.
    """

    def __init__(
        self,
        logger: logging.Logger,
        on_ready: Callable[[Path], None],
        stable_seconds: float,
        ignore_dir: Path | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        super().__init__()
        self.logger = logger
        self.on_ready = on_ready
        self.stable_seconds = stable_seconds
        self.ignore_dir = ignore_dir.resolve() if ignore_dir is not None else None
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="crop")
        self._pending: set[Path] = set()
        self._lock = threading.Lock()

    def accepts(self, p: Path) -> bool:
        # Crops written into a watched folder must not be cropped again
        if self.ignore_dir is not None and p.resolve().parent == self.ignore_dir:
            return False
        return is_image_file(p)

    def submit(self, p: Path) -> Future | None:
        with self._lock:
            if p in self._pending:
                return None
            self._pending.add(p)
        return self.executor.submit(self._process, p)

    def _process(self, p: Path) -> None:
        try:
            if not wait_until_stable(p, self.stable_seconds):
                self.logger.warning(f"Image did not settle, skipped: {p}")
                return
            self.on_ready(p)
        finally:
            with self._lock:
                self._pending.discard(p)

    def _handle(self, raw_path: str, what: str) -> None:
        p = Path(raw_path)
        if self.accepts(p):
            self.logger.info(f"{what}: {p.name}")
            self.submit(p)

    def on_created(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._handle(event.src_path, "New image")

    def on_moved(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._handle(event.dest_path, "Image moved in")

    def shutdown(self) -> None:
        self.executor.shutdown(wait=True)


def watch_directory(
    input_dir: Path,
    on_image_ready: Callable[[Path], None],
    stable_seconds: float,
    logger: logging.Logger,
    ignore_dir: Path | None = None,
    stop_event: threading.Event | None = None,
) -> None:
    """Block until Ctrl+C (or `stop_event`), cropping images dropped into `input_dir`."""
    handler = ImageDropHandler(logger, on_image_ready, stable_seconds, ignore_dir)
    stop = stop_event or threading.Event()
    observer = Observer()
    observer.schedule(handler, str(input_dir), recursive=False)
    observer.start()
    logger.info(f"Watching directory: {input_dir}")
    try:
        while not stop.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Stopped by KeyboardInterrupt")
    finally:
        observer.stop()
        observer.join()
        handler.shutdown()
