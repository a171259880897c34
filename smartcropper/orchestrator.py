from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .detectors.base import SalientDetector
from .errors import DetectionFailure, DetectionTimeout, DetectorBusy
from .geometry import ImageDimensions, Rect, union_all
from .models import DetectionMethod, SalientRegion
from .processing.image import DEFAULT_DETECTION_AREA, prepare_for_detection

logger = logging.getLogger(__name__)

DEFAULT_STEP_TIMEOUT = 2.5
DEFAULT_GLOBAL_TIMEOUT = 8.0
DEFAULT_MIN_CONFIDENCE = 0.5


class ChainState(str, Enum):
    IDLE = "idle"
    AWAITING_FACE = "awaiting_face"
    AWAITING_OBJECT = "awaiting_object"
    AWAITING_ATTENTION = "awaiting_attention"
    RESOLVED = "resolved"
    GEOMETRIC_FALLBACK = "geometric_fallback"

    @property
    def terminal(self) -> bool:
        return self in (ChainState.RESOLVED, ChainState.GEOMETRIC_FALLBACK)


class ChainEvent(str, Enum):
    START = "start"
    SUCCESS = "success"
    FAILURE = "failure"
    STEP_TIMEOUT = "step_timeout"
    GLOBAL_TIMEOUT = "global_timeout"


AWAITING: dict[DetectionMethod, ChainState] = {
    DetectionMethod.FACE: ChainState.AWAITING_FACE,
    DetectionMethod.OBJECT: ChainState.AWAITING_OBJECT,
    DetectionMethod.ATTENTION: ChainState.AWAITING_ATTENTION,
}


def _awaiting(chain: Sequence[DetectionMethod], index: int) -> ChainState:
    if index >= len(chain):
        return ChainState.GEOMETRIC_FALLBACK
    return AWAITING[chain[index]]


def next_state(
    state: ChainState, event: ChainEvent, chain: Sequence[DetectionMethod]
) -> ChainState:
    """
    Transition function of the fallback chain. Total over (state, event):
    terminal states absorb every event, and events that make no sense in a
    state leave it unchanged.
    """
    if state.terminal:
        return state
    if event is ChainEvent.GLOBAL_TIMEOUT:
        return ChainState.GEOMETRIC_FALLBACK
    if state is ChainState.IDLE:
        return _awaiting(chain, 0) if event is ChainEvent.START else state
    if event is ChainEvent.SUCCESS:
        return ChainState.RESOLVED
    steps = [AWAITING[m] for m in chain]
    if event in (ChainEvent.FAILURE, ChainEvent.STEP_TIMEOUT) and state in steps:
        return _awaiting(chain, steps.index(state) + 1)
    return state


class CompletionGate:
    """Exactly-once latch: the first `try_fire()` wins, every later call gets False."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fired = False

    def try_fire(self) -> bool:
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            return True

    @property
    def fired(self) -> bool:
        with self._lock:
            return self._fired


@dataclass(frozen=True)
class DetectionOutcome:
    region: SalientRegion
    state: ChainState
    attempts: tuple[tuple[DetectionMethod, str], ...] = ()

    @property
    def method(self) -> DetectionMethod:
        return self.region.method


def geometric_region(image: ImageDimensions) -> SalientRegion:
    cx, cy = image.center
    return SalientRegion(Rect(cx, cy, 0.0, 0.0), DetectionMethod.GEOMETRIC, 0.0)


def merge_candidates(
    candidates: Sequence[SalientRegion], min_confidence: float
) -> SalientRegion | None:
    """
    Drop low-confidence candidates and union the rest into one region, so a
    second subject is never discarded. None when nothing survives.
    """
    kept = [c for c in candidates if c.confidence >= min_confidence]
    if not kept:
        return None
    rect = union_all(c.rect for c in kept)
    return SalientRegion(rect, kept[0].method, max(c.confidence for c in kept))


def _call_async(
    fn: Callable[[np.ndarray], Sequence[SalientRegion]],
    image: np.ndarray,
    on_finish: Callable[[], None] | None = None,
) -> Future:
    """
    Run `fn(image)` on a daemon thread; its late result is simply never read.
    `on_finish` runs once `fn` has returned or raised, even after a timeout.
    """
    fut: Future = Future()

    def worker() -> None:
        try:
            fut.set_result(fn(image))
        except Exception as e:
            fut.set_exception(e)
        finally:
            if on_finish is not None:
                on_finish()

    threading.Thread(target=worker, daemon=True).start()
    return fut


class DetectionOrchestrator:
    """
    Runs detectors in priority order until one yields a confident region.

    Every path (success, exhausted chain, global timeout) ends in a single
    completion guarded by a `CompletionGate`, so exactly one outcome is
    produced per `resolve()` call.
    """

    def __init__(
        self,
        detectors: Sequence[SalientDetector],
        step_timeout: float = DEFAULT_STEP_TIMEOUT,
        global_timeout: float = DEFAULT_GLOBAL_TIMEOUT,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        detection_max_area: int = DEFAULT_DETECTION_AREA,
    ) -> None:
        self.detectors = list(detectors)
        self.chain: tuple[DetectionMethod, ...] = tuple(d.method for d in self.detectors)
        unknown = [m for m in self.chain if m not in AWAITING]
        if unknown:
            raise ValueError(f"Detectors must be face/object/attention, got {unknown}")
        if len(set(self.chain)) != len(self.chain):
            raise ValueError(f"Each detection method may appear once, got {self.chain}")
        self.step_timeout = step_timeout
        self.global_timeout = global_timeout
        self.min_confidence = min_confidence
        self.detection_max_area = detection_max_area
        # Held while a detect() call runs, including one abandoned by a step timeout
        self._in_flight = {method: threading.Lock() for method in self.chain}

    def resolve(self, image_bgr: np.ndarray) -> DetectionOutcome:
        dims = ImageDimensions.of(image_bgr).validate()
        gate = CompletionGate()
        done: Future = Future()
        attempts: list[tuple[DetectionMethod, str]] = []

        def complete(outcome: DetectionOutcome) -> bool:
            if not gate.try_fire():
                return False
            done.set_result(outcome)
            return True

        def on_global_timeout() -> None:
            if complete(self._fallback(dims, attempts, ChainState.GEOMETRIC_FALLBACK)):
                logger.info(
                    "Detection exceeded %.1fs; using geometric center", self.global_timeout
                )

        timer = threading.Timer(self.global_timeout, on_global_timeout)
        timer.daemon = True
        timer.start()
        runner = threading.Thread(
            target=self._run_chain_safely,
            args=(image_bgr, dims, gate, complete, attempts),
            daemon=True,
        )
        runner.start()
        try:
            return done.result()
        finally:
            timer.cancel()

    def _fallback(
        self,
        dims: ImageDimensions,
        attempts: list[tuple[DetectionMethod, str]],
        state: ChainState,
    ) -> DetectionOutcome:
        return DetectionOutcome(geometric_region(dims), state, tuple(attempts))

    def _attempt(self, detector: SalientDetector, image: np.ndarray) -> Sequence[SalientRegion]:
        lock = self._in_flight[detector.method]
        if not lock.acquire(blocking=False):
            raise DetectorBusy(f"{detector.method.value} detector is still busy with an earlier image")
        fut = _call_async(detector.detect, image, on_finish=lock.release)
        try:
            return fut.result(timeout=self.step_timeout)
        except FutureTimeout:
            raise DetectionTimeout(
                f"{detector.method.value} detector exceeded {self.step_timeout}s"
            ) from None
        except Exception as e:
            raise DetectionFailure(f"{detector.method.value} detector failed: {e}") from e

    def _run_chain_safely(
        self,
        image_bgr: np.ndarray,
        dims: ImageDimensions,
        gate: CompletionGate,
        complete: Callable[[DetectionOutcome], bool],
        attempts: list[tuple[DetectionMethod, str]],
    ) -> None:
        try:
            self._run_chain(image_bgr, dims, gate, complete, attempts)
        except Exception as e:
            logger.exception("Detection chain crashed: %s", e)
            complete(self._fallback(dims, attempts, ChainState.GEOMETRIC_FALLBACK))

    def _run_chain(
        self,
        image_bgr: np.ndarray,
        dims: ImageDimensions,
        gate: CompletionGate,
        complete: Callable[[DetectionOutcome], bool],
        attempts: list[tuple[DetectionMethod, str]],
    ) -> None:
        state = next_state(ChainState.IDLE, ChainEvent.START, self.chain)
        if not self.detectors:
            complete(self._fallback(dims, attempts, state))
            return

        detection_image, (sx, sy) = prepare_for_detection(image_bgr, self.detection_max_area)
        for detector in self.detectors:
            if gate.fired:
                return
            method = detector.method
            try:
                candidates = self._attempt(detector, detection_image)
            except DetectorBusy as e:
                logger.warning("%s; trying next method", e)
                attempts.append((method, "busy"))
                state = next_state(state, ChainEvent.FAILURE, self.chain)
                continue
            except DetectionTimeout as e:
                logger.info("%s; trying next method", e)
                attempts.append((method, "timeout"))
                state = next_state(state, ChainEvent.STEP_TIMEOUT, self.chain)
                continue
            except DetectionFailure as e:
                logger.warning("%s; trying next method", e)
                attempts.append((method, "failed"))
                state = next_state(state, ChainEvent.FAILURE, self.chain)
                continue

            if not candidates:
                logger.info("%s detection found nothing; trying next method", method.value)
                attempts.append((method, "empty"))
                state = next_state(state, ChainEvent.FAILURE, self.chain)
                continue

            merged = merge_candidates(candidates, self.min_confidence)
            if merged is None:
                logger.info(
                    "%s detection below confidence %.2f; trying next method",
                    method.value,
                    self.min_confidence,
                )
                attempts.append((method, "low-confidence"))
                state = next_state(state, ChainEvent.FAILURE, self.chain)
                continue

            attempts.append((method, "resolved"))
            state = next_state(state, ChainEvent.SUCCESS, self.chain)
            region = SalientRegion(merged.rect.scaled(sx, sy), method, merged.confidence)
            if complete(DetectionOutcome(region, state, tuple(attempts))):
                logger.info(
                    "%s detection resolved from %d candidate(s): %s (confidence %.2f)",
                    method.value,
                    len(candidates),
                    region.rect,
                    region.confidence,
                )
            return

        if complete(self._fallback(dims, attempts, state)):
            logger.info("All detectors failed; using geometric center")

    def close(self) -> None:
        for detector in self.detectors:
            detector.close()
