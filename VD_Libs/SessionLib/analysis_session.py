"""
Comparison Session: background analysis passes with stale-result guarding.

A session owns the current image pair, the active AnalysisMode, the wipe
comparator and the last published result. Work is scheduled on thread pools:

1. load_pair() hands the pair to a load worker, which submits both decodes
   concurrently to a two-worker decode pool and joins them with
   concurrent.futures.wait() before anything else runs. A newer load cancels
   decodes of the older one that have not started yet.
2. The active mode's executor then runs on the analysis pool. Load workers
   never occupy the analysis pool while they wait on decodes, so a mode
   switch is not queued behind a superseded load.
3. The result is published only if its generation token is still current.

Every load_pair() and set_mode() advances the generation, so a pass that
finishes after the pair or mode changed is dropped on arrival and never
overwrites newer state.

Example:
    >>> session = ComparisonSession(on_result=lambda r: print(r.mode))
    >>> session.set_mode(AnalysisMode.INTENSITY)
    >>> future = session.load_pair(Path("original.png"), edited_bytes)
    >>> result = future.result()
    AnalysisMode.INTENSITY
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from VD_Libs.CompareLib.alignment import resolve_alignment, validate_descriptor
from VD_Libs.CompareLib.analysis_config import AnalysisConfig
from VD_Libs.CompareLib.analysis_results import AnalysisResult
from VD_Libs.CompareLib.comparison_models import (
    AlignmentTransform,
    AnalysisMode,
    ImageDescriptor,
)
from VD_Libs.CompareLib.pixel_buffers import ImageSource, decode_image, descriptor_of
from VD_Libs.CompareLib.wipe_comparator import WipeComparator
from VD_Libs.SessionLib.analysis_executors import (
    AnalysisContext,
    AnalysisExecutorRegistry,
    get_default_registry,
)
from VD_Libs.constants import DECODE_WORKERS, DEFAULT_ANALYSIS_WORKERS, LOAD_WORKERS

logger = logging.getLogger(__name__)

ResultCallback = Callable[[AnalysisResult], None]
ErrorCallback = Callable[[Exception], None]


class GenerationCounter:
    """Monotonically increasing tokens identifying the newest request."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._value

    def advance(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def is_current(self, token: int) -> bool:
        return token == self._value


@dataclass(frozen=True)
class ImagePair:
    original: Any
    edited: Any
    original_descriptor: ImageDescriptor
    edited_descriptor: ImageDescriptor
    transform: AlignmentTransform


def _checked_descriptor(
    decoded: ImageDescriptor,
    declared: Optional[ImageDescriptor],
    role: str,
) -> ImageDescriptor:
    if declared is not None and declared != decoded:
        logger.warning(
            f"{role} metadata reports {declared.width}x{declared.height} but decoded "
            f"{decoded.width}x{decoded.height}; using decoded size"
        )
    return validate_descriptor(decoded, role)


class ComparisonSession:
    """
    Coordinates decoding and analysis for one comparison view.

    Args:
        config: Analysis parameters (defaults to AnalysisConfig())
        registry: Mode executors (defaults to the global registry)
        on_result: Called with each published result, from a worker thread
        on_error: Called with a DecodeFailure/InvalidMetadata raised by a
                  pass that was still current
        analysis_workers: Worker threads for the analysis pool
        decoder: Callable turning an ImageSource into an RGBA PIL Image
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        registry: Optional[AnalysisExecutorRegistry] = None,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        analysis_workers: int = DEFAULT_ANALYSIS_WORKERS,
        decoder: Callable[[ImageSource], Any] = decode_image,
    ):
        self.config = config if config is not None else AnalysisConfig()
        self.registry = registry if registry is not None else get_default_registry()
        self.on_result = on_result
        self.on_error = on_error
        self.wipe = WipeComparator(self.config.wipe_default_position, self.config.resample)

        self._decoder = decoder
        self._load_pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=LOAD_WORKERS, thread_name_prefix="vd-load"
        )
        self._decode_pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=DECODE_WORKERS, thread_name_prefix="vd-decode"
        )
        self._analysis_pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=analysis_workers, thread_name_prefix="vd-analysis"
        )

        self._lock = threading.RLock()
        self._generations = GenerationCounter()
        self._pair_generations = GenerationCounter()
        self._mode = AnalysisMode.WIPE
        self._pair: Optional[ImagePair] = None
        self._loading_token: Optional[int] = None
        self._busy_token: Optional[int] = None
        self._pending_decodes: List[concurrent.futures.Future] = []
        self._current_result: Optional[AnalysisResult] = None

    def __enter__(self) -> "ComparisonSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def mode(self) -> AnalysisMode:
        return self._mode

    @property
    def pair(self) -> Optional[ImagePair]:
        return self._pair

    @property
    def current_result(self) -> Optional[AnalysisResult]:
        return self._current_result

    @property
    def generation(self) -> int:
        return self._generations.current

    @property
    def is_busy(self) -> bool:
        """True while a pass for the newest request is decoding or analyzing."""
        with self._lock:
            return self._busy_token is not None and self._generations.is_current(self._busy_token)

    def load_pair(
        self,
        original_source: ImageSource,
        edited_source: ImageSource,
        original_descriptor: Optional[ImageDescriptor] = None,
        edited_descriptor: Optional[ImageDescriptor] = None,
    ) -> "concurrent.futures.Future[Optional[AnalysisResult]]":
        """
        Replace the image pair and schedule a pass for the active mode.

        Declared descriptors are validated before anything is scheduled.

        Returns:
            Future resolving to the published AnalysisResult, or None when the
            pass was superseded

        Raises:
            InvalidMetadata: If a declared descriptor has a zero dimension
        """
        if original_descriptor is not None:
            validate_descriptor(original_descriptor, "original")
        if edited_descriptor is not None:
            validate_descriptor(edited_descriptor, "edited")

        with self._lock:
            pair_token = self._pair_generations.advance()
            token = self._generations.advance()
            self._busy_token = token
            self._loading_token = pair_token
            for future in self._pending_decodes:
                future.cancel()
            self._pending_decodes = []
        self.wipe.reset()

        logger.info(f"Loading image pair (generation {token})")
        return self._load_pool.submit(
            self._load_and_analyze,
            pair_token,
            original_source,
            edited_source,
            original_descriptor,
            edited_descriptor,
        )

    def set_mode(self, mode: AnalysisMode) -> "Optional[concurrent.futures.Future[Optional[AnalysisResult]]]":
        """
        Switch the active mode, discarding any in-flight pass.

        Returns:
            Future for the restarted pass, or None when no pair is available
            yet (a pending load picks up the new mode itself)
        """
        mode = AnalysisMode.from_value(mode)
        with self._lock:
            self._mode = mode
            token = self._generations.advance()
            loading = self._loading_token is not None
            pair = None if loading else self._pair
            if loading or pair is not None:
                self._busy_token = token

        logger.debug(f"Mode set to {mode.value} (generation {token})")
        if pair is None:
            return None
        return self._analysis_pool.submit(self._analyze, token, mode, pair)

    def refresh(self) -> "Optional[concurrent.futures.Future[Optional[AnalysisResult]]]":
        """Re-run the active mode on the current pair."""
        return self.set_mode(self._mode)

    def shutdown(self, wait: bool = True) -> None:
        self._load_pool.shutdown(wait=wait)
        self._analysis_pool.shutdown(wait=wait)
        self._decode_pool.shutdown(wait=wait)

    def _load_and_analyze(
        self,
        pair_token: int,
        original_source: ImageSource,
        edited_source: ImageSource,
        original_descriptor: Optional[ImageDescriptor],
        edited_descriptor: Optional[ImageDescriptor],
    ) -> Optional[AnalysisResult]:
        with self._lock:
            if not self._pair_generations.is_current(pair_token):
                logger.debug("Skipping superseded load before decoding")
                return None
            original_future = self._decode_pool.submit(self._decoder, original_source)
            edited_future = self._decode_pool.submit(self._decoder, edited_source)
            self._pending_decodes = [original_future, edited_future]
        concurrent.futures.wait([original_future, edited_future])

        try:
            original = original_future.result()
            edited = edited_future.result()
            pair = self._build_pair(original, edited, original_descriptor, edited_descriptor)
        except (Exception, concurrent.futures.CancelledError) as e:
            with self._lock:
                if not self._pair_generations.is_current(pair_token):
                    logger.debug(f"Ignoring failure of superseded load: {e!r}")
                    return None
                self._loading_token = None
                self._busy_token = None
                self._pending_decodes = []
            self._report_error(e)
            raise

        with self._lock:
            if not self._pair_generations.is_current(pair_token):
                logger.debug("Dropping decoded pair of a superseded load")
                return None
            self._pair = pair
            self._loading_token = None
            self._pending_decodes = []
            token = self._generations.current
            mode = self._mode

        return self._analysis_pool.submit(self._analyze, token, mode, pair).result()

    def _build_pair(
        self,
        original: Any,
        edited: Any,
        original_descriptor: Optional[ImageDescriptor],
        edited_descriptor: Optional[ImageDescriptor],
    ) -> ImagePair:
        original_desc = _checked_descriptor(descriptor_of(original), original_descriptor, "original")
        edited_desc = _checked_descriptor(descriptor_of(edited), edited_descriptor, "edited")
        return ImagePair(
            original=original,
            edited=edited,
            original_descriptor=original_desc,
            edited_descriptor=edited_desc,
            transform=resolve_alignment(original_desc, edited_desc),
        )

    def _analyze(self, token: int, mode: AnalysisMode, pair: ImagePair) -> Optional[AnalysisResult]:
        if not self._generations.is_current(token):
            logger.debug(f"Skipping superseded {mode.value} pass (generation {token})")
            return None

        context = AnalysisContext(
            original=pair.original,
            edited=pair.edited,
            original_descriptor=pair.original_descriptor,
            edited_descriptor=pair.edited_descriptor,
            transform=pair.transform,
            config=self.config,
            wipe_position=self.wipe.position,
        )
        try:
            payload = self.registry.execute(mode, context)
        except Exception as e:
            with self._lock:
                current = self._generations.is_current(token)
                if current:
                    self._busy_token = None
            if current:
                self._report_error(e)
            raise RuntimeError(f"Error running {mode.value} analysis: {e}") from e

        result = AnalysisResult(generation=token, payload=payload)
        return result if self._publish(result) else None

    def _publish(self, result: AnalysisResult) -> bool:
        with self._lock:
            if not self._generations.is_current(result.generation):
                logger.debug(
                    f"Dropping stale {result.mode.value} result "
                    f"(generation {result.generation}, current {self._generations.current})"
                )
                return False
            self._current_result = result
            if self._busy_token == result.generation:
                self._busy_token = None
            logger.info(f"Published {result.mode.value} result (generation {result.generation})")
            if self.on_result is not None:
                self.on_result(result)
        return True

    def _report_error(self, error: Exception) -> None:
        logger.warning(f"Analysis pass failed: {error}")
        if self.on_error is not None:
            self.on_error(error)
