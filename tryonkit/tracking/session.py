from __future__ import annotations
import asyncio, logging
from contextlib import aclosing
from enum import Enum
from functools import partial
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol

from ..errors import InitializationError
from .detector import DetectionBatch, LandmarkDetector

log = logging.getLogger(__name__)

class FrameSource(Protocol):
    def frames(self) -> AsyncIterator[Dict[str, Any]]: ...

class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"          # model loaded, not pumping frames
    IDLE = "idle"            # pumping, nothing found in the latest update
    DETECTING = "detecting"  # pumping, >=1 landmark set in the latest update
    STOPPED = "stopped"
    FAILED = "failed"

class TrackingSession:
    """
    Lifecycle around one detection capability (hands or face).

    Every detection callback replaces `detections` wholesale; nothing is
    carried over, smoothed or debounced between updates. Callbacks that
    arrive after stop_tracking(), or that belong to an earlier start, are
    dropped.
    """
    LOG_EVERY = 60

    def __init__(self, detector: LandmarkDetector):
        self.detector = detector
        self.kind = detector.kind
        self.state = SessionState.UNINITIALIZED
        self.error: Optional[str] = None
        self.detections: DetectionBatch = []
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._listeners: List[Callable[["TrackingSession"], None]] = []

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.LOADING

    @property
    def is_detecting(self) -> bool:
        return len(self.detections) > 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def initialized(self) -> bool:
        return self.state in (SessionState.READY, SessionState.IDLE, SessionState.DETECTING, SessionState.STOPPED)

    async def initialize(self) -> bool:
        """Load the model once. Failure is recorded in `error` and is final for this instance."""
        if self.state != SessionState.UNINITIALIZED:
            return self.initialized
        self.state = SessionState.LOADING
        log.info("initializing %s tracking", self.kind)
        try:
            await self.detector.initialize()
        except InitializationError as e:
            self.state = SessionState.FAILED
            self.error = str(e)
            log.error("%s", e)
            return False
        self.state = SessionState.READY
        log.info("%s tracking ready", self.kind)
        return True

    def subscribe(self, listener: Callable[["TrackingSession"], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        def unsubscribe():
            if listener in self._listeners: self._listeners.remove(listener)
        return unsubscribe

    def start_tracking(self, frame_source: FrameSource):
        if not self.initialized:
            if self.error is None:
                self.error = f"{self.kind.capitalize()} tracking not initialized"
            log.error("cannot start %s tracking: %s", self.kind, self.error)
            return
        # never two pumps on one session
        self._halt()
        self.detections = []
        self._generation += 1
        gen = self._generation
        self.detector.on_detections(partial(self._on_detections, gen))
        self.state = SessionState.IDLE
        self._task = asyncio.get_running_loop().create_task(self._pump(frame_source, gen),
                                                           name=f"{self.kind}-pump-{gen}")
        log.info("%s tracking started", self.kind)

    def stop_tracking(self):
        was_running = self.is_running
        self._halt()
        self.detections = []
        if self.initialized:
            self.state = SessionState.STOPPED
        if was_running:
            log.info("%s tracking stopped", self.kind)

    async def close(self):
        """Stop and release the model. The instance is not reusable afterwards."""
        task = self._task
        self.stop_tracking()
        if task is not None and not task.done():
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.detector.release()

    def _halt(self):
        # bumping the generation orphans any in-flight callback
        self._generation += 1
        self.detector.on_detections(None)
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _on_detections(self, generation: int, batch: DetectionBatch):
        if generation != self._generation or self.state not in (SessionState.IDLE, SessionState.DETECTING):
            log.debug("discarding late %s detections", self.kind)
            return
        self.detections = list(batch)
        self.state = SessionState.DETECTING if self.detections else SessionState.IDLE
        for listener in list(self._listeners):
            listener(self)

    async def _pump(self, frame_source: FrameSource, generation: int):
        count = 0
        try:
            async with aclosing(frame_source.frames()) as frames:
                async for frame in frames:
                    if generation != self._generation:
                        break
                    count += 1
                    if count % self.LOG_EVERY == 0:
                        h, w = frame["image"].shape[:2]
                        log.debug("%s: processing frame %d (%dx%d)", self.kind, count, w, h)
                    try:
                        await self.detector.feed(frame)
                    except Exception as e:
                        log.warning("%s: dropped frame %d: %s", self.kind, count, e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # the frame source reports its own errors; the pump just ends
            log.error("%s: frame source failed: %s", self.kind, e)
        log.debug("%s pump finished after %d frames", self.kind, count)
