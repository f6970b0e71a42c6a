"""
Detection capability: wraps a blocking landmark estimator (frame -> list of
landmark sets) behind the async initialize / on_detections / feed / release
contract the tracking session consumes.
"""
from __future__ import annotations
import asyncio, logging, threading
from typing import Any, Callable, Dict, List, Optional

from ..errors import InitializationError, TransientFrameError
from ..config import HandsConfig, FaceConfig

log = logging.getLogger(__name__)

LandmarkSet = Dict[str, Any]          # {"pts": ndarray, "handedness": str|None, "score": float}
DetectionBatch = List[LandmarkSet]
DetectionCallback = Callable[[DetectionBatch], None]

class LandmarkDetector:
    def __init__(self, kind: str, factory: Callable[[], Callable[[Any], DetectionBatch]]):
        self.kind = kind
        self._factory = factory
        self._estimator = None
        self._callback: Optional[DetectionCallback] = None
        # inference runs in worker threads; a cancelled feed may still be running
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._estimator is not None

    async def initialize(self):
        if self._estimator is not None: return
        try:
            self._estimator = await asyncio.to_thread(self._factory)
        except Exception as e:
            raise InitializationError(f"Failed to load {self.kind} tracking model", cause=e) from e

    def on_detections(self, callback: Optional[DetectionCallback]):
        self._callback = callback

    def _run(self, image):
        with self._lock:
            if self._estimator is None:
                raise TransientFrameError(f"{self.kind} detector released")
            return self._estimator(image)

    async def feed(self, frame: Dict[str, Any]):
        if self._estimator is None:
            raise TransientFrameError(f"{self.kind} detector not initialized")
        try:
            batch = await asyncio.to_thread(self._run, frame["image"])
        except TransientFrameError:
            raise
        except Exception as e:
            raise TransientFrameError("frame processing failed", context={"detector": self.kind}, cause=e) from e
        cb = self._callback
        if cb is not None:
            cb(batch)

    def release(self):
        self._callback = None
        with self._lock:
            est, self._estimator = self._estimator, None
        close = getattr(est, "close", None)
        if close is not None:
            close()

def hand_detector(cfg: HandsConfig|None = None) -> LandmarkDetector:
    cfg = cfg or HandsConfig()
    def build():
        from ..hand.landmarks import HandLandmarks
        return HandLandmarks(max_hands=cfg.max_hands, model_complexity=cfg.model_complexity,
                             min_detection_confidence=cfg.min_detection_confidence,
                             min_tracking_confidence=cfg.min_tracking_confidence)
    return LandmarkDetector("hand", build)

def face_detector(cfg: FaceConfig|None = None) -> LandmarkDetector:
    cfg = cfg or FaceConfig()
    def build():
        from ..face.landmarks import FaceLandmarks
        return FaceLandmarks(max_num_faces=cfg.max_faces, refine_landmarks=cfg.refine_landmarks,
                             min_detection_confidence=cfg.min_detection_confidence,
                             min_tracking_confidence=cfg.min_tracking_confidence)
    return LandmarkDetector("face", build)
