from __future__ import annotations
import asyncio, logging
from typing import Callable, Dict, List, Optional

from .catalog import Product
from .compose.overlay import OverlayCompositor, TRACKER_FOR_TYPE
from .errors import InitializationError
from .runtime.events import OverlayTransform
from .tracking.detector import LandmarkDetector
from .tracking.session import TrackingSession

log = logging.getLogger(__name__)

OverlayListener = Callable[[Product, Dict[str, OverlayTransform]], None]

class TryOnView:
    """
    One try-on screen: a shared frame source, a hand session, a face session
    and the compositor. Only the session the current product needs pumps
    frames; the other is kept stopped.
    """
    def __init__(self, product: Product, source,
                 hand_factory: Callable[[], LandmarkDetector],
                 face_factory: Callable[[], LandmarkDetector],
                 compositor: Optional[OverlayCompositor] = None):
        self.product = product
        self.source = source
        self._factories = {"hand": hand_factory, "face": face_factory}
        self.sessions: Dict[str, TrackingSession] = {}
        self.compositor = compositor or OverlayCompositor()
        self.camera_error: Optional[str] = None
        self._listeners: List[OverlayListener] = []
        self._unsubs: Dict[str, Callable[[], None]] = {}
        self._started = False
        if hasattr(source, "on_error"):
            source.on_error(self._on_camera_error)

    # state ---------------------------------------------------------------
    @property
    def tracker(self) -> str:
        return TRACKER_FOR_TYPE[self.product.type]

    @property
    def active(self) -> Optional[TrackingSession]:
        return self.sessions.get(self.tracker)

    @property
    def is_loading(self) -> bool:
        s = self.active
        return s is None or s.is_loading

    @property
    def is_detecting(self) -> bool:
        s = self.active
        return s is not None and s.is_detecting

    @property
    def tracking_error(self) -> Optional[str]:
        s = self.active
        return s.error if s is not None else None

    @property
    def detection_hint(self) -> Optional[str]:
        if self.camera_error: return None
        if self.is_loading: return "Loading AR model..."
        if self.is_detecting: return None
        if self.product.type == "ring":
            return "Show your hand to try on the ring"
        return "Position your face in the camera"

    @property
    def status_text(self) -> str:
        return "Tracking Active" if self.is_detecting else "Searching..."

    @property
    def overlays(self) -> Dict[str, OverlayTransform]:
        return self.compositor.overlays(self.product)

    def subscribe(self, listener: OverlayListener) -> Callable[[], None]:
        self._listeners.append(listener)
        def unsubscribe():
            if listener in self._listeners: self._listeners.remove(listener)
        return unsubscribe

    # lifecycle -----------------------------------------------------------
    async def start(self):
        """Open the camera, load both models, start the one this product needs."""
        self.camera_error = None
        try:
            await self.source.start()
        except InitializationError as e:
            self.camera_error = str(e)
            return
        await self._mount_sessions()
        self._started = True
        self._activate()

    def select_product(self, product: Product):
        log.info("switching to %s (%s)", product.id, product.type)
        self.product = product
        self.compositor.hide()
        if self._started:
            self._activate()

    async def retry(self):
        """Discard failed sessions (and a failed camera) and mount them again."""
        log.info("retrying try-on view")
        failed = [k for k, s in self.sessions.items() if s.error is not None]
        for k in failed:
            self._unsubs.pop(k)()
            await self.sessions.pop(k).close()
        if self.camera_error is not None:
            await self.source.close()
            self._started = False
            await self.start()
            return
        await self._mount_sessions()
        if self._started:
            self._activate()

    async def close(self):
        for unsub in self._unsubs.values(): unsub()
        self._unsubs.clear()
        for s in list(self.sessions.values()):
            await s.close()
        self.sessions.clear()
        await self.source.close()
        self._started = False

    # internals -----------------------------------------------------------
    async def _mount_sessions(self):
        fresh = {k: TrackingSession(f()) for k, f in self._factories.items() if k not in self.sessions}
        for k, s in fresh.items():
            self.sessions[k] = s
            self._unsubs[k] = s.subscribe(self._on_session_update)
        await asyncio.gather(*(s.initialize() for s in fresh.values()))

    def _activate(self):
        for kind, s in self.sessions.items():
            if kind == self.tracker:
                s.start_tracking(self.source)
            else:
                s.stop_tracking()
        self._publish(self.compositor.overlays(self.product))

    def _on_session_update(self, session: TrackingSession):
        if session.kind != self.tracker:
            return
        w, h = self.source.size
        overlays = self.compositor.update(self.product, session.detections, w, h)
        self._publish(overlays)

    def _publish(self, overlays: Dict[str, OverlayTransform]):
        for listener in list(self._listeners):
            listener(self.product, overlays)

    def _on_camera_error(self, message: str):
        self.camera_error = message
        for s in self.sessions.values():
            s.stop_tracking()
        self.compositor.hide()
