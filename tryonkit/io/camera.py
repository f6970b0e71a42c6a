from __future__ import annotations
import asyncio, cv2, logging, time
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ..errors import InitializationError

log = logging.getLogger(__name__)

class CameraSource:
    """
    Live camera shared by several readers.

    One pump task reads the device; every frames() iterator gets the most
    recent frame each time a new one lands. Slow readers skip frames rather
    than queueing them.
    """
    def __init__(self, camera: int|str=0, width: int=1280, height: int=720):
        self.camera = camera; self.width = width; self.height = height
        self._cap = None
        self._task: Optional[asyncio.Task] = None
        self._cond: Optional[asyncio.Condition] = None
        self._latest: Optional[Dict[str,Any]] = None
        self._seq = 0
        self._closed = False
        self._error_cbs: List[Callable[[str], None]] = []
        self.error: Optional[str] = None

    @property
    def size(self) -> tuple[int,int]:
        if self._latest is not None:
            h, w = self._latest["image"].shape[:2]
            return w, h
        return self.width, self.height

    def on_error(self, cb: Callable[[str], None]):
        self._error_cbs.append(cb)

    def _open(self):
        cap = cv2.VideoCapture(self.camera)
        if self.width:  cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height: cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        if not cap.isOpened():
            cap.release()
            return None
        return cap

    async def start(self):
        if self._task is not None: return
        self._closed = False; self.error = None
        self._cond = asyncio.Condition()
        cap = await asyncio.to_thread(self._open)
        if cap is None:
            self._report("Cannot open camera")
            raise InitializationError("Cannot open camera", context={"camera": self.camera})
        self._cap = cap
        log.info("camera %s opened", self.camera)
        self._task = asyncio.get_running_loop().create_task(self._pump(), name="camera-pump")

    def _report(self, message: str):
        self.error = message
        log.error("camera %s: %s", self.camera, message)
        for cb in list(self._error_cbs):
            cb(message)

    async def _pump(self):
        try:
            while True:
                try:
                    ok, img = await asyncio.to_thread(self._cap.read)
                except Exception as e:
                    self._report(f"Camera read failed: {e}")
                    break
                if not ok:
                    self._report("Camera stopped delivering frames")
                    break
                async with self._cond:
                    self._seq += 1
                    self._latest = {"image": img, "meta": {"ts": time.time(), "seq": self._seq}}
                    self._cond.notify_all()
        finally:
            await self._finish()

    async def _finish(self):
        self._closed = True
        if self._cond is not None:
            async with self._cond:
                self._cond.notify_all()

    async def frames(self) -> AsyncIterator[Dict[str,Any]]:
        if self._cond is None: return
        seen = 0
        while True:
            async with self._cond:
                await self._cond.wait_for(lambda: self._closed or self._seq != seen)
                if self._closed: return
                seen = self._seq; frame = self._latest
            yield frame

    async def close(self):
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        else:
            await self._finish()
        if self._cap is not None:
            self._cap.release(); self._cap = None
            log.info("camera %s released", self.camera)
