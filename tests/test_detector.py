import asyncio
import pytest
from fakes import frame, hand
from tryonkit.errors import InitializationError, TransientFrameError
from tryonkit.tracking.detector import LandmarkDetector

class Estimator:
    def __init__(self, result=None, boom=False):
        self.result = result or []; self.boom = boom; self.closed = False
    def __call__(self, image):
        if self.boom: raise RuntimeError("graph error")
        return self.result
    def close(self):
        self.closed = True

def test_initialize_failure_becomes_initialization_error():
    def factory(): raise RuntimeError("model file missing")
    det = LandmarkDetector("hand", factory)
    with pytest.raises(InitializationError, match="Failed to load hand tracking model"):
        asyncio.run(det.initialize())
    assert not det.ready

def test_feed_delivers_batch_to_callback():
    est = Estimator([hand()])
    det = LandmarkDetector("hand", lambda: est)
    got = []
    async def scenario():
        await det.initialize()
        det.on_detections(got.append)
        await det.feed(frame())
        det.on_detections(None)
        await det.feed(frame())
    asyncio.run(scenario())
    assert len(got) == 1 and len(got[0]) == 1

def test_feed_failure_is_transient():
    det = LandmarkDetector("face", lambda: Estimator(boom=True))
    async def scenario():
        await det.initialize()
        with pytest.raises(TransientFrameError):
            await det.feed(frame())
    asyncio.run(scenario())

def test_feed_before_initialize_and_release():
    est = Estimator()
    det = LandmarkDetector("face", lambda: est)
    with pytest.raises(TransientFrameError):
        asyncio.run(det.feed(frame()))
    asyncio.run(det.initialize())
    det.release()
    assert est.closed and not det.ready
    det.release()
