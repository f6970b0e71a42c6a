import asyncio
from fakes import FakeDetector, ListSource, drain, face, hand
from tryonkit.app import TryOnView
from tryonkit.catalog import lookup
from tryonkit.tracking.session import SessionState

def make_view(product_id, hands=(), faces=(), source=None, face_fails=0):
    attempts = {"face": 0}
    def face_factory():
        attempts["face"] += 1
        return FakeDetector(faces, kind="face", fail_init=attempts["face"] <= face_fails)
    source = source or ListSource(n=2)
    return TryOnView(lookup(product_id), source, lambda: FakeDetector(hands, kind="hand"), face_factory)

def test_ring_runs_hand_session_only():
    async def scenario():
        view = make_view("ring-1", hands=[[hand()], [hand()]])
        published = []
        view.subscribe(lambda p, overlays: published.append(overlays["ring"].visible))
        assert view.detection_hint == "Loading AR model..."
        await view.start()
        assert view.sessions["hand"].is_running
        assert view.sessions["face"].state == SessionState.STOPPED
        await drain(view.sessions["hand"])
        assert view.is_detecting and view.status_text == "Tracking Active"
        assert view.detection_hint is None
        assert view.overlays["ring"].visible
        assert published == [False, True, True]
        await view.close()
        assert view.source.closed
    asyncio.run(scenario())

def test_switching_product_swaps_sessions():
    async def scenario():
        view = make_view("ring-1", faces=[[face()], [face()]], source=ListSource(n=2))
        await view.start()
        await drain(view.sessions["hand"])
        assert view.detection_hint == "Show your hand to try on the ring"
        view.select_product(lookup("earring-2"))
        assert view.sessions["hand"].state == SessionState.STOPPED
        assert view.sessions["face"].is_running
        await drain(view.sessions["face"])
        assert all(t.visible for t in view.overlays.values()) and len(view.overlays) == 2
        assert not view.compositor.slots["ring"].visible
        await view.close()
    asyncio.run(scenario())

def test_face_hint_when_searching():
    async def scenario():
        view = make_view("necklace-3", faces=[[]])
        await view.start()
        await drain(view.sessions["face"])
        assert view.detection_hint == "Position your face in the camera"
        assert view.status_text == "Searching..."
        assert not view.overlays["necklace"].visible
        await view.close()
    asyncio.run(scenario())

def test_model_failure_then_retry():
    async def scenario():
        view = make_view("necklace-1", faces=[[face()]], face_fails=1)
        await view.start()
        assert "Failed to load face tracking model" in view.tracking_error
        assert not view.sessions["face"].is_running
        broken = view.sessions["face"]
        await view.retry()
        assert broken.detector.released
        assert broken._listeners == [] and sorted(view._unsubs) == ["face", "hand"]
        assert view.tracking_error is None
        assert view.sessions["face"] is not broken and view.sessions["face"].is_running
        await drain(view.sessions["face"])
        assert view.overlays["necklace"].visible
        await view.close()
    asyncio.run(scenario())

def test_camera_failure_and_runtime_error():
    async def scenario():
        src = ListSource(endless=True)
        src.fail_start = True
        view = make_view("ring-1", hands=[[hand()]]*50, source=src)
        await view.start()
        assert view.camera_error == "Cannot open camera"
        assert view.detection_hint is None and view.sessions == {}
        src.fail_start = False
        await view.retry()
        assert view.camera_error is None and view.sessions["hand"].is_running
        for _ in range(5): await asyncio.sleep(0)
        src.report("Camera stopped delivering frames")
        assert view.camera_error == "Camera stopped delivering frames"
        assert not view.sessions["hand"].is_running and not view.is_detecting
        assert not view.overlays["ring"].visible
        await view.close()
    asyncio.run(scenario())
