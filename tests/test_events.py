import json
from tryonkit.runtime.events import OverlayTransform, events_for

def test_default_transform_is_hidden():
    t = OverlayTransform()
    assert not t.visible and t.scale == 1.0

def test_events_one_per_slot():
    evs = events_for("earring-1", {"left_earring": OverlayTransform(x=1, visible=True), "right_earring": OverlayTransform()})
    assert [e.slot for e in evs] == ["left_earring", "right_earring"]
    data = json.loads(evs[0].model_dump_json())
    assert data["product_id"] == "earring-1" and data["transform"]["visible"] is True
