import numpy as np
import pytest
from fakes import face, hand
from tryonkit.catalog import lookup
from tryonkit.compose.overlay import OverlayCompositor

W, H = 1000, 500

def test_ring_placement():
    comp = OverlayCompositor()
    out = comp.update(lookup("ring-1"), [hand(base=(0.4,0.6), pip=(0.4,0.5))], W, H)
    assert list(out) == ["ring"]
    r = out["ring"]
    assert r.visible
    assert r.x == pytest.approx(600)    # mirrored: (1-0.4)*1000
    assert r.y == pytest.approx(275)
    assert r.scale == pytest.approx(0.1 * W * 2.5 * 0.15)
    assert r.rotation == pytest.approx(90)  # upward finger, angle negated

def test_ring_uses_first_hand_and_offsets_after_conversion():
    comp = OverlayCompositor()
    hands = [hand(base=(0.2,0.6), pip=(0.3,0.6)), hand(base=(0.8,0.2), pip=(0.8,0.1))]
    r = comp.update(lookup("ring-2"), hands, W, H)["ring"]   # offset_y=-5
    assert r.x == pytest.approx((1-0.25)*W)
    assert r.y == pytest.approx(0.6*H - 5)
    assert r.rotation == pytest.approx(0)

def test_necklace_placement():
    comp = OverlayCompositor()
    n = comp.update(lookup("necklace-1"), [face()], W, H)["necklace"]
    assert n.visible
    assert n.x == pytest.approx(500)
    assert n.y == pytest.approx(0.8*H + 30)
    assert n.scale == pytest.approx(0.4 * W * 1.2 * 0.8)
    assert n.rotation == pytest.approx(0)

def test_necklace_rotation_follows_jaw_tilt():
    comp = OverlayCompositor()
    n = comp.update(lookup("necklace-1"), [face(left_jaw=(0.3,0.4), right_jaw=(0.7,0.8))], W, H)["necklace"]
    assert n.rotation == pytest.approx(-45)

def test_earrings_mirrored_with_opposite_offsets():
    comp = OverlayCompositor()
    out = comp.update(lookup("earring-3"), [face()], W, H)   # offset_x=5, offset_y=5
    assert set(out) == {"left_earring", "right_earring"}
    left, right = out["left_earring"], out["right_earring"]
    assert left.visible and right.visible
    assert left.x == pytest.approx((1-0.28)*W + 5)
    assert right.x == pytest.approx((1-0.72)*W - 5)
    assert left.y == right.y == pytest.approx(0.55*H + 5)
    assert left.scale == right.scale == pytest.approx(0.4 * W * 1.0 * 0.3)
    assert left.rotation == right.rotation == 0

def test_lost_detection_hides_but_keeps_numbers():
    comp = OverlayCompositor()
    product = lookup("ring-1")
    before = comp.update(product, [hand()], W, H)["ring"]
    after = comp.update(product, [], W, H)["ring"]
    assert not after.visible
    assert (after.x, after.y, after.scale, after.rotation) == (before.x, before.y, before.scale, before.rotation)
    again = comp.update(product, [hand()], W, H)["ring"]
    assert again.visible

def test_slot_count_is_fixed():
    comp = OverlayCompositor()
    for pid, n in (("ring-1", 1), ("necklace-2", 1), ("earring-1", 2)):
        assert len(comp.update(lookup(pid), [], W, H)) == n
        assert all(not t.visible for t in comp.update(lookup(pid), [], W, H).values())

def test_zero_length_finger_is_hidden():
    comp = OverlayCompositor()
    r = comp.update(lookup("ring-1"), [hand(base=(0.5,0.5), pip=(0.5,0.5))], W, H)["ring"]
    assert not r.visible

def test_collapsed_face_is_hidden():
    comp = OverlayCompositor()
    flat = face(left_jaw=(0.5,0.5), right_jaw=(0.5,0.5))
    assert not comp.update(lookup("necklace-1"), [flat], W, H)["necklace"].visible
    assert not any(t.visible for t in comp.update(lookup("earring-1"), [flat], W, H).values())

def test_bad_landmarks_never_raise():
    comp = OverlayCompositor()
    short = {"pts": np.zeros((5,2)), "handedness": None, "score": 0.0}
    assert not comp.update(lookup("necklace-1"), [short], W, H)["necklace"].visible
    assert not comp.update(lookup("ring-1"), [{"handedness": "left"}], W, H)["ring"].visible
    nan = hand(base=(float("nan"), 0.5))
    assert not comp.update(lookup("ring-1"), [nan], W, H)["ring"].visible

def test_other_slots_untouched():
    comp = OverlayCompositor()
    comp.update(lookup("ring-1"), [hand()], W, H)
    comp.update(lookup("earring-1"), [face()], W, H)
    assert comp.slots["ring"].visible
    assert not comp.slots["necklace"].visible
