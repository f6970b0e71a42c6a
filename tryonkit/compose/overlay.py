"""
Maps the latest detection batch onto overlay slots for the active jewelry type.

    type      landmarks                     scale                                 rotation
    ring      index MCP -> index PIP        seg * width * base_scale * 0.15       -deg(seg angle)
    necklace  left jaw -> right jaw, chin   face_width * width * base_scale * 0.8 -deg(jaw angle)
    earring   left / right earlobe          face_width * width * base_scale * 0.3 0

The view is a selfie mirror: x is flipped (1 - x) before converting to pixels
and angles are negated. Product offsets are added in pixel space afterwards;
the right earring takes -offset_x.
"""
from __future__ import annotations
import logging, math
from typing import Callable, Dict, Sequence

from ..catalog import Product
from ..errors import DegenerateGeometryError
from ..geometry import Point, compute_transform, normalized_to_pixel_coords, rad_to_deg
from ..anatomy import INDEX_MCP, INDEX_PIP, LM, face_width
from ..runtime.events import OverlayTransform
from ..tracking.detector import DetectionBatch, LandmarkSet

log = logging.getLogger(__name__)

RING_FACTOR = 0.15
NECKLACE_FACTOR = 0.8
EARRING_FACTOR = 0.3

SLOTS = ("ring", "necklace", "left_earring", "right_earring")
SLOTS_FOR_TYPE = {"ring": ("ring",), "necklace": ("necklace",), "earring": ("left_earring", "right_earring")}
TRACKER_FOR_TYPE = {"ring": "hand", "necklace": "face", "earring": "face"}

def _point(pts, idx: int) -> Point:
    if pts is None or idx >= len(pts):
        raise DegenerateGeometryError("missing landmark", context={"index": idx})
    p = Point.from_row(pts[idx])
    if not (math.isfinite(p.x) and math.isfinite(p.y)):
        raise DegenerateGeometryError("non-finite landmark", context={"index": idx})
    return p

def _positive(value: float, what: str) -> float:
    if not math.isfinite(value) or value <= 0:
        raise DegenerateGeometryError(f"degenerate {what}", context={what: value})
    return value

def _mirrored_px(p: Point, width: float, height: float) -> tuple[float, float]:
    return normalized_to_pixel_coords(1 - p.x, p.y, width, height)

def _place_ring(hand: LandmarkSet, product: Product, width: float, height: float) -> Dict[str, OverlayTransform]:
    pts = hand.get("pts")
    t = compute_transform(_point(pts, INDEX_MCP), _point(pts, INDEX_PIP))
    _positive(t.scale, "scale")
    px, py = _mirrored_px(Point(t.x, t.y), width, height)
    return {"ring": OverlayTransform(x=px + product.offset_x, y=py + product.offset_y,
                                     scale=t.scale * width * product.base_scale * RING_FACTOR,
                                     rotation=-rad_to_deg(t.rotation_rad), visible=True)}

def _place_necklace(face: LandmarkSet, product: Product, width: float, height: float) -> Dict[str, OverlayTransform]:
    pts = face.get("pts")
    jaw = compute_transform(_point(pts, LM["left_jaw"]), _point(pts, LM["right_jaw"]))
    fw = _positive(face_width(pts), "face_width")
    px, py = _mirrored_px(_point(pts, LM["chin_center"]), width, height)
    return {"necklace": OverlayTransform(x=px + product.offset_x, y=py + product.offset_y,
                                         scale=fw * width * product.base_scale * NECKLACE_FACTOR,
                                         rotation=-rad_to_deg(jaw.rotation_rad), visible=True)}

def _place_earrings(face: LandmarkSet, product: Product, width: float, height: float) -> Dict[str, OverlayTransform]:
    pts = face.get("pts")
    # jaw points are checked first so a truncated mesh reads as degenerate
    _point(pts, LM["left_jaw"]); _point(pts, LM["right_jaw"])
    scale = _positive(face_width(pts), "face_width") * width * product.base_scale * EARRING_FACTOR
    out = {}
    # mirroring puts the subject's left ear on the viewer's right, so offset_x flips per side
    for slot, key, sign in (("left_earring", "left_earlobe", 1), ("right_earring", "right_earlobe", -1)):
        p = _point(pts, LM[key])
        # single-landmark placement: p1 == p2, only the position is used
        t = compute_transform(p, p)
        px, py = _mirrored_px(Point(t.x, t.y), width, height)
        out[slot] = OverlayTransform(x=px + sign * product.offset_x, y=py + product.offset_y,
                                     scale=scale, rotation=0.0, visible=True)
    return out

PLACERS: Dict[str, Callable[[LandmarkSet, Product, float, float], Dict[str, OverlayTransform]]] = {
    "ring": _place_ring,
    "necklace": _place_necklace,
    "earring": _place_earrings,
}

class OverlayCompositor:
    """
    Holds one OverlayTransform per slot and refreshes the slots of the active
    product type on every detection update. Never raises; anything that can't
    be placed is hidden with its last numbers kept.
    """
    def __init__(self):
        self.slots: Dict[str, OverlayTransform] = {s: OverlayTransform() for s in SLOTS}

    def overlays(self, product: Product) -> Dict[str, OverlayTransform]:
        return {s: self.slots[s] for s in SLOTS_FOR_TYPE[product.type]}

    def hide(self, slots: Sequence[str] = SLOTS):
        for s in slots:
            if self.slots[s].visible:
                self.slots[s] = self.slots[s].model_copy(update={"visible": False})

    def update(self, product: Product, detections: DetectionBatch, width: float, height: float) -> Dict[str, OverlayTransform]:
        slots = SLOTS_FOR_TYPE[product.type]
        if not detections:
            self.hide(slots)
            return self.overlays(product)
        try:
            placed = PLACERS[product.type](detections[0], product, width, height)
        except DegenerateGeometryError as e:
            log.debug("hiding %s: %s", product.type, e)
            self.hide(slots)
        else:
            self.slots.update(placed)
        return self.overlays(product)
